# shellaudit — Shell Script Security Analysis Service
# Copyright (C) 2026 shellaudit Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Script registry: filename → Script, loaded from a directory.

Only regular files ending in ``.sh`` directly inside the directory are
loaded, in filename order. Lookups take the shared side of a reader/writer
lock; ``reload`` reads the directory first and then swaps the new mapping in
under the exclusive side, so a failed reload keeps the previous scripts.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from pydantic import BaseModel, ConfigDict

from shellaudit.errors import LoadError, NotFoundError

logger = logging.getLogger(__name__)

SCRIPT_SUFFIX = ".sh"


class Script(BaseModel):
    """A loaded shell script. Identity is ``filename``."""

    model_config = ConfigDict(frozen=True)

    name: str
    filename: str
    content: str


class ReadWriteLock:
    """Many concurrent readers or one writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


def load_script(file_path: Path) -> Script:
    """Read one script file. Raises LoadError if it cannot be read."""
    try:
        content = file_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise LoadError(f"Could not read {file_path}: {e}") from e
    return Script(
        name=file_path.stem if file_path.name.endswith(SCRIPT_SUFFIX) else file_path.name,
        filename=file_path.name,
        content=content,
    )


def discover_scripts(directory: Path) -> list[Path]:
    """List the ``.sh`` files directly inside ``directory``, sorted by name."""
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise LoadError(f"Could not read script directory {directory}: {e}") from e
    return [p for p in entries if p.name.endswith(SCRIPT_SUFFIX) and p.is_file()]


class ScriptRegistry:
    """Thread-safe name → Script lookup backed by a directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self._scripts: dict[str, Script] = {}
        self._lock = ReadWriteLock()

    def _read_directory(self) -> dict[str, Script]:
        scripts: dict[str, Script] = {}
        for path in discover_scripts(self.directory):
            script = load_script(path)
            scripts[script.filename] = script
        return scripts

    def load(self) -> int:
        """(Re)load every script from the directory. Returns the script count.

        Raises:
            LoadError: the directory or a script file could not be read.
                The registry contents are left unchanged.
        """
        scripts = self._read_directory()
        with self._lock.write():
            self._scripts = scripts
        logger.info("Loaded %d scripts from %s", len(scripts), self.directory)
        return len(scripts)

    reload = load

    def lookup(self, name: str) -> Script:
        """Return the script registered as ``name`` (``deploy.sh`` or ``deploy``).

        Raises:
            NotFoundError: no script has that filename or name.
        """
        with self._lock.read():
            script = self._scripts.get(name)
            if script is None and not name.endswith(SCRIPT_SUFFIX):
                script = self._scripts.get(name + SCRIPT_SUFFIX)
        if script is None:
            raise NotFoundError(name)
        return script

    def list(self) -> list[str]:
        """Filenames of all loaded scripts, in registry order."""
        with self._lock.read():
            return list(self._scripts)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._scripts)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        try:
            self.lookup(name)
        except NotFoundError:
            return False
        return True
