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

"""Canonical JSON output for analysis results.

Produces deterministic JSON output:
- Sorted keys
- 2-space indentation
- LF line endings
- Trailing newline
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from shellaudit.models.report import AnalysisResult

logger = logging.getLogger(__name__)


def to_canonical_json(data: dict[str, Any] | Any) -> str:
    """Convert data to canonical JSON string.

    Pydantic models are dumped with their public (camelCase) keys.
    """
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json", by_alias=True)

    result = json.dumps(data, sort_keys=True, indent=2, ensure_ascii=False)
    result = result.replace("\r\n", "\n").replace("\r", "\n")
    if not result.endswith("\n"):
        result += "\n"
    return result


def write_result(result: AnalysisResult, output_path: str | Path) -> Path:
    """Save ``result`` as canonical JSON and return the path written.

    Written to a sibling ``.tmp`` file first, then moved into place.
    """
    path = Path(output_path)
    tmp_path = path.with_name(path.name + ".tmp")

    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        tmp_path.write_text(to_canonical_json(result), encoding="utf-8", newline="\n")
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
    logger.info(
        "Saved analysis of %s (%d findings) to %s",
        result.script_name or "<unnamed>", len(result.findings), path,
    )
    return path
