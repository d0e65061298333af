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

"""Service configuration, read from a JSON file and validated up front.

Example ``config.json``::

    {
      "scriptdir": "./scripts",
      "serveraddr": "0.0.0.0",
      "serverport": 8080,
      "jwtsecret": "change-me",
      "rulesfile": "./extra_rules.yaml",
      "loglevel": "INFO"
    }
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from shellaudit.errors import ConfigError

CONFIG_ENV_VAR = "SHELLAUDIT_CONFIG"
DEFAULT_CONFIG_FILE = "config.json"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class ServiceConfig(BaseModel):
    """Validated service settings. JSON keys are the field aliases."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    script_dir: str = Field(alias="scriptdir", min_length=1)
    bind_address: str = Field(default="127.0.0.1", alias="serveraddr", min_length=1)
    bind_port: int = Field(alias="serverport", ge=1, le=65535)
    signing_secret: str = Field(alias="jwtsecret", min_length=1, repr=False)
    rules_file: Optional[str] = Field(default=None, alias="rulesfile")
    log_level: str = Field(default="INFO", alias="loglevel")

    @field_validator("signing_secret")
    @classmethod
    def _secret_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("signing secret must not be blank")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"loglevel must be one of {', '.join(_LOG_LEVELS)}")
        return level


def default_config_path() -> Path:
    """Config path from $SHELLAUDIT_CONFIG, else ./config.json."""
    return Path(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE))


def parse_config(data: object) -> ServiceConfig:
    """Validate an already-decoded JSON object."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object")
    try:
        return ServiceConfig(**data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from e


def load_config(config_path: str | Path | None = None) -> ServiceConfig:
    """Read and validate the JSON config file.

    Raises:
        ConfigError: the file is missing, is not valid JSON, or fails
            validation.
    """
    path = Path(config_path) if config_path is not None else default_config_path()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e
    return parse_config(data)
