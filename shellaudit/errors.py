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

"""Error taxonomy shared by the engine, the script registry, the API and the CLI.

ConfigError and LoadError are fatal at startup. AuthError and NotFoundError
surface as 401 / 404 responses. AnalysisError is raised for a single rule
whose pattern cannot be evaluated; the scanner logs it and skips the rule.
"""

from __future__ import annotations


class ShellAuditError(Exception):
    """Base class for all shellaudit errors."""


class ConfigError(ShellAuditError):
    """Configuration (service config or rule file) is missing or malformed."""


class LoadError(ShellAuditError):
    """The script directory or one of its files could not be read."""


class AuthError(ShellAuditError):
    """Bearer token is missing, malformed, badly signed or expired."""


class NotFoundError(ShellAuditError):
    """No script is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Script not found: {name}")
        self.name = name


class AnalysisError(ShellAuditError):
    """A single rule's pattern failed to compile or evaluate."""

    def __init__(self, rule_id: str, reason: str) -> None:
        super().__init__(f"Rule {rule_id} skipped: {reason}")
        self.rule_id = rule_id
        self.reason = reason
