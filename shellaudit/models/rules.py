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

"""Pydantic models for detection rules."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator

from shellaudit.models.severity import Severity


class RuleCategory(str, Enum):
    """What kind of weakness a rule detects."""

    REMOTE_CODE_EXEC = "REMOTE_CODE_EXEC"
    CREDENTIAL_LEAK = "CREDENTIAL_LEAK"
    UNSAFE_PERMISSIONS = "UNSAFE_PERMISSIONS"
    PRIVILEGE_ESCALATION = "PRIVILEGE_ESCALATION"
    INSECURE_TRANSPORT = "INSECURE_TRANSPORT"
    COMMAND_INJECTION = "COMMAND_INJECTION"


# Categories describing shell code, which also apply to heredoc bodies.
SHELL_CONTENT_CATEGORIES = frozenset({
    RuleCategory.REMOTE_CODE_EXEC,
    RuleCategory.UNSAFE_PERMISSIONS,
    RuleCategory.PRIVILEGE_ESCALATION,
    RuleCategory.INSECURE_TRANSPORT,
    RuleCategory.COMMAND_INJECTION,
})


class Rule(BaseModel):
    """A single declarative detection rule.

    ``pattern`` is Python regular-expression source. It is compiled by the
    scanner, not here, so a malformed pattern only disables its own rule.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    category: RuleCategory
    pattern: str
    severity: Severity
    description: str
    remediation: str = ""

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("rule id must not be empty")
        return value.strip()

    @property
    def scans_heredocs(self) -> bool:
        """True if the rule also applies inside heredoc bodies."""
        return self.category in SHELL_CONTENT_CATEGORIES
