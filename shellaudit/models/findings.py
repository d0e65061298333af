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

"""Pydantic models for raw rule matches and findings."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from shellaudit.models.rules import Rule, RuleCategory
from shellaudit.models.severity import Severity


class RawMatch(BaseModel):
    """A single rule hit as emitted by the scanner, before aggregation."""

    model_config = ConfigDict(frozen=True)

    rule: Rule
    line: int
    column: int
    snippet: str = ""


class Finding(BaseModel):
    """One located security observation produced by a rule match.

    Core fields:
      rule_id, category, severity, line, column

    Operator-facing fields:
      snippet    : the trimmed source line the match was found on
      description: what the rule detects
      remediation: how to fix it

    Serialized with camelCase keys (``ruleId``); constructed by field name.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rule_id: str = Field(alias="ruleId")
    category: RuleCategory
    severity: Severity
    line: int  # 1-based
    column: int  # 1-based
    snippet: str = ""
    description: str = ""
    remediation: str = ""

    @classmethod
    def from_match(cls, match: RawMatch) -> Finding:
        rule = match.rule
        return cls(
            rule_id=rule.id,
            category=rule.category,
            severity=rule.severity,
            line=match.line,
            column=match.column,
            snippet=match.snippet,
            description=rule.description,
            remediation=rule.remediation,
        )
