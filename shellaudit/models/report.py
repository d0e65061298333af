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

"""Pydantic model for the analysis report returned by the engine."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from shellaudit.models.findings import Finding
from shellaudit.models.severity import Severity


def _zero_counts() -> dict[Severity, int]:
    return {severity: 0 for severity in Severity}


class AnalysisResult(BaseModel):
    """Ranked, scored findings for one script.

    Deterministic: no timestamps or run identifiers, so two analyses of the
    same content with the same rules serialize identically.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    script_name: str = Field(default="", alias="scriptName")
    overall_score: int = Field(default=0, ge=0, le=100, alias="overallScore")
    summary_counts: dict[Severity, int] = Field(
        default_factory=_zero_counts, alias="summaryCounts"
    )
    findings: tuple[Finding, ...] = ()

    def to_dict(self) -> dict:
        """JSON-ready dict with the public camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
