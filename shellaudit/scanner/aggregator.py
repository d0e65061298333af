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

"""Finding aggregator: deduplicates and ranks raw matches, then scores them."""

from __future__ import annotations

from typing import Iterable

from shellaudit.models.findings import Finding, RawMatch
from shellaudit.models.report import AnalysisResult
from shellaudit.models.severity import Severity

# Score contribution per finding. Part of the report contract: changing a
# weight changes every stored score.
SEVERITY_WEIGHTS: dict[Severity, int] = {
    Severity.CRITICAL: 40,
    Severity.HIGH: 20,
    Severity.MEDIUM: 8,
    Severity.LOW: 2,
}

MAX_SCORE = 100


def deduplicate(matches: Iterable[RawMatch]) -> list[Finding]:
    """Collapse raw matches with identical (rule id, line, column)."""
    seen: set[tuple[str, int, int]] = set()
    findings: list[Finding] = []
    for match in matches:
        key = (match.rule.id, match.line, match.column)
        if key in seen:
            continue
        seen.add(key)
        findings.append(Finding.from_match(match))
    return findings


def sort_findings(findings: Iterable[Finding]) -> list[Finding]:
    """Severity descending, then line, column and rule id ascending."""
    return sorted(
        findings,
        key=lambda f: (-f.severity.rank, f.line, f.column, f.rule_id),
    )


def compute_score(findings: Iterable[Finding]) -> int:
    """Sum of severity weights, clamped to [0, 100]."""
    total = sum(SEVERITY_WEIGHTS[f.severity] for f in findings)
    return min(MAX_SCORE, max(0, total))


def count_by_severity(findings: Iterable[Finding]) -> dict[Severity, int]:
    counts = {severity: 0 for severity in Severity}
    for finding in findings:
        counts[finding.severity] += 1
    return counts


def aggregate(matches: Iterable[RawMatch], script_name: str = "") -> AnalysisResult:
    """Turn the scanner's raw matches into a ranked, scored AnalysisResult."""
    findings = sort_findings(deduplicate(matches))
    return AnalysisResult(
        script_name=script_name,
        overall_score=compute_score(findings),
        summary_counts=count_by_severity(findings),
        findings=tuple(findings),
    )
