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

"""Rich terminal output for analysis results and the rule catalog."""

from __future__ import annotations

from typing import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from shellaudit.models.report import AnalysisResult
from shellaudit.models.rules import Rule
from shellaudit.models.severity import Severity


def _make_console() -> Console:
    """Console with soft wrap. Width follows the live terminal size."""
    return Console(soft_wrap=True)


console = _make_console()

SEVERITY_STYLE: dict[Severity, str] = {
    Severity.CRITICAL: "bold bright_red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
}


def _score_style(score: int) -> str:
    if score >= 70:
        return "bold bright_red"
    if score >= 40:
        return "red"
    if score >= 10:
        return "yellow"
    return "green"


def print_summary(result: AnalysisResult, out: Console | None = None) -> None:
    """Score panel with per-severity counts."""
    out = out or console
    counts = Text()
    for severity in reversed(list(Severity)):
        if counts:
            counts.append("  ")
        counts.append(f"{severity.value}: {result.summary_counts.get(severity, 0)}",
                      style=SEVERITY_STYLE[severity])

    body = Text()
    body.append("Risk score: ")
    body.append(f"{result.overall_score}/100", style=_score_style(result.overall_score))
    body.append("\n")
    body.append(counts)

    title = result.script_name or "analysis"
    out.print(Panel(body, title=f"[bold]{title}[/bold]", title_align="left", expand=False))


def print_findings(result: AnalysisResult, out: Console | None = None, verbose: bool = False) -> None:
    """Findings table, already in severity/line/column order."""
    out = out or console
    if not result.findings:
        out.print("[green]No findings.[/green]")
        return

    table = Table(
        show_header=True,
        header_style="bold dim",
        border_style="dim",
        expand=True,
    )
    table.add_column("Severity", min_width=8)
    table.add_column("Rule", style="cyan", min_width=7)
    table.add_column("Line", style="dim", justify="right", min_width=4)
    table.add_column("Col", style="dim", justify="right", min_width=3)
    table.add_column("Finding", style="white", ratio=2, overflow="fold")
    table.add_column("Snippet", style="yellow", ratio=2, overflow="fold")
    if verbose:
        table.add_column("Fix", style="green", ratio=2, overflow="fold")

    for f in result.findings:
        row = [
            Text(f.severity.value, style=SEVERITY_STYLE[f.severity]),
            f.rule_id,
            str(f.line),
            str(f.column),
            f.description,
            Text(f.snippet),
        ]
        if verbose:
            row.append(f.remediation)
        table.add_row(*row)

    out.print(table)


def print_result(result: AnalysisResult, out: Console | None = None, verbose: bool = False) -> None:
    print_summary(result, out)
    print_findings(result, out, verbose=verbose)


def print_rules(rules: Iterable[Rule], out: Console | None = None) -> None:
    """The active rule catalog as a table."""
    out = out or console
    table = Table(
        show_header=True,
        header_style="bold yellow",
        border_style="dim",
        expand=True,
    )
    table.add_column("Rule", style="cyan", min_width=7)
    table.add_column("Category", style="white", min_width=12, overflow="fold")
    table.add_column("Severity", min_width=8)
    table.add_column("Description", style="white", ratio=2, overflow="fold")

    for rule in rules:
        table.add_row(
            rule.id,
            rule.category.value,
            Text(rule.severity.value, style=SEVERITY_STYLE[rule.severity]),
            rule.description,
        )
    out.print(table)
