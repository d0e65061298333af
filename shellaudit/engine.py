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

"""Analysis entry point: context tracking → scanning → aggregation.

``analyze`` is a pure function of (content, rules). It keeps no state
between calls and may run concurrently from any number of threads.
"""

from __future__ import annotations

from typing import Iterable, Optional

from shellaudit.models.report import AnalysisResult
from shellaudit.models.rules import Rule
from shellaudit.policy.rule_registry import default_registry
from shellaudit.scanner.aggregator import aggregate
from shellaudit.scanner.shell_analyzer import scan


def analyze(
    content: str,
    rules: Optional[Iterable[Rule]] = None,
    script_name: str = "",
) -> AnalysisResult:
    """Analyze shell script text and return its ranked, scored findings.

    Args:
        content: Raw script text.
        rules: Rules to apply, in order. Defaults to the built-in catalog.
        script_name: Name echoed back in the result.
    """
    if rules is None:
        rules = default_registry()
    return aggregate(scan(content, rules), script_name=script_name)
