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

"""Shell script scanner: context-aware regex matching of detection rules.

Walks the script line by line with the context map from
:mod:`shellaudit.scanner.context` and reports every rule match that starts
in live code:

- NORMAL context for every rule
- terminated HEREDOC bodies for shell-content categories (see
  ``Rule.scans_heredocs``)

Matches starting inside comments, quoted strings or a heredoc that never
reaches its terminator are dropped. A match may run on into quoted text, so
``eval "$(curl ...)"`` is reported at ``eval``.
No cross-rule suppression happens here; see the aggregator.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Iterable

from shellaudit.errors import AnalysisError
from shellaudit.models.findings import RawMatch
from shellaudit.models.rules import Rule
from shellaudit.scanner.context import Context, ContextKind, classify, iter_lines

logger = logging.getLogger(__name__)

MAX_SNIPPET_LEN = 200

_CODE_CONTEXTS = frozenset({ContextKind.NORMAL})
_SHELL_CONTENT_CONTEXTS = frozenset({ContextKind.NORMAL, ContextKind.HEREDOC})


@lru_cache(maxsize=512)
def _compile(pattern: str) -> re.Pattern:
    return re.compile(pattern)


def compile_rule(rule: Rule) -> re.Pattern:
    """Compile a rule's pattern, raising AnalysisError if it is malformed."""
    try:
        return _compile(rule.pattern)
    except (re.error, RecursionError, OverflowError) as e:
        raise AnalysisError(rule.id, f"invalid pattern: {e}") from e


def _eligible_contexts(rule: Rule) -> frozenset[ContextKind]:
    return _SHELL_CONTENT_CONTEXTS if rule.scans_heredocs else _CODE_CONTEXTS


def _snippet(text: str) -> str:
    snippet = text.strip()
    if len(snippet) > MAX_SNIPPET_LEN:
        snippet = snippet[: MAX_SNIPPET_LEN - 3] + "..."
    return snippet


def _match_line(
    rule: Rule,
    pattern: re.Pattern,
    text: str,
    line_contexts: list[Context],
    line_num: int,
) -> list[RawMatch]:
    allowed = _eligible_contexts(rule)
    matches: list[RawMatch] = []
    for m in pattern.finditer(text):
        start = m.start()
        if m.end() == start or start >= len(line_contexts):
            continue
        ctx = line_contexts[start]
        if ctx.kind not in allowed or not ctx.terminated:
            continue
        matches.append(
            RawMatch(rule=rule, line=line_num, column=start + 1, snippet=_snippet(text))
        )
    return matches


def _prepare_rules(rules: Iterable[Rule]) -> list[tuple[Rule, re.Pattern]]:
    prepared = []
    for rule in rules:
        try:
            prepared.append((rule, compile_rule(rule)))
        except AnalysisError as e:
            logger.warning("%s", e)
    return prepared


def scan(content: str, rules: Iterable[Rule]) -> list[RawMatch]:
    """Apply ``rules`` to ``content`` and return the raw matches.

    Matches are emitted in line order, then rule order, then column order.
    A rule that fails to compile or evaluate is logged and skipped; the
    remaining rules still run.
    """
    prepared = _prepare_rules(rules)
    if not content or not prepared:
        return []

    contexts = classify(content)
    matches: list[RawMatch] = []
    broken: set[str] = set()

    for line_num, (offset, text) in enumerate(iter_lines(content), start=1):
        if not text.strip():
            continue
        line_contexts = contexts[offset : offset + len(text)]
        if all(c.kind is ContextKind.LINE_COMMENT for c in line_contexts):
            continue

        for rule, pattern in prepared:
            if rule.id in broken:
                continue
            try:
                matches.extend(_match_line(rule, pattern, text, line_contexts, line_num))
            except (re.error, RecursionError, MemoryError) as e:
                broken.add(rule.id)
                logger.warning("%s", AnalysisError(rule.id, f"evaluation failed on line {line_num}: {e}"))

    return matches
