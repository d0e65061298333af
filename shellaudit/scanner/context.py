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

"""Lexical context tracker: quoting/comment/heredoc state per character.

A single left-to-right pass over the script. Contexts do not nest: inside
a double-quoted string a ``'`` is just a character, inside a heredoc body
nothing is interpreted except the terminator line.

Unterminated quotes and heredocs keep their context until end of input. An
unterminated heredoc body is marked ``terminated=False`` so the scanner
leaves it alone.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator, Optional


class ContextKind(str, Enum):
    """Lexical state of a character."""

    NORMAL = "normal"
    SINGLE_QUOTE = "single_quote"
    DOUBLE_QUOTE = "double_quote"
    LINE_COMMENT = "line_comment"
    HEREDOC = "heredoc"


@dataclass(frozen=True)
class Context:
    """Context of a character. ``delimiter``, ``strip_tabs`` and ``terminated``
    are heredoc-only."""

    kind: ContextKind
    delimiter: Optional[str] = None
    strip_tabs: bool = False
    terminated: bool = True


NORMAL = Context(ContextKind.NORMAL)
SINGLE_QUOTE = Context(ContextKind.SINGLE_QUOTE)
DOUBLE_QUOTE = Context(ContextKind.DOUBLE_QUOTE)
LINE_COMMENT = Context(ContextKind.LINE_COMMENT)

# `<<WORD`, `<<-WORD`, `<< 'WORD'`, `<<"WORD"`, `<<\WORD`. A bare word must
# start with a letter or underscore so `$((1<<2))` is not a heredoc.
HEREDOC_START = re.compile(
    r"""<<(-)?[ \t]*(?:'([^'\n]+)'|"([^"\n]+)"|\\?([A-Za-z_][\w.-]*))"""
)

# A `#` only starts a comment at the beginning of a word.
_WORD_BREAKS = frozenset(" \t;&|()")


def iter_lines(content: str) -> Iterator[tuple[int, str]]:
    """Yield (start_offset, text) for each line, without the newline.

    Splits on ``\\n`` only, so offsets line up with :func:`classify`.
    """
    offset = 0
    for text in content.split("\n"):
        yield offset, text
        offset += len(text) + 1


def _starts_word(line: str, i: int) -> bool:
    return i == 0 or line[i - 1] in _WORD_BREAKS


def _classify_line(
    line: str,
    state: Context,
    out: list[Context],
    pending: list[Context],
) -> Context:
    """Classify one line (newline included) that does not start in a heredoc."""
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]

        if state.kind is ContextKind.LINE_COMMENT:
            if ch == "\n":
                state = NORMAL
            out.append(state)
            i += 1
            continue

        if state.kind is ContextKind.SINGLE_QUOTE:
            out.append(state)
            if ch == "'":
                state = NORMAL
            i += 1
            continue

        if state.kind is ContextKind.DOUBLE_QUOTE:
            if ch == "\\" and i + 1 < n:
                out.extend((state, state))
                i += 2
                continue
            out.append(state)
            if ch == '"':
                state = NORMAL
            i += 1
            continue

        # NORMAL
        if ch == "\\":
            width = 2 if i + 1 < n else 1
            out.extend([NORMAL] * width)
            i += width
        elif ch == "'":
            state = SINGLE_QUOTE
            out.append(state)
            i += 1
        elif ch == '"':
            state = DOUBLE_QUOTE
            out.append(state)
            i += 1
        elif ch == "#" and _starts_word(line, i):
            state = LINE_COMMENT
            out.append(state)
            i += 1
        elif line.startswith("<<<", i):
            out.extend([NORMAL] * 3)
            i += 3
        elif line.startswith("<<", i):
            match = HEREDOC_START.match(line, i)
            if match:
                delimiter = match.group(2) or match.group(3) or match.group(4)
                pending.append(
                    Context(
                        ContextKind.HEREDOC,
                        delimiter=delimiter,
                        strip_tabs=match.group(1) is not None,
                    )
                )
                end = match.end()
            else:
                end = i + 2
            out.extend([NORMAL] * (end - i))
            i = end
        else:
            out.append(NORMAL)
            i += 1

    return state


def _ends_heredoc(line: str, heredoc: Context) -> bool:
    text = line.rstrip("\n").rstrip("\r")
    if heredoc.strip_tabs:
        text = text.lstrip("\t")
    return text == heredoc.delimiter


def classify(content: str) -> list[Context]:
    """Return the context of every character offset in ``content``.

    The returned list always has ``len(content)`` entries.
    """
    contexts: list[Context] = []
    pending: list[Context] = []
    state = NORMAL
    body_start = 0

    for line in _split_keep_lf(content):
        if state.kind is ContextKind.HEREDOC:
            contexts.extend([state] * len(line))
            if _ends_heredoc(line, state):
                state = pending.pop(0) if pending else NORMAL
                body_start = len(contexts)
            continue

        state = _classify_line(line, state, contexts, pending)

        # Queued heredoc bodies start on the line after the command.
        if pending and state is NORMAL and line.endswith("\n"):
            state = pending.pop(0)
            body_start = len(contexts)

    if state.kind is ContextKind.HEREDOC:
        open_body = replace(state, terminated=False)
        contexts[body_start:] = [open_body] * (len(contexts) - body_start)

    return contexts


def _split_keep_lf(content: str) -> list[str]:
    """Split on ``\\n`` only, keeping the newline on each line."""
    parts = content.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines
