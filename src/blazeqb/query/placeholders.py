"""
Positional placeholder bookkeeping for ``?`` / ``?n`` tokens.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from itertools import accumulate
from typing import List

# String literals are matched first so that a ``?`` inside quotes is skipped.
_TOKEN_RE = re.compile(r"'(?:[^']|'')*'|\?(\d*)")


@dataclass(frozen=True)
class Placeholder:
    start: int
    end: int
    number: int | None

    @property
    def is_bare(self) -> bool:
        return self.number is None


def scan(sql: str) -> List[Placeholder]:
    found: List[Placeholder] = []
    for match in _TOKEN_RE.finditer(sql):
        digits = match.group(1)
        if digits is None:
            continue
        found.append(Placeholder(match.start(), match.end(), int(digits) if digits else None))
    return found


def resolve_indexes(sql: str, start: int = 0) -> List[int]:
    """
    Return the 1-based argument index each placeholder binds to.

    Follows SQLite numbering: a bare ``?`` takes one more than the largest
    index assigned so far. ``start`` is the number of arguments bound by
    text that precedes ``sql`` in the final statement.
    """

    indexes: List[int] = []
    largest = start
    for token in scan(sql):
        index = largest + 1 if token.is_bare else token.number
        largest = max(largest, index)
        indexes.append(index)
    return indexes


def highest_index(sql: str, start: int = 0) -> int:
    return max([start, *resolve_indexes(sql, start)])


def number_bare(sql: str) -> str:
    """
    Rewrite bare ``?`` tokens as explicit ``?n`` without changing meaning.
    """

    tokens = scan(sql)
    if not any(token.is_bare for token in tokens):
        return sql
    pieces: List[str] = []
    cursor = 0
    for token, index in zip(tokens, resolve_indexes(sql)):
        pieces.append(sql[cursor : token.start])
        pieces.append(f"?{index}")
        cursor = token.end
    pieces.append(sql[cursor:])
    return "".join(pieces)


def offsets(*counts: int) -> List[int]:
    """
    Prefix-sum argument counts into the offset each fragment starts at.

    ``offsets(2, 3, 1) == [0, 2, 5]``: the second fragment's placeholders
    are numbered from ``?3``.
    """

    return [0, *accumulate(counts)][: len(counts)]
