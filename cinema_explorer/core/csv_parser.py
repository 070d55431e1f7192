"""
Comma-separated text <-> grid of optional string cells.

The grid keeps the difference between a missing cell (an empty unquoted field,
decoded to ``None``) and an empty string (a quoted ``""`` field). Row shape is
not checked here; see ``cinema_explorer.validation``.
"""

from __future__ import annotations

import math
import re
from typing import List, Optional, Sequence

Cell = Optional[str]
Grid = List[List[Cell]]

_FIELD = r'(?:"([^"]*(?:""[^"]*)*)"|([^,\r\n]*))'
# first field of the text: no delimiter in front of it
_FIRST_TOKEN = re.compile(_FIELD)
#                       (delimiter)
_NEXT_TOKEN = re.compile(r"(,|\r?\n|\r)" + _FIELD)

_NEEDS_QUOTES = re.compile(r'[",\r\n]')
# plain decimal or scientific notation, or the literal NaN
_NUMBER = re.compile(r"\s*(?:[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|nan)\s*", re.IGNORECASE)


def _decode(quoted: Cell, plain: Cell) -> Cell:
    if quoted is not None:
        return quoted.replace('""', '"')
    return None if plain == "" else plain.replace('""', '"')


def parse_csv(text: str) -> Grid:
    """
    Parse CSV text into a list of rows of optional strings.

    - empty unquoted field -> None
    - quoted field -> literal text with ``""`` unescaped (``""`` alone -> "")
    - a trailing line holding a single missing field (stray final newline)
      is dropped
    - text between a closing quote and the next delimiter is skipped
    """
    rows: Grid = []
    if text == "":
        return rows

    first = _FIRST_TOKEN.match(text)
    rows.append([_decode(*first.groups())])

    pos = first.end()
    while True:
        match = _NEXT_TOKEN.search(text, pos)
        if match is None:
            break

        delimiter, quoted, plain = match.groups()
        if delimiter != ",":
            rows.append([])
        rows[-1].append(_decode(quoted, plain))
        pos = match.end()

    if len(rows) > 1 and len(rows[-1]) == 1 and rows[-1][0] is None:
        rows.pop()

    return rows


def _serialize_cell(cell: Cell) -> str:
    if cell is None:
        return ""
    if cell == "" or _NEEDS_QUOTES.search(cell):
        return '"' + cell.replace('"', '""') + '"'
    return cell


def serialize_csv(rows: Sequence[Sequence[Cell]]) -> str:
    """
    Inverse of ``parse_csv``: ``parse_csv(serialize_csv(g)) == g`` for any grid
    produced by ``parse_csv``.
    """
    text = "\n".join(",".join(_serialize_cell(c) for c in row) for row in rows)
    # a lone missing cell on the last line would be read back as the stray
    # final-newline artifact, so terminate it explicitly
    if rows and len(rows[-1]) == 1 and rows[-1][0] is None:
        text += "\n"
    return text


def parse_number(text: Cell) -> Optional[float]:
    """
    Return the numeric value of a cell, or None if it is not numeric.

    The literal "NaN" (any case) is numeric and yields ``nan``. Infinite
    values (including overflowing exponents) and Python-only spellings such
    as ``1_000`` are not treated as numbers.
    """
    if text is None or not _NUMBER.fullmatch(text):
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if math.isinf(value):
        return None
    return value
