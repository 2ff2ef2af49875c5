"""
A1-style cell addresses.

Parses "B2", "B2:D10", "Sheet1!A1:C3" and "'My Sheet'!A1" into zero-based
row/column bounds and formats bounds back into addresses.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from riskgrid.core.exceptions import UserInputError

_CELL_RE = re.compile(r"^\$?([A-Za-z]{1,3})\$?([1-9][0-9]*)$")
MAX_COLUMNS = 16384  # XFD
MAX_ROWS = 1048576


@dataclass(frozen=True)
class CellRange:
    """Zero-based top-left corner plus size; sheet is None when the address had no prefix."""

    row: int
    column: int
    row_count: int = 1
    column_count: int = 1
    sheet: str | None = None

    @property
    def address(self) -> str:
        return format_address(self.row, self.column, self.row_count, self.column_count)


def column_index(letters: str) -> int:
    """'A' -> 0, 'Z' -> 25, 'AA' -> 26."""
    index = 0
    for char in letters.upper():
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index - 1


def column_letters(index: int) -> str:
    """0 -> 'A', 26 -> 'AA'."""
    letters = ""
    n = index + 1
    while n > 0:
        n, rem = divmod(n - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def _parse_cell(text: str, address: str) -> tuple[int, int]:
    match = _CELL_RE.match(text.strip())
    if not match:
        raise UserInputError(f"Invalid range address: {address}")
    column = column_index(match.group(1))
    row = int(match.group(2)) - 1
    if column >= MAX_COLUMNS or row >= MAX_ROWS:
        raise UserInputError(f"Range address out of bounds: {address}")
    return row, column


def _split_sheet(address: str) -> tuple[str | None, str]:
    if "!" not in address:
        return None, address
    sheet, _, cells = address.rpartition("!")
    sheet = sheet.strip()
    if len(sheet) >= 2 and sheet[0] == sheet[-1] == "'":
        sheet = sheet[1:-1].replace("''", "'")
    return sheet or None, cells


def parse_address(address: str) -> CellRange:
    if not address or not address.strip():
        raise UserInputError("Please enter a range address")
    sheet, cells = _split_sheet(address.strip())
    first, sep, last = cells.partition(":")
    r1, c1 = _parse_cell(first, address)
    r2, c2 = _parse_cell(last, address) if sep else (r1, c1)
    top, bottom = min(r1, r2), max(r1, r2)
    left, right = min(c1, c2), max(c1, c2)
    return CellRange(top, left, bottom - top + 1, right - left + 1, sheet)


def format_address(row: int, column: int, row_count: int = 1, column_count: int = 1) -> str:
    start = f"{column_letters(column)}{row + 1}"
    if row_count <= 1 and column_count <= 1:
        return start
    end = f"{column_letters(column + max(column_count, 1) - 1)}{row + max(row_count, 1)}"
    return f"{start}:{end}"
