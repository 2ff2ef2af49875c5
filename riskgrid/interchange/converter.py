"""
Grid <-> record conversion.

A grid is a list of rows whose first row holds the column headers; a record
is one data row keyed by those headers. Both directions are pure and return
new lists; inputs are never mutated.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

Grid = list[list[Any]]
Record = dict[str, Any]


def to_records(grid: Sequence[Sequence[Any]] | None) -> list[Record]:
    """
    Convert a header-first grid into one record per data row.

    Missing cells map to None and extra cells are dropped; no error is raised
    for ragged rows. An empty or header-only grid yields [].
    """
    if not grid:
        return []
    headers = list(grid[0])
    records: list[Record] = []
    for row in grid[1:]:
        records.append({
            header: (row[i] if i < len(row) else None)
            for i, header in enumerate(headers)
        })
    return records


def to_grid(records: Sequence[Mapping[str, Any]] | None) -> Grid:
    """
    Convert records back into a header-first grid.

    The header row is the key order of the first record; every record is
    assumed to share that key set (a missing key becomes None). Empty input
    yields [] since there is no header to derive.
    """
    if not records:
        return []
    headers = list(records[0].keys())
    rows: Grid = [headers]
    for record in records:
        rows.append([record.get(header) for header in headers])
    return rows


def is_record_list(data: Any) -> bool:
    """True when data is a non-empty list whose first item is a mapping (not a row list)."""
    return isinstance(data, list) and bool(data) and isinstance(data[0], Mapping)
