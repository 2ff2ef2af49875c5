"""
Tabular I/O adapter contract.

The host spreadsheet is treated as an asynchronous tabular store: a read
returns an immutable snapshot of the selected region, a write takes a new
grid and returns the region it landed in, and row fills are applied against
that region. Callers never hold a live range handle between phases.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Union

from riskgrid.analytics.risk_classifier import RiskCategory
from riskgrid.interchange.converter import Grid
from riskgrid.workbook.addressing import format_address


# -----------------------------------------------------------------------------
# Read selectors
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ActiveSheet:
    """Used region of the active sheet."""


@dataclass(frozen=True)
class NamedSheet:
    """Used region of a sheet by name."""

    name: str


@dataclass(frozen=True)
class AddressRange:
    """Explicit A1 range on the active sheet (or on the sheet named in the address)."""

    address: str


@dataclass(frozen=True)
class CurrentSelection:
    """The user's current selection."""


ReadSelector = Union[ActiveSheet, NamedSheet, AddressRange, CurrentSelection]


# -----------------------------------------------------------------------------
# Write targets
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SelectionTarget:
    """Anchor at the top-left cell of the current selection."""


@dataclass(frozen=True)
class NewSheetTarget:
    """Add a sheet (generated name when None), activate it, anchor at A1."""

    name: str | None = None


@dataclass(frozen=True)
class RangeTarget:
    """Anchor at the top-left cell of an A1 address on the active sheet."""

    address: str


WriteTarget = Union[SelectionTarget, NewSheetTarget, RangeTarget]


@dataclass(frozen=True)
class Region:
    """A rectangular block on one sheet; row/column are zero-based."""

    sheet: str
    row: int
    column: int
    row_count: int
    column_count: int

    @property
    def address(self) -> str:
        return f"{self.sheet}!{format_address(self.row, self.column, self.row_count, self.column_count)}"

    def overlaps(self, other: "Region") -> bool:
        return (
            self.sheet == other.sheet
            and self.row < other.row + other.row_count
            and other.row < self.row + self.row_count
            and self.column < other.column + other.column_count
            and other.column < self.column + self.column_count
        )


TABLE_STYLE = "TableStyleMedium2"


@dataclass(frozen=True)
class Table:
    """A region formatted as a table; the first row holds the headers."""

    name: str
    region: Region
    style: str = TABLE_STYLE


@dataclass(frozen=True)
class GridSnapshot:
    """Values read from a region, fully materialized."""

    grid: Grid
    region: Region

    @property
    def row_count(self) -> int:
        return len(self.grid)

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.grid), default=0)


def grid_dimensions(grid: Grid) -> tuple[int, int]:
    """Rows and widest row of a grid."""
    return len(grid), max((len(row) for row in grid), default=0)


class TabularAdapter(abc.ABC):
    """Host spreadsheet boundary used by the task pane controller and the orchestrator."""

    @abc.abstractmethod
    async def read(self, selector: ReadSelector) -> GridSnapshot:
        """Read the selected region; the snapshot is complete when this returns."""

    @abc.abstractmethod
    async def write_grid(self, target: WriteTarget, grid: Grid) -> Region:
        """Overwrite the target region, sized to the grid, and return it."""

    @abc.abstractmethod
    async def set_row_fill(self, region: Region, row_index: int, category: RiskCategory) -> None:
        """Fill grid row row_index (0 = header) across the region width; NONE is a no-op."""

    @abc.abstractmethod
    async def format_as_table(self, region: Region, name: str, style: str = TABLE_STYLE) -> Table:
        """Turn a written region into a table with a header row."""

    @abc.abstractmethod
    async def autofit(self, region: Region) -> None:
        """Size the columns and rows of a region to their contents."""

    async def read_grid(self, selector: ReadSelector) -> Grid:
        snapshot = await self.read(selector)
        return snapshot.grid
