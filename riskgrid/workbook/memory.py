"""
In-memory workbook implementing the tabular adapter contract.

Ordered sheets of sparse cells with per-cell fill colours, an active sheet and
a selection. Backs the CLI and the tests; a real host integration implements
the same TabularAdapter methods.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from riskgrid.analytics.risk_classifier import RiskCategory, fill_color
from riskgrid.core.exceptions import UserInputError
from riskgrid.interchange.converter import Grid
from riskgrid.riskgrid_logging import get_logger
from riskgrid.workbook.adapter import (
    ActiveSheet,
    AddressRange,
    CurrentSelection,
    GridSnapshot,
    NamedSheet,
    NewSheetTarget,
    RangeTarget,
    ReadSelector,
    Region,
    SelectionTarget,
    TABLE_STYLE,
    Table,
    TabularAdapter,
    WriteTarget,
    grid_dimensions,
)
from riskgrid.workbook.addressing import CellRange, parse_address

logger = get_logger(__name__)

EMPTY = ""
DEFAULT_SHEET_PREFIX = "Sheet"


def _is_empty(value: Any) -> bool:
    return value is None or value == EMPTY


@dataclass
class Sheet:
    name: str
    cells: dict[tuple[int, int], Any] = field(default_factory=dict)
    fills: dict[tuple[int, int], str] = field(default_factory=dict)
    tables: list[Table] = field(default_factory=list)
    column_widths: dict[int, int] = field(default_factory=dict)
    row_heights: dict[int, int] = field(default_factory=dict)

    def used_range(self) -> CellRange | None:
        used = [key for key, value in self.cells.items() if not _is_empty(value)]
        if not used:
            return None
        rows = [r for r, _ in used]
        columns = [c for _, c in used]
        top, left = min(rows), min(columns)
        return CellRange(top, left, max(rows) - top + 1, max(columns) - left + 1, self.name)

    def values(self, cell_range: CellRange) -> Grid:
        return [
            [self.cells.get((r, c), EMPTY) for c in range(cell_range.column, cell_range.column + cell_range.column_count)]
            for r in range(cell_range.row, cell_range.row + cell_range.row_count)
        ]

    def to_grid(self) -> Grid:
        used = self.used_range()
        return self.values(used) if used else []

    def set_values(self, row: int, column: int, grid: Grid, width: int) -> None:
        for r, values in enumerate(grid):
            for c in range(width):
                value = values[c] if c < len(values) else EMPTY
                self.cells[(row + r, column + c)] = EMPTY if value is None else value


class InMemoryWorkbook(TabularAdapter):
    """
    Workbook held in memory.

        wb = InMemoryWorkbook({"Data": [["id", "amount"], ["1", "10"]]})
        snapshot = await wb.read(ActiveSheet())
    """

    def __init__(self, sheets: dict[str, Grid] | None = None, active: str | None = None) -> None:
        self._sheets: dict[str, Sheet] = {}
        for name, grid in (sheets or {}).items():
            self.add_sheet(name, grid)
        if not self._sheets:
            self.add_sheet(f"{DEFAULT_SHEET_PREFIX}1")
        self._active = active or next(iter(self._sheets))
        self.sheet(self._active)
        self._selection = CellRange(0, 0, 1, 1, self._active)

    # -- sheet management ---------------------------------------------------

    @property
    def sheet_names(self) -> list[str]:
        return list(self._sheets)

    @property
    def active_sheet(self) -> Sheet:
        return self._sheets[self._active]

    def sheet(self, name: str) -> Sheet:
        try:
            return self._sheets[name]
        except KeyError:
            raise UserInputError(f"Sheet not found: {name}") from None

    def _next_sheet_name(self) -> str:
        n = len(self._sheets) + 1
        while f"{DEFAULT_SHEET_PREFIX}{n}" in self._sheets:
            n += 1
        return f"{DEFAULT_SHEET_PREFIX}{n}"

    def add_sheet(self, name: str | None = None, grid: Grid | None = None) -> Sheet:
        name = name or self._next_sheet_name()
        if name in self._sheets:
            raise UserInputError(f"A sheet named {name} already exists")
        sheet = Sheet(name)
        if grid:
            _, width = grid_dimensions(grid)
            sheet.set_values(0, 0, grid, width)
        self._sheets[name] = sheet
        return sheet

    def activate(self, name: str) -> None:
        self.sheet(name)
        self._active = name
        self._selection = CellRange(0, 0, 1, 1, name)

    def select(self, address: str) -> None:
        cell_range = parse_address(address)
        sheet = cell_range.sheet or self._active
        self.sheet(sheet)
        self._active = sheet
        self._selection = CellRange(cell_range.row, cell_range.column, cell_range.row_count, cell_range.column_count, sheet)

    def fill_at(self, sheet: str, row: int, column: int) -> str | None:
        return self.sheet(sheet).fills.get((row, column))

    @property
    def tables(self) -> list[Table]:
        return [table for sheet in self._sheets.values() for table in sheet.tables]

    # -- adapter contract ---------------------------------------------------

    def _resolve_read(self, selector: ReadSelector) -> tuple[Sheet, CellRange | None]:
        if isinstance(selector, ActiveSheet):
            sheet = self.active_sheet
            return sheet, sheet.used_range()
        if isinstance(selector, NamedSheet):
            if not selector.name or not selector.name.strip():
                raise UserInputError("Please enter a sheet name")
            sheet = self.sheet(selector.name.strip())
            return sheet, sheet.used_range()
        if isinstance(selector, AddressRange):
            cell_range = parse_address(selector.address)
            return self.sheet(cell_range.sheet or self._active), cell_range
        if isinstance(selector, CurrentSelection):
            return self.sheet(self._selection.sheet or self._active), self._selection
        raise TypeError(f"Unsupported read selector: {selector!r}")

    async def read(self, selector: ReadSelector) -> GridSnapshot:
        sheet, cell_range = self._resolve_read(selector)
        if cell_range is None:
            return GridSnapshot(grid=[], region=Region(sheet.name, 0, 0, 0, 0))
        grid = sheet.values(cell_range)
        region = Region(sheet.name, cell_range.row, cell_range.column, cell_range.row_count, cell_range.column_count)
        logger.debug("workbook_read", address=region.address, rows=region.row_count, columns=region.column_count)
        return GridSnapshot(grid=grid, region=region)

    def _resolve_anchor(self, target: WriteTarget) -> tuple[Sheet, int, int]:
        if isinstance(target, SelectionTarget):
            sheet = self.sheet(self._selection.sheet or self._active)
            return sheet, self._selection.row, self._selection.column
        if isinstance(target, NewSheetTarget):
            sheet = self.add_sheet(target.name)
            self.activate(sheet.name)
            return sheet, 0, 0
        if isinstance(target, RangeTarget):
            if not target.address or not target.address.strip():
                raise UserInputError("Please enter a target range")
            cell_range = parse_address(target.address)
            return self.sheet(cell_range.sheet or self._active), cell_range.row, cell_range.column
        raise TypeError(f"Unsupported write target: {target!r}")

    async def write_grid(self, target: WriteTarget, grid: Grid) -> Region:
        sheet, row, column = self._resolve_anchor(target)
        row_count, column_count = grid_dimensions(grid)
        sheet.set_values(row, column, grid, column_count)
        region = Region(sheet.name, row, column, row_count, column_count)
        logger.info("workbook_written", address=region.address, rows=row_count, columns=column_count)
        return region

    async def set_row_fill(self, region: Region, row_index: int, category: RiskCategory) -> None:
        color = fill_color(category)
        if color is None:
            return
        if not 0 <= row_index < region.row_count:
            raise IndexError(f"Row {row_index} outside region {region.address}")
        sheet = self.sheet(region.sheet)
        for c in range(region.column, region.column + region.column_count):
            sheet.fills[(region.row + row_index, c)] = color

    async def format_as_table(self, region: Region, name: str, style: str = TABLE_STYLE) -> Table:
        sheet = self.sheet(region.sheet)
        if any(table.name == name for table in self.tables):
            raise UserInputError(f"A table named {name} already exists")
        for table in sheet.tables:
            if table.region.overlaps(region):
                raise UserInputError(f"{region.address} overlaps table {table.name}")
        table = Table(name=name, region=region, style=style)
        sheet.tables.append(table)
        logger.info("workbook_table_created", table=name, address=region.address, style=style)
        return table

    async def autofit(self, region: Region) -> None:
        # Width in characters, height in text lines
        sheet = self.sheet(region.sheet)
        rows = range(region.row, region.row + region.row_count)
        columns = range(region.column, region.column + region.column_count)
        if not rows or not columns:
            return
        lines = {(r, c): str(sheet.cells.get((r, c), EMPTY)).split("\n") for r in rows for c in columns}
        for c in columns:
            sheet.column_widths[c] = max(len(line) for r in rows for line in lines[(r, c)])
        for r in rows:
            sheet.row_heights[r] = max(len(lines[(r, c)]) for c in columns)
