"""
Workbook boundary: the tabular adapter contract, A1 addressing and the
in-memory workbook.
"""

from riskgrid.workbook.adapter import (
    ActiveSheet,
    AddressRange,
    CurrentSelection,
    GridSnapshot,
    NamedSheet,
    NewSheetTarget,
    RangeTarget,
    Region,
    SelectionTarget,
    Table,
    TabularAdapter,
)
from riskgrid.workbook.memory import InMemoryWorkbook

__all__ = [
    "ActiveSheet",
    "AddressRange",
    "CurrentSelection",
    "GridSnapshot",
    "InMemoryWorkbook",
    "NamedSheet",
    "NewSheetTarget",
    "RangeTarget",
    "Region",
    "SelectionTarget",
    "Table",
    "TabularAdapter",
]
