"""
Tabular data interchange.

Modules: converter (grid <-> records), csv_parser (text -> grid),
payload (structured insert text -> grid).
"""

from riskgrid.interchange.converter import Grid, Record, to_grid, to_records
from riskgrid.interchange.csv_parser import parse_text
from riskgrid.interchange.payload import dumps_payload, grid_from_payload

__all__ = [
    "Grid",
    "Record",
    "dumps_payload",
    "grid_from_payload",
    "parse_text",
    "to_grid",
    "to_records",
]
