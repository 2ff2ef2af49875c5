"""
RiskGrid: spreadsheet data interchange and fraud-scoring pipeline.

Extracts tabular data from a workbook, round-trips it through a record
representation, sends records to an external scoring API and writes the
scored rows back with risk-based row fill.
"""

__version__ = "0.1.0"
