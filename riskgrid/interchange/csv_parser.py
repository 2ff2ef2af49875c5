"""
Permissive comma-separated text parser.

Each line is tokenized independently with a two-state machine: a double quote
toggles quoted mode and is not emitted, a comma outside quotes ends the field.
There is no doubled-quote escape and a quoted field cannot span lines.
Rows whose fields are all empty are dropped. Values stay text.
"""

from __future__ import annotations

from riskgrid.riskgrid_logging import get_logger

logger = get_logger(__name__)

QUOTE = '"'
DELIMITER = ","


def parse_line(line: str) -> list[str]:
    """Split one line into trimmed fields."""
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in line:
        if char == QUOTE:
            in_quotes = not in_quotes
        elif char == DELIMITER and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    fields.append("".join(current).strip())
    return fields


def parse_text(text: str) -> list[list[str]]:
    """
    Parse comma-separated text into a grid of strings.

        parse_text('a,"b,c"\\n1,2\\n') == [["a", "b,c"], ["1", "2"]]
    """
    rows = [parse_line(line) for line in text.split("\n")]
    grid = [row for row in rows if any(cell != "" for cell in row)]
    logger.debug("csv_parsed", lines=len(rows), rows=len(grid))
    return grid
