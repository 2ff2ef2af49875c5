"""
Structured-text payloads exchanged with the user.

Extracted data is offered as indented JSON; the same text (possibly edited)
comes back for insertion either as a list of records or as a list of rows.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from riskgrid.core.exceptions import FormatError, UserInputError
from riskgrid.interchange.converter import Grid, is_record_list, to_grid

PAYLOAD_INDENT = 2
ROWS_OR_RECORDS_MESSAGE = "Data must be an array of objects or an array of rows"


def dumps_payload(data: Any) -> str:
    """Serialize records or a grid as indented JSON text."""
    return json.dumps(data, indent=PAYLOAD_INDENT, ensure_ascii=False, default=str)


def grid_from_payload(text: str | None) -> Grid:
    """
    Parse insert payload text into a header-first grid.

    Raises UserInputError for an empty payload and FormatError when the text is
    not JSON, not a non-empty list, or a list of neither records nor rows.
    """
    if not text or not text.strip():
        raise UserInputError("No data to insert")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError("Invalid JSON format") from e
    if not isinstance(data, list) or not data:
        raise FormatError("Data must be a non-empty array")
    if is_record_list(data):
        if not all(isinstance(item, Mapping) for item in data):
            raise FormatError(ROWS_OR_RECORDS_MESSAGE)
        return to_grid(data)
    if not all(isinstance(row, list) for row in data):
        raise FormatError(ROWS_OR_RECORDS_MESSAGE)
    return [list(row) for row in data]
