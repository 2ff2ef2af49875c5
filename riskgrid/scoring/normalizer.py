"""
Scoring response normalization.

Environments wrap the scored records differently. The body is parsed as JSON,
then dispatched on shape in a fixed order:

1. string  -> parsed again (double-encoded body)
2. mapping with "output" -> that field (parsed again when it is a string)
3. mapping with "result" -> that field (same rule)
4. anything else -> used as-is

The final value must be a non-empty list of mappings. The order decides which
malformed responses are rejected, so keep it.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from enum import Enum
from typing import Any

from riskgrid.core.exceptions import ResponseShapeError
from riskgrid.interchange.converter import Record
from riskgrid.riskgrid_logging import get_logger

logger = get_logger(__name__)

OUTPUT_FIELD = "output"
RESULT_FIELD = "result"


class ResponseShape(str, Enum):
    ENCODED_STRING = "encoded_string"
    OUTPUT_FIELD = "output"
    RESULT_FIELD = "result"
    RAW = "raw"


def _loads(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ResponseShapeError(f"Invalid API response: {what} is not valid JSON") from e


def detect_shape(payload: Any) -> ResponseShape:
    if isinstance(payload, str):
        return ResponseShape.ENCODED_STRING
    if isinstance(payload, Mapping) and OUTPUT_FIELD in payload:
        return ResponseShape.OUTPUT_FIELD
    if isinstance(payload, Mapping) and RESULT_FIELD in payload:
        return ResponseShape.RESULT_FIELD
    return ResponseShape.RAW


def unwrap(payload: Any) -> tuple[ResponseShape, Any]:
    """Apply the shape dispatch to an already-parsed body."""
    shape = detect_shape(payload)
    if shape is ResponseShape.ENCODED_STRING:
        return shape, _loads(payload, "encoded response")
    if shape in (ResponseShape.OUTPUT_FIELD, ResponseShape.RESULT_FIELD):
        inner = payload[shape.value]
        if isinstance(inner, str):
            inner = _loads(inner, f"'{shape.value}' field")
        return shape, inner
    return shape, payload


def normalize_response(body: str) -> list[Record]:
    """
    Parse a scoring response body into scored records.

    Raises ResponseShapeError when the body is not JSON or the unwrapped value
    is not a non-empty list of records.
    """
    shape, value = unwrap(_loads(body, "response body"))
    if not isinstance(value, list) or not value:
        logger.warning("scoring_response_empty", shape=shape.value, value_type=type(value).__name__)
        raise ResponseShapeError("Invalid or empty response from API")
    if not all(isinstance(item, Mapping) for item in value):
        logger.warning("scoring_response_not_records", shape=shape.value)
        raise ResponseShapeError("Invalid response from API: expected a list of records")
    logger.info("scoring_response_normalized", shape=shape.value, records=len(value))
    return [dict(item) for item in value]
