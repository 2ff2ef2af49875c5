"""
Core cross-cutting pieces: the error taxonomy shared by interchange,
scoring, workbook and task pane layers.
"""

from riskgrid.core.exceptions import (
    FormatError,
    NetworkError,
    OperationInProgressError,
    ResponseShapeError,
    RiskGridError,
    ScoringTimeoutError,
    UserInputError,
)

__all__ = [
    "FormatError",
    "NetworkError",
    "OperationInProgressError",
    "ResponseShapeError",
    "RiskGridError",
    "ScoringTimeoutError",
    "UserInputError",
]
