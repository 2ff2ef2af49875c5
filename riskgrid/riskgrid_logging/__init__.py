"""
Structured logging for RiskGrid.

JSON logs with timestamp, event_type and operation context.
Use get_logger() in every module for aggregation-friendly output.
"""

from riskgrid.riskgrid_logging.logger import bind_operation, get_logger

__all__ = ["bind_operation", "get_logger"]
