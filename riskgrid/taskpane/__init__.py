"""
Task pane operations with top-level error recovery.
"""

from riskgrid.taskpane.controller import OperationOutcome, TaskPaneController

__all__ = ["OperationOutcome", "TaskPaneController"]
