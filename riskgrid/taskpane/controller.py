"""
Task pane controller: the user-triggered operations behind the add-in pane.

Each operation (extract, extract from file, insert, score, save / clear
settings) runs to completion and returns an OperationOutcome with the message
shown in the pane. Errors are recovered here: RiskGridError messages are shown
as-is, anything unexpected is logged with its traceback. Only one operation
may be in flight; an overlapping request is rejected rather than queued.
"""

from __future__ import annotations

import json
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from riskgrid.config.settings import ENV_CUSTOM, ScoringSettings
from riskgrid.core.exceptions import OperationInProgressError, RiskGridError, UserInputError
from riskgrid.interchange.converter import to_records
from riskgrid.interchange.csv_parser import parse_text
from riskgrid.interchange.payload import dumps_payload, grid_from_payload
from riskgrid.riskgrid_logging import bind_operation
from riskgrid.scoring.client import ScoringClient
from riskgrid.scoring.orchestrator import ScoringOrchestrator
from riskgrid.workbook.adapter import ReadSelector, TabularAdapter, WriteTarget, grid_dimensions

EXTRACT_PREVIEW_RECORDS = 3
FILE_PREVIEW_ROWS = 5
CSV_SUFFIX = ".csv"
TABLE_NAME_PREFIX = "DataTable_"


@dataclass
class OperationOutcome:
    ok: bool
    message: str
    data: Any = None


def _preview(data: list[Any], limit: int, noun: str) -> str:
    text = "Data preview:\n" + json.dumps(data[:limit], indent=2, default=str)
    if len(data) > limit:
        text += f"\n...(showing first {limit} {noun})"
    return text


class TaskPaneController:
    """
    Operations over one workbook with an injected settings store.

    payload holds the structured text shown in the insert box; extract fills
    it, insert reads it when no explicit text is given.
    """

    def __init__(
        self,
        adapter: TabularAdapter,
        settings_store: Any,
        client: ScoringClient | None = None,
    ) -> None:
        self.adapter = adapter
        self.settings_store = settings_store
        self.orchestrator = ScoringOrchestrator(adapter, settings_store, client)
        self.payload = ""
        self.output = "Ready! Select an action above."
        self._running: str | None = None
        self._last_table_stamp = 0

    @property
    def busy(self) -> bool:
        return self._running is not None

    def _next_table_name(self) -> str:
        # Millisecond stamp, bumped so names stay unique within one pane
        stamp = max(int(time.time() * 1000), self._last_table_stamp + 1)
        self._last_table_stamp = stamp
        return f"{TABLE_NAME_PREFIX}{stamp}"

    async def _run(self, operation: str, action: Callable[[], Awaitable[tuple[str, Any]]]) -> OperationOutcome:
        log = bind_operation(operation)
        if self._running is not None:
            error = OperationInProgressError(
                f"Please wait: {self._running} is still running"
            )
            log.warning("operation_rejected", running=self._running)
            outcome = OperationOutcome(False, f"Error: {error}")
            self.output = outcome.message
            return outcome

        self._running = operation
        log.info("operation_started")
        try:
            message, data = await action()
            outcome = OperationOutcome(True, message, data)
            log.info("operation_completed")
        except RiskGridError as e:
            log.warning("operation_failed", error_type=type(e).__name__, error=str(e))
            outcome = OperationOutcome(False, f"Error: {e}")
        except Exception as e:
            log.exception("operation_crashed", error=str(e))
            outcome = OperationOutcome(False, f"Error: {e}")
        finally:
            self._running = None
        self.output = outcome.message
        return outcome

    # -- extract ------------------------------------------------------------

    async def extract(self, selector: ReadSelector) -> OperationOutcome:
        async def action() -> tuple[str, Any]:
            snapshot = await self.adapter.read(selector)
            records = to_records(snapshot.grid)
            self.payload = dumps_payload(records)
            summary = (
                f"Extracted {snapshot.row_count} rows x {snapshot.column_count} columns "
                f"from {snapshot.region.address}\n\n"
                + _preview(records, EXTRACT_PREVIEW_RECORDS, "records")
            )
            return summary, records

        return await self._run("extract", action)

    async def extract_file(self, filename: str, text: str) -> OperationOutcome:
        async def action() -> tuple[str, Any]:
            if not filename:
                raise UserInputError("Please select a file")
            if not filename.lower().endswith(CSV_SUFFIX):
                raise UserInputError(
                    "Only CSV files can be parsed. Copy spreadsheet data into a sheet and extract it instead."
                )
            grid = parse_text(text)
            self.payload = dumps_payload(grid)
            summary = f"Extracted {len(grid)} rows from {filename}\n\n" + _preview(grid, FILE_PREVIEW_ROWS, "rows")
            return summary, grid

        return await self._run("extract_file", action)

    # -- insert -------------------------------------------------------------

    async def insert(
        self,
        target: WriteTarget,
        payload: str | None = None,
        auto_format: bool = False,
    ) -> OperationOutcome:
        """Write the payload at target; auto_format also turns the written block into a table."""

        async def action() -> tuple[str, Any]:
            grid = grid_from_payload(self.payload if payload is None else payload)
            region = await self.adapter.write_grid(target, grid)
            if auto_format:
                await self.adapter.format_as_table(region, self._next_table_name())
            await self.adapter.autofit(region)
            rows, columns = grid_dimensions(grid)
            message = f"Successfully inserted {rows} rows x {columns} columns at {region.address}"
            if auto_format:
                message += " (formatted as table)"
            return message, region

        return await self._run("insert", action)

    # -- score --------------------------------------------------------------

    async def score(self, source: ReadSelector, target: WriteTarget | None = None) -> OperationOutcome:
        async def action() -> tuple[str, Any]:
            result = await self.orchestrator.score(source, target)
            self.payload = dumps_payload(result.records)
            return result.summary(), result

        return await self._run("score", action)

    # -- settings -----------------------------------------------------------

    async def save_settings(self, settings: ScoringSettings) -> OperationOutcome:
        async def action() -> tuple[str, Any]:
            if not settings.api_key.strip():
                raise UserInputError("Please enter an API key")
            if settings.environment == ENV_CUSTOM and not settings.custom_environment.strip():
                raise UserInputError("Please enter a custom environment name")
            self.settings_store.save(settings)
            return "Settings saved", settings

        return await self._run("save_settings", action)

    async def clear_settings(self) -> OperationOutcome:
        async def action() -> tuple[str, Any]:
            self.settings_store.clear()
            return "Settings cleared", None

        return await self._run("clear_settings", action)

    def load_settings(self) -> ScoringSettings:
        return self.settings_store.load()
