"""
Score a CSV file from the command line.

Runs the same operations as the task pane against an in-memory workbook:
extract the file, insert it into a sheet, score the sheet, then write the
scored rows (plus a riskCategory column when the response carries riskLevel).

How to run:
    py -m riskgrid.tools.score_csv transactions.csv --output scored.csv
    py -m riskgrid.tools.score_csv transactions.csv --environment custom --custom-environment acme

Settings default to RISKGRID_API_KEY, RISKGRID_ENVIRONMENT,
RISKGRID_CUSTOM_ENVIRONMENT and RISKGRID_PROXY_URL (.env aware).
"""

from __future__ import annotations

import argparse
import asyncio
import csv
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, TextIO

from riskgrid.config.env import get_scoring_timeout_sec, settings_from_env
from riskgrid.config.settings import ScoringSettings, StaticSettingsStore
from riskgrid.core.exceptions import RiskGridError, UserInputError
from riskgrid.riskgrid_logging import get_logger
from riskgrid.scoring.client import ScoringClient
from riskgrid.scoring.orchestrator import ScoringResult
from riskgrid.taskpane.controller import TaskPaneController
from riskgrid.workbook.adapter import ActiveSheet, NewSheetTarget, RangeTarget
from riskgrid.workbook.memory import InMemoryWorkbook

logger = get_logger(__name__)

RISK_CATEGORY_COLUMN = "riskCategory"
RESULT_SHEET = "Scored"


def write_result_csv(result: ScoringResult, out: TextIO) -> None:
    if not result.records:
        return
    headers = list(result.records[0].keys())
    with_category = result.formatting_applied and RISK_CATEGORY_COLUMN not in headers
    w = csv.writer(out)
    w.writerow(headers + ([RISK_CATEGORY_COLUMN] if with_category else []))
    for i, record in enumerate(result.records):
        row: list[Any] = [record.get(h) for h in headers]
        if with_category:
            row.append(result.categories[i].value)
        w.writerow(row)


async def run(path: Path, settings: ScoringSettings, timeout_sec: float) -> ScoringResult:
    """Extract, insert and score one CSV file; raises RiskGridError with the pane message on failure."""
    workbook = InMemoryWorkbook()
    controller = TaskPaneController(
        workbook,
        StaticSettingsStore(settings),
        ScoringClient(timeout_sec=timeout_sec),
    )
    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise UserInputError(f"{path.name} is not UTF-8 text; re-save it as CSV UTF-8") from e
    steps = (
        lambda: controller.extract_file(path.name, text),
        lambda: controller.insert(RangeTarget("A1")),
        lambda: controller.score(ActiveSheet(), NewSheetTarget(RESULT_SHEET)),
    )
    outcome = None
    for step in steps:
        outcome = await step()
        if not outcome.ok:
            raise RiskGridError(outcome.message)
    logger.info("score_csv_done", path=str(path), sheets=workbook.sheet_names)
    return outcome.data


def main() -> int:
    defaults = settings_from_env()
    parser = argparse.ArgumentParser(description="Score a CSV file with the fraud-scoring API.")
    parser.add_argument("path", type=Path, help="CSV file (first row = headers)")
    parser.add_argument("--output", type=Path, default=None, help="Write scored CSV here (default: stdout)")
    parser.add_argument("--api-key", default=None, help="Scoring API key (default: RISKGRID_API_KEY)")
    parser.add_argument("--environment", default=None, help="production | dev | custom")
    parser.add_argument("--custom-environment", default=None, help="Subdomain token when --environment custom")
    parser.add_argument("--proxy-url", default=None, help="Send through this scoring proxy")
    parser.add_argument(
        "--timeout",
        type=float,
        default=get_scoring_timeout_sec(),
        help="Request deadline in seconds (default: %(default)s)",
    )
    args = parser.parse_args()

    overrides = {
        "api_key": args.api_key,
        "environment": args.environment,
        "custom_environment": args.custom_environment,
        "proxy_url": args.proxy_url,
    }
    settings = replace(defaults, **{k: v for k, v in overrides.items() if v is not None})

    try:
        result = asyncio.run(run(args.path, settings, args.timeout))
    except (OSError, RiskGridError) as e:
        logger.error("score_csv_failed", path=str(args.path), error=str(e))
        print(e, file=sys.stderr)
        return 1

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, "w", newline="", encoding="utf-8") as f:
            write_result_csv(result, f)
        print("OUTPUT:", args.output)
    else:
        write_result_csv(result, sys.stdout)
    print(result.summary(), file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
