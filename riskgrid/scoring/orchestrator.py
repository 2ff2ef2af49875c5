"""
Scoring orchestrator: grid -> records -> scoring service -> grid + row fills.

One call reads the source grid (fully materialized first), sends the records
to the scoring service directly or through the proxy under the request
deadline, normalizes the response, writes the scored rows back and colours
each row by its risk category. Row formatting is best-effort: a failed row is
logged and reported but does not fail the operation.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Protocol

from riskgrid.analytics.risk_classifier import RiskCategory, classify, has_risk_level
from riskgrid.config.settings import ScoringSettings
from riskgrid.core.exceptions import UserInputError
from riskgrid.interchange.converter import Record, to_grid, to_records
from riskgrid.riskgrid_logging import get_logger
from riskgrid.scoring.client import ScoringClient
from riskgrid.scoring.endpoints import effective_environment, resolve_endpoint
from riskgrid.scoring.normalizer import normalize_response
from riskgrid.workbook.adapter import (
    NewSheetTarget,
    ReadSelector,
    Region,
    TabularAdapter,
    WriteTarget,
)

logger = get_logger(__name__)


class SettingsSource(Protocol):
    def load(self) -> ScoringSettings: ...


@dataclass
class ScoringResult:
    """Outcome of one scoring run."""

    records: list[Record]
    region: Region
    categories: list[RiskCategory] = field(default_factory=list)
    """Per scored record, in row order; empty when riskLevel was absent."""
    formatting_applied: bool = False
    failed_rows: list[int] = field(default_factory=list)
    """Grid row indexes (1-based data rows) whose fill could not be applied."""

    @property
    def category_counts(self) -> dict[str, int]:
        counts = Counter(c.value for c in self.categories)
        return {c.value: counts.get(c.value, 0) for c in RiskCategory if c is not RiskCategory.NONE}

    def summary(self) -> str:
        lines = [f"Scored {len(self.records)} records written to {self.region.address}"]
        if self.formatting_applied:
            counts = self.category_counts
            lines.append(", ".join(f"{name}: {n}" for name, n in counts.items()))
        else:
            lines.append("No riskLevel in response; rows left unformatted")
        if self.failed_rows:
            lines.append(f"Formatting failed for {len(self.failed_rows)} row(s)")
        return "\n".join(lines)


class ScoringOrchestrator:
    """
    Runs scoring operations against a tabular adapter.

    settings is any object with load() -> ScoringSettings (SettingsStore,
    StaticSettingsStore); it is read once per run.
    """

    def __init__(
        self,
        adapter: TabularAdapter,
        settings: SettingsSource,
        client: ScoringClient | None = None,
    ) -> None:
        self.adapter = adapter
        self.settings = settings
        self.client = client or ScoringClient()

    @staticmethod
    def resolve_credentials(settings: ScoringSettings) -> tuple[str, str]:
        """Return (api_key, environment name) or raise UserInputError before any I/O."""
        api_key = (settings.api_key or "").strip()
        if not api_key:
            raise UserInputError("Please enter an API key")
        return api_key, effective_environment(settings)

    async def send_records(
        self,
        api_key: str,
        environment: str,
        proxy_url: str,
        records: list[Record],
    ) -> str:
        """Send records through the proxy when one is configured, else directly; return the raw body."""
        proxy_url = proxy_url.strip()
        if proxy_url:
            return await self.client.score_via_proxy(proxy_url, environment, api_key, records)
        return await self.client.score_direct(resolve_endpoint(environment), api_key, records)

    async def apply_risk_formatting(self, region: Region, scored: list[Record]) -> tuple[list[RiskCategory], list[int]]:
        """Classify every scored record and fill its row; returns (categories, failed row indexes)."""
        categories: list[RiskCategory] = []
        failed: list[int] = []
        for i, record in enumerate(scored):
            category = classify(record)
            categories.append(category)
            row_index = i + 1
            try:
                await self.adapter.set_row_fill(region, row_index, category)
            except Exception as e:
                failed.append(row_index)
                logger.warning(
                    "row_fill_failed",
                    row=row_index,
                    category=category.value,
                    region=region.address,
                    error=str(e),
                )
        return categories, failed

    async def score(self, source: ReadSelector, target: WriteTarget | None = None) -> ScoringResult:
        settings = self.settings.load()
        api_key, environment = self.resolve_credentials(settings)

        snapshot = await self.adapter.read(source)
        records = to_records(snapshot.grid)
        if not records:
            raise UserInputError(f"No data rows to score in {snapshot.region.address}")
        logger.info("scoring_started", source=snapshot.region.address, records=len(records))

        body = await self.send_records(api_key, environment, settings.proxy_url or "", records)
        scored = normalize_response(body)

        region = await self.adapter.write_grid(target or NewSheetTarget(), to_grid(scored))
        result = ScoringResult(records=scored, region=region)
        if has_risk_level(scored):
            result.categories, result.failed_rows = await self.apply_risk_formatting(region, scored)
            result.formatting_applied = True

        logger.info(
            "scoring_completed",
            region=region.address,
            records=len(scored),
            formatting_applied=result.formatting_applied,
            failed_rows=len(result.failed_rows),
            **({"counts": result.category_counts} if result.formatting_applied else {}),
        )
        return result

