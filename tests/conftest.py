"""
Pytest fixtures for RiskGrid tests.

Scoring HTTP calls go through httpx.MockTransport; the workbook is in memory
and settings live in a temporary JSON file.
"""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from riskgrid.config.settings import ScoringSettings, SettingsStore, StaticSettingsStore
from riskgrid.scoring.client import ScoringClient
from riskgrid.workbook.memory import InMemoryWorkbook

API_KEY = "test-api-key"

TRANSACTIONS_GRID = [
    ["txId", "amount", "country"],
    ["t1", 120.5, "US"],
    ["t2", 9800, "NG"],
    ["t3", 15, "DE"],
]


class RecordingTransport:
    """Collects requests and answers each with handler(request)."""

    def __init__(self, handler: Callable[[httpx.Request], Any]) -> None:
        self.requests: list[httpx.Request] = []
        self._handler = handler
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        return self._handler(request)

    @property
    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)


def scored_rows(records: list[dict[str, Any]], levels: list[tuple[str | None, float]]) -> list[dict[str, Any]]:
    """Attach riskLevel / fraudScore to records the way the scoring API does."""
    out = []
    for record, (level, score) in zip(records, levels):
        row = dict(record)
        if level is not None:
            row["riskLevel"] = level
        row["fraudScore"] = score
        out.append(row)
    return out


@pytest.fixture
def workbook() -> InMemoryWorkbook:
    return InMemoryWorkbook({"Transactions": [list(r) for r in TRANSACTIONS_GRID]})


@pytest.fixture
def settings() -> ScoringSettings:
    return ScoringSettings(api_key=API_KEY, environment="production")


@pytest.fixture
def static_store(settings) -> StaticSettingsStore:
    return StaticSettingsStore(settings)


@pytest.fixture
def settings_store(tmp_path) -> SettingsStore:
    return SettingsStore(tmp_path / "settings.json")


@pytest.fixture
def make_client() -> Callable[..., tuple[ScoringClient, RecordingTransport]]:
    def _make(handler: Callable[[httpx.Request], Any], timeout_sec: float = 5.0):
        recorder = RecordingTransport(handler)
        return ScoringClient(timeout_sec=timeout_sec, transport=recorder.transport), recorder

    return _make


@pytest.fixture
def score_rows() -> Callable[..., list[dict[str, Any]]]:
    return scored_rows
