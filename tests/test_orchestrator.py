"""
Tests for the scoring orchestrator: read -> score -> normalize -> write -> fill.

Scoring responses come from httpx.MockTransport; the workbook is in memory.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from riskgrid.analytics.risk_classifier import FILL_COLORS, RiskCategory
from riskgrid.config.settings import ScoringSettings, StaticSettingsStore
from riskgrid.core.exceptions import NetworkError, ResponseShapeError, ScoringTimeoutError, UserInputError
from riskgrid.interchange.converter import to_records
from riskgrid.scoring.client import API_KEY_HEADER
from riskgrid.scoring.orchestrator import ScoringOrchestrator
from riskgrid.workbook.adapter import ActiveSheet, NewSheetTarget, RangeTarget
from riskgrid.workbook.memory import InMemoryWorkbook

LEVELS = [("LOW", 0), ("HIGH", 0.92), ("LOW", 0.5)]


def _grid(workbook):
    return [list(row) for row in workbook.active_sheet.to_grid()]


def _respond_with(scored, wrap=lambda rows: {"output": json.dumps(rows)}):
    def handler(request):
        return httpx.Response(200, json=wrap(scored))

    return handler


def test_direct_scoring_writes_and_formats(workbook, static_store, make_client, score_rows):
    records = to_records(_grid(workbook))
    scored = score_rows(records, LEVELS)
    client, recorder = make_client(_respond_with(scored))
    orchestrator = ScoringOrchestrator(workbook, static_store, client)

    result = asyncio.run(orchestrator.score(ActiveSheet(), NewSheetTarget("Scored")))

    request = recorder.requests[0]
    assert str(request.url).startswith("https://api.airia.ai/v2/PipelineExecution/")
    assert request.headers[API_KEY_HEADER] == "test-api-key"
    assert json.loads(recorder.last_json["userInput"]) == records

    assert result.records == scored
    assert result.region.sheet == "Scored"
    assert result.formatting_applied is True
    assert result.categories == [RiskCategory.LOW, RiskCategory.HIGH, RiskCategory.MEDIUM]
    assert result.failed_rows == []
    assert result.category_counts == {"HIGH": 1, "MEDIUM": 1, "LOW": 1}

    written = workbook.sheet("Scored").to_grid()
    assert written[0] == ["txId", "amount", "country", "riskLevel", "fraudScore"]
    assert written[2] == ["t2", 9800, "NG", "HIGH", 0.92]
    assert workbook.fill_at("Scored", 0, 0) is None
    assert workbook.fill_at("Scored", 1, 4) == FILL_COLORS[RiskCategory.LOW]
    assert workbook.fill_at("Scored", 2, 0) == FILL_COLORS[RiskCategory.HIGH]
    assert workbook.fill_at("Scored", 3, 2) == FILL_COLORS[RiskCategory.MEDIUM]
    assert "Scored 3 records" in result.summary()


def test_default_target_is_new_sheet(workbook, static_store, make_client, score_rows):
    scored = score_rows(to_records(_grid(workbook)), LEVELS)
    client, _ = make_client(_respond_with(scored, wrap=lambda rows: rows))
    result = asyncio.run(ScoringOrchestrator(workbook, static_store, client).score(ActiveSheet()))
    assert result.region.sheet == "Sheet2"
    assert workbook.sheet_names == ["Transactions", "Sheet2"]


def test_proxy_mode_posts_envelope(workbook, make_client, score_rows):
    store = StaticSettingsStore(ScoringSettings(
        api_key="k",
        environment="custom",
        custom_environment="acme",
        proxy_url="https://proxy.example/fraud-proxy",
    ))
    records = to_records(_grid(workbook))
    client, recorder = make_client(_respond_with(score_rows(records, LEVELS), wrap=lambda rows: {"result": rows}))
    asyncio.run(ScoringOrchestrator(workbook, store, client).score(ActiveSheet()))
    assert str(recorder.requests[0].url) == "https://proxy.example/fraud-proxy"
    assert recorder.last_json == {"environment": "acme", "apiKey": "k", "data": records}


def test_custom_environment_direct_url(workbook, make_client, score_rows):
    store = StaticSettingsStore(ScoringSettings(api_key="k", environment="custom", custom_environment="acme"))
    client, recorder = make_client(_respond_with(score_rows(to_records(_grid(workbook)), LEVELS)))
    asyncio.run(ScoringOrchestrator(workbook, store, client).score(ActiveSheet()))
    assert recorder.requests[0].url.host == "acme.api.airia.ai"


def test_missing_credential_fails_before_read(make_client):
    class CountingWorkbook(InMemoryWorkbook):
        reads = 0

        async def read(self, selector):
            CountingWorkbook.reads += 1
            return await super().read(selector)

    wb = CountingWorkbook({"S": [["a"], ["1"]]})
    client, recorder = make_client(lambda request: httpx.Response(200, json=[]))
    with pytest.raises(UserInputError, match="API key"):
        asyncio.run(ScoringOrchestrator(wb, StaticSettingsStore(ScoringSettings(api_key="  ")), client).score(ActiveSheet()))
    assert CountingWorkbook.reads == 0
    assert recorder.requests == []


def test_no_data_rows_is_user_error(static_store, make_client):
    wb = InMemoryWorkbook({"S": [["only", "headers"]]})
    client, recorder = make_client(lambda request: httpx.Response(200, json=[]))
    with pytest.raises(UserInputError, match="No data rows"):
        asyncio.run(ScoringOrchestrator(wb, static_store, client).score(ActiveSheet()))
    assert recorder.requests == []


def test_without_risk_level_no_formatting(workbook, static_store, make_client, score_rows):
    scored = score_rows(to_records(_grid(workbook)), [(None, 0.9), (None, 0.1), (None, 0)])
    client, _ = make_client(_respond_with(scored))
    result = asyncio.run(ScoringOrchestrator(workbook, static_store, client).score(ActiveSheet(), NewSheetTarget("Out")))
    assert result.formatting_applied is False
    assert result.categories == []
    assert all(workbook.fill_at("Out", r, 0) is None for r in range(4))
    assert workbook.sheet("Out").to_grid()[1][-1] == 0.9


def test_row_fill_failure_is_best_effort(workbook, static_store, make_client, score_rows):
    class FlakyWorkbook(InMemoryWorkbook):
        async def set_row_fill(self, region, row_index, category):
            if row_index == 2:
                raise RuntimeError("host rejected format")
            await super().set_row_fill(region, row_index, category)

    wb = FlakyWorkbook({"Transactions": _grid(workbook)})
    scored = score_rows(to_records(_grid(workbook)), [("HIGH", 0.9), ("HIGH", 0.9), ("HIGH", 0.9)])
    client, _ = make_client(_respond_with(scored))
    result = asyncio.run(ScoringOrchestrator(wb, static_store, client).score(ActiveSheet(), NewSheetTarget("Out")))
    assert result.failed_rows == [2]
    assert wb.fill_at("Out", 1, 0) == FILL_COLORS[RiskCategory.HIGH]
    assert wb.fill_at("Out", 2, 0) is None
    assert wb.fill_at("Out", 3, 0) == FILL_COLORS[RiskCategory.HIGH]
    assert "Formatting failed for 1 row(s)" in result.summary()


def test_bad_response_writes_nothing(workbook, static_store, make_client):
    client, _ = make_client(lambda request: httpx.Response(200, json={"output": "[]"}))
    with pytest.raises(ResponseShapeError):
        asyncio.run(ScoringOrchestrator(workbook, static_store, client).score(ActiveSheet(), RangeTarget("F1")))
    assert workbook.sheet_names == ["Transactions"]
    assert asyncio.run(workbook.read(ActiveSheet())).column_count == 3


def test_http_error_status_propagates(workbook, static_store, make_client):
    client, _ = make_client(lambda request: httpx.Response(403, text="forbidden"))
    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(ScoringOrchestrator(workbook, static_store, client).score(ActiveSheet()))
    assert excinfo.value.status_code == 403
    assert workbook.sheet_names == ["Transactions"]


def test_timeout_distinct_from_refusal(workbook, static_store, make_client):
    async def hang(request):
        await asyncio.sleep(30)

    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    slow_client, _ = make_client(hang, timeout_sec=0.05)
    with pytest.raises(ScoringTimeoutError):
        asyncio.run(ScoringOrchestrator(workbook, static_store, slow_client).score(ActiveSheet()))

    refused_client, _ = make_client(refuse)
    with pytest.raises(NetworkError):
        asyncio.run(ScoringOrchestrator(workbook, static_store, refused_client).score(ActiveSheet()))


def test_resolve_credentials():
    resolve = ScoringOrchestrator.resolve_credentials
    assert resolve(ScoringSettings(api_key=" k ", environment="dev")) == ("k", "dev")
    assert resolve(ScoringSettings(api_key="k", environment="custom", custom_environment="acme")) == ("k", "acme")
    with pytest.raises(UserInputError, match="custom environment name"):
        resolve(ScoringSettings(api_key="k", environment="custom"))


def test_missing_custom_environment_fails_before_read(make_client):
    class CountingWorkbook(InMemoryWorkbook):
        reads = 0

        async def read(self, selector):
            CountingWorkbook.reads += 1
            return await super().read(selector)

    store = StaticSettingsStore(ScoringSettings(api_key="k", environment="custom", custom_environment=" "))
    client, recorder = make_client(lambda request: httpx.Response(200, json=[]))
    with pytest.raises(UserInputError, match="custom environment name"):
        asyncio.run(ScoringOrchestrator(CountingWorkbook({"S": [["a"], ["1"]]}), store, client).score(ActiveSheet()))
    assert CountingWorkbook.reads == 0
    assert recorder.requests == []
