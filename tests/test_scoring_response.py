"""
Tests for scoring response normalization and environment -> endpoint resolution.
"""

from __future__ import annotations

import json

import pytest

from riskgrid.config.settings import ScoringSettings
from riskgrid.core.exceptions import ResponseShapeError, UserInputError
from riskgrid.scoring.endpoints import (
    PIPELINE_PATH_TEMPLATE,
    effective_environment,
    pipeline_path,
    resolve_endpoint,
)
from riskgrid.scoring.normalizer import ResponseShape, detect_shape, normalize_response

SCORED = [
    {"txId": "t1", "riskLevel": "HIGH", "fraudScore": 0.91},
    {"txId": "t2", "riskLevel": "LOW", "fraudScore": 0},
]


# --- Normalization ---


def test_raw_list_used_as_is():
    assert normalize_response(json.dumps(SCORED)) == SCORED


def test_double_encoded_string_parsed_twice():
    body = json.dumps(json.dumps(SCORED))
    assert detect_shape(json.loads(body)) is ResponseShape.ENCODED_STRING
    assert normalize_response(body) == SCORED


def test_output_string_field_is_parsed():
    body = json.dumps({"output": json.dumps(SCORED), "executionId": "x"})
    assert normalize_response(body) == SCORED


def test_result_list_field_used_directly():
    body = json.dumps({"result": SCORED})
    assert detect_shape(json.loads(body)) is ResponseShape.RESULT_FIELD
    assert normalize_response(body) == SCORED


def test_output_takes_precedence_over_result():
    body = json.dumps({"output": SCORED[:1], "result": SCORED})
    assert normalize_response(body) == SCORED[:1]


def test_encoded_string_is_not_unwrapped_further():
    """A double-encoded envelope is parsed once more, not dispatched again."""
    body = json.dumps(json.dumps({"output": SCORED}))
    with pytest.raises(ResponseShapeError):
        normalize_response(body)


@pytest.mark.parametrize(
    "body",
    [
        "not json",
        json.dumps([]),
        json.dumps({"output": []}),
        json.dumps({"result": "not json either"}),
        json.dumps({"status": "ok"}),
        json.dumps({"output": None}),
        json.dumps([1, 2]),
        json.dumps("plain text"),
    ],
)
def test_invalid_or_empty_responses_rejected(body):
    with pytest.raises(ResponseShapeError):
        normalize_response(body)


# --- Endpoints ---


def test_fixed_hosts(monkeypatch):
    monkeypatch.setenv("RISKGRID_PIPELINE_ID", "pipe-1")
    assert resolve_endpoint("production") == "https://api.airia.ai/v2/PipelineExecution/pipe-1"
    assert resolve_endpoint("dev") == "https://dev.api.airiadev.ai/v2/PipelineExecution/pipe-1"


def test_custom_token_is_leading_subdomain(monkeypatch):
    monkeypatch.setenv("RISKGRID_PIPELINE_ID", "pipe-1")
    url = resolve_endpoint("acme")
    assert url == "https://acme.api.airia.ai/v2/PipelineExecution/pipe-1"
    assert url.startswith("https://acme.")


def test_same_path_suffix_everywhere():
    suffix = pipeline_path("abc")
    assert suffix == PIPELINE_PATH_TEMPLATE.format(pipeline_id="abc")
    for env in ("production", "dev", "acme"):
        assert resolve_endpoint(env, pipeline_id="abc").endswith(suffix)


def test_empty_environment_rejected():
    with pytest.raises(UserInputError):
        resolve_endpoint("  ")


def test_effective_environment():
    assert effective_environment(ScoringSettings(environment="dev")) == "dev"
    assert effective_environment(ScoringSettings(environment="custom", custom_environment=" acme ")) == "acme"
    assert effective_environment(ScoringSettings(environment="")) == "production"
    with pytest.raises(UserInputError, match="custom environment"):
        effective_environment(ScoringSettings(environment="custom"))
