"""
FastAPI scoring proxy.

The task pane runs in a browser sandbox and cannot call the scoring API
cross-origin, so it posts {environment, apiKey, data} here. The proxy resolves
the environment to the scoring endpoint, forwards the records in the direct-call
shape with the X-API-KEY header and passes the upstream status and body back
with permissive CORS headers.
"""

from __future__ import annotations

from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from riskgrid import __version__
from riskgrid.core.exceptions import RiskGridError, ScoringTimeoutError
from riskgrid.riskgrid_logging import get_logger
from riskgrid.scoring.client import ScoringClient
from riskgrid.scoring.endpoints import resolve_endpoint

logger = get_logger(__name__)

CORS_ALLOW_HEADERS = [
    "authorization",
    "x-client-info",
    "apikey",
    "content-type",
    "x-api-key",
    "x-environment",
]
CORS_ALLOW_METHODS = ["POST", "OPTIONS"]

MISSING_API_KEY = {"error": "API key is required"}
# pydantic error types for a JSON body that parsed but is not an object
NON_OBJECT_BODY_ERRORS = {"model_type", "model_attributes_type", "dict_type"}


# -----------------------------------------------------------------------------
# Request model and dependency
# -----------------------------------------------------------------------------

class ProxyRequest(BaseModel):
    """POST /fraud-proxy body (field names match the task pane wire format)."""

    environment: str = Field("production", description="production | dev | custom subdomain token")
    apiKey: str | None = Field(None, description="Scoring API credential, forwarded as X-API-KEY")
    data: Any = Field(None, description="Records to score")


def get_scoring_client() -> ScoringClient:
    """Dependency: scoring client with the configured deadline."""
    return ScoringClient()


def _proxy_error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": "Proxy error", "message": message},
    )


# -----------------------------------------------------------------------------
# App and routes
# -----------------------------------------------------------------------------

app = FastAPI(
    title="RiskGrid Scoring Proxy",
    description="CORS proxy forwarding spreadsheet records to the fraud-scoring API.",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=CORS_ALLOW_METHODS,
    allow_headers=CORS_ALLOW_HEADERS,
)


@app.exception_handler(RequestValidationError)
async def invalid_body_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.warning("proxy_invalid_body", errors=len(errors))
    if any(err.get("type") in NON_OBJECT_BODY_ERRORS and tuple(err.get("loc", ())) == ("body",) for err in errors):
        # An array or scalar body carries no apiKey
        return JSONResponse(status_code=400, content=MISSING_API_KEY)
    return _proxy_error(500, "Request body must be a JSON object")


@app.post("/fraud-proxy")
async def fraud_proxy(
    body: ProxyRequest,
    client: ScoringClient = Depends(get_scoring_client),
) -> Response:
    """
    Forward records to the scoring endpoint for body.environment.

    Returns the upstream body and status unchanged; 400 when apiKey is missing.
    """
    if not body.apiKey:
        return JSONResponse(status_code=400, content=MISSING_API_KEY)
    try:
        endpoint = resolve_endpoint(body.environment)
        logger.info("proxy_forwarding", endpoint=endpoint, environment=body.environment)
        upstream = await client.forward(endpoint, body.apiKey, body.data)
    except ScoringTimeoutError as e:
        return _proxy_error(504, str(e))
    except RiskGridError as e:
        logger.error("proxy_failed", error=str(e))
        return _proxy_error(500, str(e))

    logger.info("proxy_upstream_response", status_code=upstream.status_code, bytes=len(upstream.content))
    return Response(
        content=upstream.text,
        status_code=upstream.status_code,
        media_type="application/json",
    )


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe: proxy is up."""
    return {"status": "ok"}
