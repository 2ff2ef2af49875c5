"""
HTTP client for the fraud-scoring service.

Two wire shapes:
- direct:  POST <endpoint>, header X-API-KEY, body {"userInput": <records as JSON text>, "asyncOutput": false}
- proxied: POST <proxy>, body {"environment", "apiKey", "data": <records>}; the proxy resolves
  the endpoint and passes the upstream status and body through.

Every call runs under a hard deadline. Exceeding it cancels the in-flight
request and raises ScoringTimeoutError; transport failures and non-2xx
responses raise NetworkError. No retries.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from riskgrid.config.env import get_scoring_timeout_sec
from riskgrid.core.exceptions import NetworkError, ScoringTimeoutError
from riskgrid.riskgrid_logging import get_logger

logger = get_logger(__name__)

API_KEY_HEADER = "X-API-KEY"
MAX_LOGGED_DETAIL = 300


def build_direct_body(records: Any) -> dict[str, Any]:
    return {
        "userInput": json.dumps(records, default=str),
        "asyncOutput": False,
    }


def build_proxy_body(
    environment: str,
    api_key: str,
    records: Sequence[Mapping[str, Any]],
) -> dict[str, Any]:
    return {"environment": environment, "apiKey": api_key, "data": list(records)}


def _response_detail(response: httpx.Response) -> str:
    return response.text or response.reason_phrase or ""


class ScoringClient:
    """
    Sends scoring requests with a bounded deadline.

    transport is handed to httpx.AsyncClient (tests pass httpx.MockTransport).
    """

    def __init__(
        self,
        timeout_sec: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout_sec = timeout_sec if timeout_sec is not None else get_scoring_timeout_sec()
        self.transport = transport

    async def send(
        self,
        url: str,
        body: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """POST body as JSON and return the raw response, whatever its status."""
        request_headers = {"Content-Type": "application/json"}
        request_headers.update(headers or {})
        async with httpx.AsyncClient(timeout=self.timeout_sec, transport=self.transport) as client:
            try:
                return await asyncio.wait_for(
                    client.post(url, json=body, headers=request_headers),
                    timeout=self.timeout_sec,
                )
            except (asyncio.TimeoutError, httpx.TimeoutException) as e:
                logger.warning("scoring_request_timeout", url=url, timeout_sec=self.timeout_sec)
                raise ScoringTimeoutError(self.timeout_sec) from e
            except httpx.ConnectError as e:
                logger.warning("scoring_request_unreachable", url=url, error=str(e))
                raise NetworkError.connectivity(url, str(e)) from e
            except httpx.HTTPError as e:
                logger.warning("scoring_request_failed", url=url, error=str(e))
                raise NetworkError(f"Network error: {e}", detail=str(e)) from e

    async def _post_checked(
        self,
        url: str,
        body: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> str:
        response = await self.send(url, body, headers)
        if not response.is_success:
            detail = _response_detail(response)
            logger.warning(
                "scoring_request_rejected",
                url=url,
                status_code=response.status_code,
                detail=detail[:MAX_LOGGED_DETAIL],
            )
            raise NetworkError.from_status(response.status_code, detail)
        return response.text

    async def score_direct(
        self,
        endpoint: str,
        api_key: str,
        records: Sequence[Mapping[str, Any]],
    ) -> str:
        """Call the scoring endpoint directly; return the response body text."""
        logger.info("scoring_request_sent", mode="direct", url=endpoint, records=len(records))
        return await self._post_checked(
            endpoint,
            build_direct_body(records),
            headers={API_KEY_HEADER: api_key},
        )

    async def forward(self, endpoint: str, api_key: str, data: Any) -> httpx.Response:
        """Direct-shape call whose response is returned unchecked (proxy passthrough)."""
        logger.info("scoring_request_forwarded", url=endpoint)
        return await self.send(endpoint, build_direct_body(data), headers={API_KEY_HEADER: api_key})

    async def score_via_proxy(
        self,
        proxy_url: str,
        environment: str,
        api_key: str,
        records: Sequence[Mapping[str, Any]],
    ) -> str:
        """Call the scoring proxy; return the passed-through response body text."""
        logger.info(
            "scoring_request_sent",
            mode="proxy",
            url=proxy_url,
            environment=environment,
            records=len(records),
        )
        return await self._post_checked(
            proxy_url,
            build_proxy_body(environment, api_key, records),
        )
