"""
Resilient JSON fetch shared by every external source.

Retry policy:
- attempts = retry_attempts + 1, each bounded by timeout_ms
- delay before retry n (0-based) = retry_delay_ms * 2^n
- 4xx other than 429 is terminal (SourceRejected)
- 429, 5xx, timeouts and transport errors are retried, then SourceUnavailable
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from carefund.domain.errors import SourceRejected, SourceUnavailable
from carefund.infrastructure.sources.types import SourceConfig

logger = logging.getLogger(__name__)


class ResilientFetcher:
    """
    Owns one httpx.AsyncClient for all outbound calls.

    transport and sleep are injectable so tests can use httpx.MockTransport
    and skip real backoff delays.
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        headers: Optional[Dict[str, str]] = None,
    ):
        self._transport = transport
        self._sleep = sleep
        self._headers = headers or {"Accept": "application/json"}
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=self._transport,
                headers=self._headers,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_json(
        self,
        source: SourceConfig,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        GET base_url + path and decode the JSON body.

        Raises:
            SourceRejected: no base URL, missing required key, or a terminal 4xx
            SourceUnavailable: retries exhausted
        """
        if not source.base_url:
            raise SourceRejected(source.name, "source has no base URL configured")
        if source.requires_auth_key and not source.has_key:
            raise SourceRejected(source.name, "API key not configured")

        query = dict(params or {})
        if source.auth_param and source.has_key:
            query[source.auth_param] = source.api_key

        url = f"{source.base_url.rstrip('/')}/{path.lstrip('/')}"
        timeout = source.timeout_ms / 1000
        total_attempts = source.retry_attempts + 1
        client = self._get_client()
        started = time.monotonic()
        last_error = "no attempt made"

        for attempt in range(total_attempts):
            logger.debug("%s attempt %d/%d: GET %s", source.name, attempt + 1, total_attempts, url)
            try:
                response = await client.get(url, params=query, timeout=timeout)
            except httpx.TimeoutException:
                last_error = f"timeout after {source.timeout_ms}ms"
            except httpx.TransportError as exc:
                last_error = f"transport error: {exc.__class__.__name__}"
            except httpx.RequestError as exc:
                # redirect loops, undecodable bodies
                last_error = f"request error: {exc.__class__.__name__}"
            else:
                status = response.status_code
                if 400 <= status < 500 and status != 429:
                    elapsed_ms = int((time.monotonic() - started) * 1000)
                    logger.warning("%s rejected request with HTTP %d (%dms)", source.name, status, elapsed_ms)
                    raise SourceRejected(source.name, f"HTTP {status}", status_code=status)
                if status >= 400:
                    last_error = f"HTTP {status}"
                else:
                    try:
                        data = response.json()
                    except ValueError:
                        last_error = "response body is not valid JSON"
                    else:
                        elapsed_ms = int((time.monotonic() - started) * 1000)
                        logger.debug("%s succeeded on attempt %d (%dms)", source.name, attempt + 1, elapsed_ms)
                        return data

            logger.info("%s attempt %d/%d failed: %s", source.name, attempt + 1, total_attempts, last_error)
            if attempt < source.retry_attempts:
                delay_ms = source.retry_delay_ms * (2 ** attempt)
                await self._sleep(delay_ms / 1000)

        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.warning(
            "%s unavailable after %d attempts (%dms): %s",
            source.name, total_attempts, elapsed_ms, last_error,
        )
        raise SourceUnavailable(source.name, f"failed after {total_attempts} attempts: {last_error}")
