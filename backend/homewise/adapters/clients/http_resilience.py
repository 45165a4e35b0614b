from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from ...config import settings

log = logging.getLogger(__name__)

RETRYABLE_STATUS = (429, 500, 502, 503, 504)


async def resilient_request(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    json: Any | None = None,
    timeout_s: float | None = None,
    max_retries: int | None = None,
    client: httpx.AsyncClient | None = None,
) -> httpx.Response:
    """
    One outbound call with exponential backoff on timeouts, network errors and
    retryable statuses. Raises the last error once retries are spent.

    Pass `client` to reuse a connection pool (tests pass one backed by MockTransport).
    """
    timeout = httpx.Timeout(float(timeout_s if timeout_s is not None else settings.HTTP_TIMEOUT_S))
    retries = int(max_retries if max_retries is not None else settings.HTTP_MAX_RETRIES)
    backoff = float(settings.HTTP_BACKOFF_BASE_S)

    last_exc: Exception | None = None
    for attempt in range(retries + 1):
        try:
            if client is not None:
                resp = await client.request(method, url, headers=headers, params=params, json=json, timeout=timeout)
            else:
                async with httpx.AsyncClient(timeout=timeout) as c:
                    resp = await c.request(method, url, headers=headers, params=params, json=json)

            if resp.status_code in RETRYABLE_STATUS:
                raise httpx.HTTPStatusError("retryable_status", request=resp.request, response=resp)

            resp.raise_for_status()
            return resp
        except (httpx.TimeoutException, httpx.NetworkError, httpx.HTTPStatusError) as e:
            last_exc = e
            if isinstance(e, httpx.HTTPStatusError) and e.response.status_code not in RETRYABLE_STATUS:
                break
            if attempt >= retries:
                break
            log.info("retrying %s %s after %s (attempt %s)", method, url, type(e).__name__, attempt + 1)
            await asyncio.sleep(min(5.0, backoff * (2**attempt)))

    assert last_exc is not None
    raise last_exc
