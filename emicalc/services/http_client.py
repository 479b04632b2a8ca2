from __future__ import annotations

"""Async HTTP client util with retry.

GET JSON over `httpx.AsyncClient` with limited retries and exponential
backoff. Transport errors and 5xx responses are retried; 4xx responses with a
JSON body are handed back because rate providers describe failures such as an
invalid key inside the body. URLs are kept out of error messages since they
may embed an API key.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger("emicalc.http")


class HttpError(Exception):
    pass


class InvalidJsonError(HttpError):
    """The response arrived but its body is not a JSON object."""


def _decode(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError as e:
        raise InvalidJsonError(f"HTTP {response.status_code} with invalid JSON body") from e
    if not isinstance(data, dict):
        raise InvalidJsonError(f"expected a JSON object, got {type(data).__name__}")
    if response.status_code >= 400 and "result" not in data:
        raise HttpError(f"HTTP {response.status_code}")
    return data


async def get_json(
    url: str,
    *,
    timeout: float = 5.0,
    retries: int = 2,
    backoff: float = 0.5,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    last_err: Optional[Exception] = None
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        for attempt in range(retries + 1):
            try:
                response = await client.get(url)
            except httpx.TransportError as e:
                last_err = e
            else:
                if response.status_code < 500:
                    return _decode(response)
                last_err = HttpError(f"HTTP {response.status_code}")
            if attempt < retries:
                logger.debug("retrying rate request after error: %s", last_err)
                await asyncio.sleep(backoff * (2**attempt))
    raise HttpError(f"Failed to fetch JSON: {last_err}")
