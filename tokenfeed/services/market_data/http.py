"""
HTTP helpers shared by the market-data adapters.

Turns aiohttp outcomes into the adapter error contract:
- non-2xx status or unreadable body -> ProviderError
- bounded wait elapsed -> ProviderTimeout
- connection failures -> ProviderError (status None, retryable)

No retries here: retry policy belongs to the aggregator.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import aiohttp

from tokenfeed.core.exceptions import ProviderError, ProviderTimeout

logger = logging.getLogger(__name__)

# Default bounded wait per request (seconds)
DEFAULT_TIMEOUT = 6.0


async def request_json(
    session: aiohttp.ClientSession,
    method: str,
    url: str,
    *,
    provider: str,
    timeout: float = DEFAULT_TIMEOUT,
    params: Mapping[str, str] | None = None,
    json: Any = None,
    headers: Mapping[str, str] | None = None,
) -> Any:
    """
    Perform one request and decode the JSON body.

    Args:
        session: Open aiohttp session
        method: HTTP method
        url: Absolute URL
        provider: Provider id for error reporting
        timeout: Total request timeout in seconds
        params: Query parameters
        json: JSON body
        headers: Extra headers

    Returns:
        Decoded JSON payload

    Raises:
        ProviderError: Non-2xx status, invalid JSON or connection failure
        ProviderTimeout: Timeout elapsed
    """
    client_timeout = aiohttp.ClientTimeout(total=timeout)

    try:
        async with session.request(
            method,
            url,
            params=params,
            json=json,
            headers=headers,
            timeout=client_timeout,
        ) as resp:
            if not 200 <= resp.status < 300:
                body = await resp.text()
                logger.warning(f"{provider} returned {resp.status} for {url}")
                raise ProviderError(
                    provider,
                    resp.status,
                    f"{provider} {resp.status}: {body[:200]}",
                )

            try:
                return await resp.json(content_type=None)
            except ValueError as e:
                raise ProviderError(
                    provider,
                    resp.status,
                    f"{provider} returned invalid JSON: {e}",
                ) from e

    except TimeoutError:
        logger.warning(f"{provider} timeout after {timeout}s")
        raise ProviderTimeout(provider, timeout) from None

    except aiohttp.ClientError as e:
        logger.warning(f"{provider} connection error: {e}")
        raise ProviderError(
            provider,
            None,
            f"{provider} connection error: {type(e).__name__}: {e}",
        ) from e


def extract_records(payload: Any, *keys: str) -> list[dict]:
    """
    Pull a list of JSON objects out of a response envelope.

    Accepts a bare list or a mapping holding the list under one of `keys`.
    Anything that is not a JSON object is dropped; a malformed envelope
    yields an empty list.
    """
    items: Any = payload
    if isinstance(payload, Mapping):
        items = None
        for key in keys:
            candidate = payload.get(key)
            if isinstance(candidate, Sequence) and not isinstance(candidate, str):
                items = candidate
                break

    if not isinstance(items, Sequence) or isinstance(items, str):
        return []

    return [item for item in items if isinstance(item, dict)]
