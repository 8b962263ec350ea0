"""HTTP POST with bounded retries and exponential backoff."""

import asyncio
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


def is_retryable(status_code: int | None) -> bool:
    """Check whether a failed request may succeed on retry.

    Client errors (4xx) are terminal except 429. Transport errors
    (no status), 5xx and 429 are retryable.

    Args:
        status_code: HTTP status of the failed response, if any.

    Returns:
        True if the request should be retried.
    """
    if status_code is None:
        return True
    return not (400 <= status_code < 500 and status_code != 429)


def status_of(error: Exception) -> int | None:
    """Get the HTTP status code carried by an httpx error, if any."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    return None


async def post_with_retry(
    url: str,
    payload: dict[str, Any],
    headers: dict[str, str] | None = None,
    timeout: float = 15.0,
    max_attempts: int = 3,
    backoff: float = 0.5,
    client: httpx.AsyncClient | None = None,
) -> httpx.Response:
    """POST JSON to a URL, retrying transient failures.

    Waits ``backoff * 2 ** attempt`` seconds between attempts, with no jitter.

    Args:
        url: Target URL.
        payload: JSON-serializable request body.
        headers: Request headers.
        timeout: Request timeout in seconds.
        max_attempts: Maximum number of attempts.
        backoff: Base backoff in seconds.
        client: Optional HTTP client to reuse.

    Returns:
        Successful response.

    Raises:
        httpx.HTTPStatusError: On a terminal status or when attempts run out.
        httpx.RequestError: On a transport error when attempts run out.
        ValueError: If max_attempts is below 1.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    try:
        for attempt in range(max_attempts):
            try:
                response = await client.post(url, json=payload, headers=headers, timeout=timeout)
                response.raise_for_status()
                return response
            except (httpx.HTTPStatusError, httpx.RequestError) as e:
                status_code = status_of(e)
                if not is_retryable(status_code):
                    raise

                if attempt >= max_attempts - 1:
                    raise

                wait = backoff * 2**attempt
                logger.warning(
                    "POST %s failed (attempt %d/%d, status=%s), retrying in %.2fs",
                    url,
                    attempt + 1,
                    max_attempts,
                    status_code,
                    wait,
                )
                await asyncio.sleep(wait)
    finally:
        if owns_client:
            await client.aclose()
