"""
Upstream HTTP status classification.

Runs strictly before any streamed bytes are sent downstream; once relaying
has started the status line is committed and failures truncate the stream.
"""

import logging

import httpx

from app.utils.exceptions import QuotaExceeded, RateLimited, RelayError, UpstreamFailure

logger = logging.getLogger(__name__)


def map_upstream_error(status_code: int, body: str, context: str = "Gemini API") -> RelayError:
    """Translate an upstream failure status into a client-facing error.

    The upstream body is logged, never returned to the client.
    """
    logger.error(f"{context} error: {status_code} {body}")

    if status_code == httpx.codes.TOO_MANY_REQUESTS:
        return RateLimited()
    if status_code == httpx.codes.PAYMENT_REQUIRED:
        return QuotaExceeded()
    return UpstreamFailure()


async def raise_for_upstream(response: httpx.Response, context: str = "Gemini API") -> None:
    """Raise the mapped error for a non-2xx upstream response.

    Reads and closes the body of a failed streaming response; successful
    responses are left open for the caller.
    """
    if response.is_success:
        return
    try:
        await response.aread()
        body = response.text
    finally:
        await response.aclose()
    raise map_upstream_error(response.status_code, body, context)
