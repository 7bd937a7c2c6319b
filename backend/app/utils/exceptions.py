"""
Error taxonomy for the chat relay.

Every error that can be detected before the response is committed derives
from RelayError and is rendered as ``{"error": message}`` with its status
code by the handlers registered in app.main.

Usage:
    from app.utils.exceptions import RateLimited, raise_bad_request

    raise RateLimited()
    raise_bad_request("imageToEdit is required for edit mode")
"""

from typing import NoReturn

from fastapi import status


class RelayError(Exception):
    """Base class for errors surfaced to the client as a JSON body."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(RelayError):
    """Provider credential or other required setting is missing."""

    default_message = "GEMINI_API_KEY is not configured"


class InvalidRequest(RelayError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class RateLimited(RelayError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Rate limit exceeded. Please try again later."


class QuotaExceeded(RelayError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_message = "Payment required. Please add credits to your account to continue."


class UpstreamFailure(RelayError):
    default_message = "AI service error. Please try again."


class MalformedFragment(ValueError):
    """A single streamed payload that could not be parsed. Never surfaced."""


def raise_bad_request(detail: str) -> NoReturn:
    """Raise HTTP 400 Bad Request."""
    raise InvalidRequest(detail)
