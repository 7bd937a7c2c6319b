"""Message format conversion utilities for the Gemini API."""

from typing import Any, Sequence
import re

DATA_URL_PATTERN = re.compile(r"^data:([^;,]+);base64,(.+)$", re.DOTALL)


def is_data_url(value: str) -> bool:
    """
    Check that a string is a base64 data URL.

    Examples:
        >>> is_data_url("data:image/png;base64,iVBORw0...")
        True
        >>> is_data_url("https://example.com/cat.png")
        False
    """
    return bool(DATA_URL_PATTERN.match(value))


def get_mime_type_from_data_url(data_url: str) -> str:
    """
    Extract MIME type from data URL.

    Args:
        data_url: Base64 data URL (e.g., "data:image/jpeg;base64,...")

    Returns:
        MIME type string, "image/jpeg" when the URL has none
    """
    match = re.match(r'data:([^;]+);base64,', data_url)
    if match:
        return match.group(1)
    return "image/jpeg"  # Default fallback


def split_data_url(data_url: str) -> tuple[str, str]:
    """
    Split data URL into MIME type and base64 data.

    Args:
        data_url: Base64 data URL

    Returns:
        Tuple of (mime_type, base64_data)

    Examples:
        >>> split_data_url("data:image/png;base64,iVBORw0...")
        ("image/png", "iVBORw0...")
    """
    parts = data_url.split(',', 1)
    if len(parts) == 2:
        mime_type = get_mime_type_from_data_url(data_url)
        return mime_type, parts[1]
    return "image/jpeg", data_url  # Fallback


def to_data_url(mime_type: str, data: str) -> str:
    return f"data:{mime_type};base64,{data}"


def format_for_gemini(message: dict[str, Any]) -> dict[str, Any]:
    """
    Convert a chat message to a Gemini content turn.

    Gemini names the assistant role "model" and wraps text in a parts array:
    {"role": "model", "parts": [{"text": "..."}]}
    """
    role = "model" if message.get("role") == "assistant" else "user"
    return {
        "role": role,
        "parts": [{"text": message.get("content", "")}],
    }


def last_prompt(messages: Sequence[dict[str, Any]], default: str) -> str:
    """Return the content of the last message, or default when there is none."""
    if messages:
        content = messages[-1].get("content")
        if content:
            return content
    return default
