"""
Streaming relay: Gemini SSE in, OpenAI-compatible SSE out.

The upstream body arrives in arbitrary byte chunks that are not aligned to
lines or UTF-8 sequences. httpx's aiter_lines() carries the unfinished tail
of a chunk over to the next one, so a payload straddling a chunk boundary is
parsed once it is whole instead of being dropped.

Each decoded fragment is re-emitted as soon as it is seen; no assistant text
is accumulated here. Aggregating the full message is the caller's job.
"""

import logging
from enum import Enum
from typing import AsyncIterator, Callable, Optional

import httpx
import orjson

from app.providers.gemini import GeminiClient
from app.utils.exceptions import MalformedFragment
from app.utils.sse import SSE_DATA_PREFIX, SSE_DONE_EVENT, SSE_DONE_PAYLOAD, format_delta

logger = logging.getLogger(__name__)

ExtractContent = Callable[[dict], Optional[str]]


class RelayState(str, Enum):
    IDLE = "idle"
    RELAYING = "relaying"
    CLOSED = "closed"


def parse_fragment(
    payload: str, extract_content: ExtractContent = GeminiClient.extract_text
) -> str:
    """
    Parse one provider payload and return its text fragment.

    Returns:
        The fragment, or "" when the event carries no text

    Raises:
        MalformedFragment: payload is not a well-formed JSON object
    """
    try:
        data = orjson.loads(payload)
    except orjson.JSONDecodeError as e:
        raise MalformedFragment(str(e)) from e

    if not isinstance(data, dict):
        raise MalformedFragment(f"expected a JSON object, got {type(data).__name__}")

    try:
        content = extract_content(data)
    except (AttributeError, IndexError, KeyError, TypeError) as e:
        raise MalformedFragment(f"unexpected event shape: {e!r}") from e

    return content if isinstance(content, str) else ""


class StreamRelay:
    """Single-use relay for one upstream stream.

    Idle -> Relaying when iteration starts, Relaying -> Closed when the
    upstream sentinel is seen or the upstream body ends.
    """

    def __init__(self, extract_content: ExtractContent = GeminiClient.extract_text):
        self.state = RelayState.IDLE
        self.dropped = 0
        self._extract = extract_content

    async def relay(self, lines: AsyncIterator[str]) -> AsyncIterator[str]:
        """Turn complete upstream lines into downstream SSE events."""
        self.state = RelayState.RELAYING
        try:
            async for line in lines:
                if event := self._handle_line(line):
                    yield event
        except httpx.HTTPError as e:
            # Status is already committed; truncate without a sentinel
            logger.warning(f"Upstream stream failed mid-relay: {e!r}")
            self.state = RelayState.CLOSED
            return

        if self.state is not RelayState.CLOSED:
            # Gemini ends the body without an explicit sentinel
            self.state = RelayState.CLOSED
            yield SSE_DONE_EVENT

    def _handle_line(self, line: str) -> str | None:
        if self.state is RelayState.CLOSED:
            return None
        if not line.startswith(SSE_DATA_PREFIX):
            return None

        payload = line[len(SSE_DATA_PREFIX):]
        if payload.strip() == SSE_DONE_PAYLOAD:
            self.state = RelayState.CLOSED
            return SSE_DONE_EVENT

        try:
            content = parse_fragment(payload, self._extract)
        except MalformedFragment as e:
            self.dropped += 1
            logger.debug(f"Dropping malformed fragment: {e}")
            return None

        if content:
            return format_delta(content)
        return None


def relay_stream(
    lines: AsyncIterator[str],
    extract_content: ExtractContent = GeminiClient.extract_text,
) -> AsyncIterator[str]:
    """Relay upstream SSE lines as normalized SSE events"""
    return StreamRelay(extract_content).relay(lines)


async def relay_response(response: httpx.Response) -> AsyncIterator[str]:
    """Relay an open upstream response and always release it.

    When the downstream client goes away the server closes this generator,
    which closes the upstream response instead of reading it to the end.
    """
    try:
        async for event in relay_stream(response.aiter_lines()):
            yield event
    finally:
        await response.aclose()
