"""
Mode router: one handler per ChatMode.

Image modes wait for a complete upstream document and answer with JSON.
The text modes prepend their system instruction and open an upstream stream
that the route hands to the relay.
"""

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Dict, Union

import httpx

from app.models.request import ChatMode, ChatRequest
from app.models.response import ImageReply
from app.providers.gemini import GeminiClient
from app.services.prompts import (
    ACKNOWLEDGEMENT,
    DEFAULT_EDIT_PROMPT,
    DEFAULT_IMAGE_PROMPT,
    EDIT_FALLBACK_TEXT,
    IMAGE_FALLBACK_TEXT,
    build_image_prompt,
    get_system_prompt,
)
from app.services.relay import relay_response
from app.utils.exceptions import raise_bad_request
from app.utils.message_helpers import format_for_gemini, last_prompt, split_data_url

logger = logging.getLogger(__name__)


# =============================================================================
# GENERATION SETTINGS
# =============================================================================

EDIT_CONFIG = {"temperature": 0.7, "topK": 40, "topP": 0.95, "maxOutputTokens": 2048}
IMAGE_CONFIG = {"temperature": 0.9, "topK": 40, "topP": 0.95, "maxOutputTokens": 1024}
CHAT_CONFIG = {"temperature": 0.7, "topK": 40, "topP": 0.95, "maxOutputTokens": 8192}

SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_NONE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]


@dataclass
class StreamReply:
    """An upstream stream that passed status checks and is ready to relay"""

    response: httpx.Response

    def events(self) -> AsyncIterator[str]:
        return relay_response(self.response)


Reply = Union[ImageReply, StreamReply]
Handler = Callable[[ChatRequest], Awaitable[Reply]]


def build_chat_contents(messages: list[dict], mode: ChatMode) -> list[dict]:
    """Convert messages to Gemini turns, prefixed with the mode's instruction.

    Gemini has no system role here, so the instruction is sent as a user turn
    followed by a fixed model acknowledgement.
    """
    contents = [format_for_gemini(m) for m in messages]
    if contents and contents[0]["role"] != "model":
        contents[:0] = [
            {"role": "user", "parts": [{"text": get_system_prompt(mode)}]},
            {"role": "model", "parts": [{"text": ACKNOWLEDGEMENT}]},
        ]
    return contents


class ModeRouter:
    def __init__(self, client: GeminiClient):
        self.client = client
        self._handlers: Dict[ChatMode, Handler] = {
            ChatMode.EDIT: self.handle_edit,
            ChatMode.IMAGE: self.handle_image,
            ChatMode.CHAT: self.handle_stream,
            ChatMode.SUMMARIZE: self.handle_stream,
            ChatMode.TRANSLATE: self.handle_stream,
            ChatMode.CODE: self.handle_stream,
        }

    async def dispatch(self, request: ChatRequest) -> Reply:
        logger.info(f"Starting request with mode: {request.mode.value}, messages: {len(request.messages)}")
        return await self._handlers[request.mode](request)

    async def handle_edit(self, request: ChatRequest) -> ImageReply:
        """Instruction + inline image, answered in one piece."""
        if not request.image_to_edit:
            raise_bad_request("imageToEdit is required for edit mode")

        prompt = last_prompt(request.message_dicts(), DEFAULT_EDIT_PROMPT)
        mime_type, data = split_data_url(request.image_to_edit)
        contents = [{
            "parts": [
                {"text": prompt},
                {"inline_data": {"mime_type": mime_type, "data": data}},
            ]
        }]

        result = await self.client.generate(contents, EDIT_CONFIG)
        return ImageReply(
            content=self.client.extract_text(result) or EDIT_FALLBACK_TEXT,
            image_url=self.client.extract_image(result),
        )

    async def handle_image(self, request: ChatRequest) -> ImageReply:
        prompt = last_prompt(request.message_dicts(), DEFAULT_IMAGE_PROMPT)
        contents = [{"parts": [{"text": build_image_prompt(prompt)}]}]

        result = await self.client.generate(contents, IMAGE_CONFIG)
        return ImageReply(
            content=self.client.extract_text(result) or IMAGE_FALLBACK_TEXT,
            image_url=self.client.extract_image(result),
        )

    async def handle_stream(self, request: ChatRequest) -> StreamReply:
        contents = build_chat_contents(request.message_dicts(), request.mode)
        response = await self.client.open_stream(contents, CHAT_CONFIG, SAFETY_SETTINGS)
        return StreamReply(response)
