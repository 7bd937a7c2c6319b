"""Tests for mode dispatch and upstream request shapes."""

import httpx
import pytest

from app.models.request import ChatMode, ChatRequest
from app.models.response import ImageReply
from app.providers.gemini import GeminiClient
from app.services.mode_router import (
    ModeRouter,
    StreamReply,
    build_chat_contents,
)
from app.services.prompts import ACKNOWLEDGEMENT, CODE_PROMPT, CHAT_PROMPT, SUMMARIZE_PROMPT
from app.utils.exceptions import ConfigurationError, InvalidRequest, RateLimited, UpstreamFailure
from app.utils.sse import SSE_DONE_EVENT, format_delta

from conftest import StubUpstream, gemini_event


def _router(upstream: StubUpstream) -> ModeRouter:
    return ModeRouter(GeminiClient("test-key", "gemini-1.5-flash", upstream.client()))


def _request(mode: str, content: str = "hi", **extra) -> ChatRequest:
    return ChatRequest(messages=[{"role": "user", "content": content}], mode=mode, **extra)


def test_missing_credential_fails_before_any_request():
    upstream = StubUpstream()
    with pytest.raises(ConfigurationError, match="GEMINI_API_KEY is not configured"):
        GeminiClient(None, "gemini-1.5-flash", upstream.client())
    with pytest.raises(ConfigurationError):
        GeminiClient("", "gemini-1.5-flash", upstream.client())
    assert upstream.requests == []


def test_chat_contents_prepend_system_prompt_and_acknowledgement():
    messages = [
        {"role": "user", "content": "hello"},
        {"role": "assistant", "content": "hi!"},
        {"role": "user", "content": "write a loop"},
    ]
    contents = build_chat_contents(messages, ChatMode.CODE)
    assert contents[0] == {"role": "user", "parts": [{"text": CODE_PROMPT}]}
    assert contents[1] == {"role": "model", "parts": [{"text": ACKNOWLEDGEMENT}]}
    assert [c["role"] for c in contents[2:]] == ["user", "model", "user"]
    assert contents[-1]["parts"][0]["text"] == "write a loop"


def test_chat_contents_skip_prompt_when_conversation_starts_with_model():
    contents = build_chat_contents([{"role": "assistant", "content": "Welcome"}], ChatMode.CHAT)
    assert contents == [{"role": "model", "parts": [{"text": "Welcome"}]}]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "mode, prompt",
    [("chat", CHAT_PROMPT), ("summarize", SUMMARIZE_PROMPT), ("code", CODE_PROMPT)],
)
async def test_text_modes_open_a_stream(mode, prompt):
    upstream = StubUpstream(lambda request: httpx.Response(200, content=gemini_event("ok")))
    reply = await _router(upstream).dispatch(_request(mode))

    assert isinstance(reply, StreamReply)
    events = [e async for e in reply.events()]
    assert events == [format_delta("ok"), SSE_DONE_EVENT]

    sent = upstream.requests[0]
    assert sent.url.path == "/v1beta/models/gemini-1.5-flash:streamGenerateContent"
    assert sent.url.params["alt"] == "sse"
    assert sent.url.params["key"] == "test-key"

    payload = upstream.payload()
    assert payload["contents"][0]["parts"][0]["text"] == prompt
    assert payload["generationConfig"]["maxOutputTokens"] == 8192
    assert {s["threshold"] for s in payload["safetySettings"]} == {"BLOCK_NONE"}
    assert len(payload["safetySettings"]) == 4


@pytest.mark.asyncio
async def test_stream_status_is_mapped_before_relaying():
    upstream = StubUpstream(lambda request: httpx.Response(429, text="Resource exhausted"))
    with pytest.raises(RateLimited):
        await _router(upstream).dispatch(_request("chat"))


@pytest.mark.asyncio
async def test_image_mode_returns_text_and_generated_image():
    document = {
        "candidates": [{
            "content": {
                "parts": [
                    {"text": "A fox in the snow"},
                    {"inlineData": {"mimeType": "image/png", "data": "iVBORw0"}},
                ]
            }
        }]
    }
    upstream = StubUpstream(lambda request: httpx.Response(200, json=document))
    reply = await _router(upstream).dispatch(_request("image", "a red fox"))

    assert reply == ImageReply(content="A fox in the snow", image_url="data:image/png;base64,iVBORw0")
    assert upstream.requests[0].url.path == "/v1beta/models/gemini-1.5-flash:generateContent"
    payload = upstream.payload()
    assert '"a red fox"' in payload["contents"][0]["parts"][0]["text"]
    assert payload["generationConfig"]["temperature"] == 0.9
    assert payload["generationConfig"]["maxOutputTokens"] == 1024


@pytest.mark.asyncio
async def test_image_mode_falls_back_when_upstream_has_no_text():
    upstream = StubUpstream(lambda request: httpx.Response(200, json={"candidates": []}))
    reply = await _router(upstream).dispatch(ChatRequest(messages=[], mode="image"))

    assert reply.content == "I've created an image description for you."
    assert reply.image_url is None
    assert '"a beautiful image"' in upstream.payload()["contents"][0]["parts"][0]["text"]


@pytest.mark.asyncio
async def test_edit_mode_sends_instruction_and_inline_image():
    document = {"candidates": [{"content": {"parts": [{"text": "Converted to grayscale"}]}}]}
    upstream = StubUpstream(lambda request: httpx.Response(200, json=document))
    request = _request("edit", "make it grayscale", imageToEdit="data:image/webp;base64,UklGR")
    reply = await _router(upstream).dispatch(request)

    assert reply.content == "Converted to grayscale"
    parts = upstream.payload()["contents"][0]["parts"]
    assert parts[0] == {"text": "make it grayscale"}
    assert parts[1] == {"inline_data": {"mime_type": "image/webp", "data": "UklGR"}}
    assert upstream.payload()["generationConfig"]["maxOutputTokens"] == 2048


@pytest.mark.asyncio
async def test_edit_without_image_is_rejected_without_upstream_call():
    upstream = StubUpstream()
    with pytest.raises(InvalidRequest, match="imageToEdit"):
        await _router(upstream).dispatch(_request("edit", "make it grayscale"))
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_network_error_becomes_upstream_failure():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    upstream = StubUpstream(refuse)
    with pytest.raises(UpstreamFailure):
        await _router(upstream).dispatch(_request("image"))
