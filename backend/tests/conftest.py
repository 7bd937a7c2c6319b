"""Shared fixtures: a stub Gemini upstream behind httpx.MockTransport."""

from typing import Callable, Optional

import httpx
import orjson
import pytest
from fastapi.testclient import TestClient

from app.config import Settings, get_settings
from app.main import app
from app.routes.chat import get_http_client

BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def gemini_event(text: str) -> bytes:
    """One Gemini streamGenerateContent SSE event carrying a text part."""
    data = {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}, "index": 0}]}
    return b"data: " + orjson.dumps(data) + b"\r\n\r\n"


class StubUpstream:
    """Records outgoing requests and answers with a configurable handler."""

    def __init__(self, handler: Optional[Callable[[httpx.Request], httpx.Response]] = None):
        self.requests: list[httpx.Request] = []
        self.handler = handler or (lambda request: httpx.Response(200, json={}))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self), base_url=BASE_URL)

    def payload(self, index: int = -1) -> dict:
        return orjson.loads(self.requests[index].content)


@pytest.fixture
def upstream():
    return StubUpstream()


@pytest.fixture
def api_settings():
    return Settings(gemini_api_key="test-key", gemini_model="gemini-1.5-flash")


@pytest.fixture
def client(upstream, api_settings):
    app.dependency_overrides[get_settings] = lambda: api_settings
    app.dependency_overrides[get_http_client] = upstream.client
    yield TestClient(app)
    app.dependency_overrides.clear()
