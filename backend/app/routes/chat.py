"""
Chat route: single POST that proxies to Gemini.

Streaming modes return an OpenAI-compatible SSE stream; image modes return
``{"content": ..., "imageUrl": ...}``. Upstream failures are mapped before
any streamed byte is sent.
"""

import httpx
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from app.config import Settings, get_settings
from app.models.request import ChatRequest
from app.models.response import ErrorResponse, ImageReply
from app.providers.gemini import GeminiClient
from app.services.mode_router import ModeRouter, StreamReply

router = APIRouter()

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared upstream connection pool created in the app lifespan."""
    return request.app.state.http_client


def get_gemini_client(
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> GeminiClient:
    """Build the upstream client with the credential injected explicitly."""
    return GeminiClient(settings.gemini_api_key, settings.gemini_model, http_client)


def stream_response(reply: StreamReply, headers: dict[str, str]) -> StreamingResponse:
    """SSE response that releases the upstream even if the body is never iterated."""
    return StreamingResponse(
        reply.events(),
        media_type="text/event-stream",
        headers={**headers, **STREAM_HEADERS},
        background=BackgroundTask(reply.response.aclose),
    )


@router.options("/chat", status_code=status.HTTP_204_NO_CONTENT)
async def chat_preflight(settings: Settings = Depends(get_settings)):
    """CORS preflight for clients that send a bare OPTIONS"""
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=settings.cors_headers)


@router.post(
    "/chat",
    response_model=ImageReply,
    responses={
        200: {"content": {"text/event-stream": {}}},
        400: {"model": ErrorResponse},
        402: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def chat(
    request: ChatRequest,
    client: GeminiClient = Depends(get_gemini_client),
    settings: Settings = Depends(get_settings),
):
    """
    POST /api/chat

    Modes:
    - chat, summarize, translate, code: SSE stream of
      ``data: {"choices":[{"delta":{"content":...},"index":0}]}`` events
      terminated by ``data: [DONE]``
    - image: JSON description of the requested image
    - edit: JSON answer about the supplied ``imageToEdit`` data URL

    Errors are returned as ``{"error": message}`` with status 400, 402, 429
    or 500.
    """
    reply = await ModeRouter(client).dispatch(request)

    if isinstance(reply, StreamReply):
        return stream_response(reply, settings.cors_headers)

    return JSONResponse(reply.to_body(), headers=settings.cors_headers)
