import logging

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager

from app.config import check_provider_credentials, get_settings
from app.routes import chat, health
from app.utils.exceptions import RelayError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle events"""
    settings = get_settings()
    check_provider_credentials(settings)

    # One pooled client for all upstream calls
    app.state.http_client = httpx.AsyncClient(
        base_url=settings.gemini_base_url,
        timeout=float(settings.provider_timeout),
    )

    yield

    await app.state.http_client.aclose()


app = FastAPI(
    title="Stechy Chat Relay",
    description="Gemini proxy with OpenAI-compatible SSE streaming",
    version="1.0.0",
    lifespan=lifespan,
)

# Browser preflights (requests carrying Origin + Access-Control-Request-Method)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=get_settings().cors_allow_headers,
)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        {"error": message},
        status_code=status_code,
        headers=get_settings().cors_headers,
    )


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError):
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())[1:]) or "body"
        problems.append(f"{field}: {error.get('msg')}")
    return _error_response(400, "; ".join(problems) or "Invalid request")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Error in chat function: {exc!r}")
    return _error_response(500, "Internal server error")


# Include routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(chat.router, prefix="/api", tags=["chat"])


def serve():
    """Run the API with uvicorn using host/port from settings."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.debug)
