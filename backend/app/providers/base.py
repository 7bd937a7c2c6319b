import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
import orjson

from app.services.status_mapper import raise_for_upstream
from app.utils.exceptions import ConfigurationError, UpstreamFailure

logger = logging.getLogger(__name__)


class BaseProvider(ABC):
    """Abstract base class for upstream AI providers.

    The credential is passed in explicitly per request; a provider never
    reads it from process-wide state.
    """

    name: str  # Provider identifier used in log lines
    credential_name: str = "API key"

    def __init__(self, api_key: Optional[str], model: str, client: httpx.AsyncClient):
        if not api_key:
            raise ConfigurationError(f"{self.credential_name} is not configured")
        self.api_key = api_key
        self.model = model
        self._client = client

    @abstractmethod
    async def generate(self, contents: list[dict], generation_config: dict) -> dict:
        """Request a complete (non-streamed) response document"""
        pass

    @abstractmethod
    async def open_stream(
        self,
        contents: list[dict],
        generation_config: dict,
        safety_settings: Optional[list[dict]] = None,
    ) -> httpx.Response:
        """Open a streaming response; the caller must close it"""
        pass

    async def _post_json(self, url: str, payload: dict[str, Any]) -> dict:
        """POST and return the decoded JSON body, mapping upstream failures."""
        try:
            response = await self._client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"{self.name} request failed: {e!r}")
            raise UpstreamFailure() from e

        await raise_for_upstream(response, self.name)
        try:
            return orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            logger.error(f"{self.name} returned invalid JSON: {e}")
            raise UpstreamFailure() from e

    async def _open_sse(self, url: str, payload: dict[str, Any]) -> httpx.Response:
        """Send a streaming POST and return the response once headers arrive."""
        request = self._client.build_request("POST", url, json=payload)
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error(f"{self.name} stream request failed: {e!r}")
            raise UpstreamFailure() from e

        await raise_for_upstream(response, self.name)
        return response
