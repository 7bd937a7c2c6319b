import httpx
from typing import Optional

from app.providers.base import BaseProvider
from app.utils.message_helpers import to_data_url


class GeminiClient(BaseProvider):
    name = "Gemini API"
    credential_name = "GEMINI_API_KEY"

    @staticmethod
    def extract_text(data: dict) -> str | None:
        """Extract text of the first part of the first candidate."""
        candidates = data.get("candidates") or []
        if candidates:
            parts = (candidates[0].get("content") or {}).get("parts") or []
            if parts and isinstance(parts[0], dict):
                return parts[0].get("text")
        return None

    @staticmethod
    def extract_image(data: dict) -> str | None:
        """Return the first inline image of the first candidate as a data URL."""
        candidates = data.get("candidates") or []
        if not candidates:
            return None
        for part in (candidates[0].get("content") or {}).get("parts") or []:
            # REST responses use camelCase, requests accept snake_case too
            inline = part.get("inlineData") or part.get("inline_data")
            if inline and inline.get("data"):
                mime_type = inline.get("mimeType") or inline.get("mime_type") or "image/png"
                return to_data_url(mime_type, inline["data"])
        return None

    async def generate(self, contents: list[dict], generation_config: dict) -> dict:
        """Complete response from generateContent"""
        payload = {
            "contents": contents,
            "generationConfig": generation_config,
        }
        url = f"/models/{self.model}:generateContent?key={self.api_key}"
        return await self._post_json(url, payload)

    async def open_stream(
        self,
        contents: list[dict],
        generation_config: dict,
        safety_settings: Optional[list[dict]] = None,
    ) -> httpx.Response:
        """Streaming response from streamGenerateContent in SSE framing"""
        payload = {
            "contents": contents,
            "generationConfig": generation_config,
        }
        if safety_settings:
            payload["safetySettings"] = safety_settings

        url = f"/models/{self.model}:streamGenerateContent?alt=sse&key={self.api_key}"
        return await self._open_sse(url, payload)
