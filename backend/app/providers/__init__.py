from app.providers.base import BaseProvider
from app.providers.gemini import GeminiClient

__all__ = ["BaseProvider", "GeminiClient"]
