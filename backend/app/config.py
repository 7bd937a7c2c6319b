import logging
import sys
from functools import lru_cache

from pydantic_settings import BaseSettings
from typing import Dict, List, Optional


def setup_logging():
    """Configure application logging."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # httpx logs request URLs at INFO, and Gemini URLs carry the API key
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# Initialize logging on import
setup_logging()

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Provider credential (server-side only)
    gemini_api_key: Optional[str] = None

    # Provider endpoint and model
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Timeout settings (seconds)
    provider_timeout: int = 60

    # Headers the browser client is allowed to send
    cors_allow_headers: List[str] = [
        "authorization",
        "x-client-info",
        "apikey",
        "content-type",
    ]

    @property
    def cors_headers(self) -> Dict[str, str]:
        """Headers attached to every response for the browser client."""
        return {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": ", ".join(self.cors_allow_headers),
        }

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Return the process settings (FastAPI dependency, overridable in tests)."""
    return Settings()


def check_provider_credentials(current: Settings) -> bool:
    """Log a startup warning when the provider credential is missing.

    The server still starts; chat requests fail with a configuration error
    until GEMINI_API_KEY is set.
    """
    if current.gemini_api_key:
        return True
    logger.warning("=" * 60)
    logger.warning("GEMINI_API_KEY environment variable is not set!")
    logger.warning("Chat requests will fail until it is added to your .env file:")
    logger.warning("    GEMINI_API_KEY=your_api_key_here")
    logger.warning("=" * 60)
    return False
