from app.utils.sse import format_delta
from app.utils.message_helpers import format_for_gemini, split_data_url

__all__ = ["format_delta", "format_for_gemini", "split_data_url"]
