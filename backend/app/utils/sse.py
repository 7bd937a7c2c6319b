import orjson

SSE_DATA_PREFIX = "data: "
SSE_DONE_PAYLOAD = "[DONE]"
SSE_DONE_EVENT = f"{SSE_DATA_PREFIX}{SSE_DONE_PAYLOAD}\n\n"


def format_delta(content: str) -> str:
    """Format one text fragment as an OpenAI-compatible SSE chunk"""
    payload = {"choices": [{"delta": {"content": content}, "index": 0}]}
    return f"{SSE_DATA_PREFIX}{orjson.dumps(payload).decode()}\n\n"
