# src/sanity/core/http_utils.py
import aiohttp


async def read_error_message(response: aiohttp.ClientResponse) -> str:
    """Pulls the human-readable message out of a backend error response."""
    text = await response.text()
    try:
        body = await response.json(content_type=None)
    except ValueError:
        return text or response.reason or "Request failed"
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return text or response.reason or "Request failed"
