"""Shared helpers for truenas-updater tests."""

from typing import Any
from unittest.mock import AsyncMock

import orjson


def make_response(body: str | bytes | Any = "", status: int = 200) -> AsyncMock:
    """Create a mock aiohttp response usable as an async context manager.

    Non-string bodies are serialized to JSON.
    """
    if isinstance(body, bytes):
        text = body.decode()
    elif isinstance(body, str):
        text = body
    else:
        text = orjson.dumps(body).decode()

    response = AsyncMock()
    response.__aenter__.return_value = response
    response.status = status
    response.text = AsyncMock(return_value=text)
    return response


def make_undecodable_response(status: int = 200) -> AsyncMock:
    """Create a mock response whose body is not valid UTF-8."""
    response = make_response(status=status)
    response.text.side_effect = UnicodeDecodeError(
        "utf-8", b"Caf\xe9", 3, 4, "invalid continuation byte"
    )
    return response
