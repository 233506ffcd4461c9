"""Mock aiohttp session and response builders."""

from unittest.mock import AsyncMock, MagicMock


def make_response(status: int = 200, text: str = "", body: bytes = b"", headers: dict | None = None) -> AsyncMock:
    """Mock response usable as ``async with session.request(...) as resp``."""
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.headers = headers or {}
    mock_response.text = AsyncMock(return_value=text)
    mock_response.read = AsyncMock(return_value=body)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)
    return mock_response


def make_session(*responses, method: str = "request") -> MagicMock:
    """Mock session whose `method` returns `responses` in order.

    Exceptions in `responses` are raised instead of returned.
    """
    mock_session = MagicMock()
    mock_session.closed = False
    setattr(mock_session, method, MagicMock(side_effect=list(responses)))
    return mock_session
