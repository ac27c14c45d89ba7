"""Tests for the self-image fetch."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from rocco.images import ImageError, fetch_self_image

URL = "https://rocco-vercel.vercel.app/cat"


async def test_returns_bytes():
    resp = MagicMock()
    resp.content = b"\x89PNG"
    mock_get = AsyncMock(return_value=resp)
    with patch("httpx.AsyncClient.get", mock_get):
        assert await fetch_self_image(URL) == b"\x89PNG"
    assert mock_get.call_args[0][0] == URL


async def test_http_error():
    resp = MagicMock()
    resp.status_code = 404
    resp.raise_for_status.side_effect = httpx.HTTPStatusError(
        "", request=MagicMock(), response=resp
    )
    with patch("httpx.AsyncClient.get", AsyncMock(return_value=resp)):
        with pytest.raises(ImageError, match="HTTP 404"):
            await fetch_self_image(URL)


async def test_connect_error():
    with patch("httpx.AsyncClient.get", AsyncMock(side_effect=httpx.ConnectError("refused"))):
        with pytest.raises(ImageError, match="Cannot fetch"):
            await fetch_self_image(URL)
