"""Fetches a picture of Rocco from the image service."""

import logging

import httpx

logger = logging.getLogger(__name__)


class ImageError(RuntimeError):
    """Raised when the image service cannot be reached or returns an error."""


async def fetch_self_image(url: str, timeout: float = 30.0) -> bytes:
    """GET `url` and return the raw image bytes."""
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            resp = await client.get(url)
            resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ImageError(f"Image service returned HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise ImageError(f"Cannot fetch image from {url}") from e

    logger.debug("fetched image from %s (%d bytes)", url, len(resp.content))
    return resp.content
