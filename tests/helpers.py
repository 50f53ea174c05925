"""Shared builders for the test suite."""

import io
from datetime import datetime

import httpx
from PIL import Image

from top_headlines.models import Article


def make_article(
    title="Title",
    url="https://example.com/a",
    published="2024-01-01T00:00:00Z",
    image_url=None,
    category=None,
    **kwargs,
) -> Article:
    published_at = None
    if published:
        published_at = datetime.fromisoformat(published.replace("Z", "+00:00"))
    return Article(
        title=title,
        url=url,
        image_url=image_url,
        published_at=published_at,
        published_raw=published,
        category=category,
        **kwargs,
    )


def image_bytes(size=(200, 100), mode="RGB", fmt="PNG") -> bytes:
    buffer = io.BytesIO()
    color = (10, 20, 30, 128) if mode == "RGBA" else (10, 20, 30)
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
