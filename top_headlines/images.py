"""Thumbnail download, validation and fit-scaling."""

from __future__ import annotations

import asyncio
import io
import logging
from importlib import resources
from pathlib import Path
from typing import Optional, Tuple, Union

import httpx
from PIL import Image, UnidentifiedImageError

from .models import Article, ImageHandle, ImageSource

logger = logging.getLogger(__name__)

MAX_WIDTH = 100
MAX_HEIGHT = 70

_DECODE_ERRORS = (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError)


def default_image_path() -> Path:
    """Location of the thumbnail bundled with the package."""
    return Path(str(resources.files(__package__) / "data" / "default.png"))


class CancellationToken:
    """Cancellation flag tied to the lifetime of whoever owns a request."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled


def fit_dimensions(
    width: int, height: int, max_width: int = MAX_WIDTH, max_height: int = MAX_HEIGHT
) -> Tuple[int, int]:
    """Uniformly scale ``width`` x ``height`` to fit inside the display box."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid image size {width}x{height}")
    ratio = min(max_width / width, max_height / height)
    return max(1, int(width * ratio)), max(1, int(height * ratio))


def decode_and_scale(
    data: bytes, max_width: int = MAX_WIDTH, max_height: int = MAX_HEIGHT
) -> Image.Image:
    """Decode image bytes and return a copy scaled to fit the box.

    The result is RGBA when the source carries transparency and RGB otherwise.
    Raises the Pillow decode errors for unreadable data.
    """
    with Image.open(io.BytesIO(data)) as source:
        source.load()
        has_alpha = source.mode in ("RGBA", "LA", "PA") or "transparency" in source.info
        converted = source.convert("RGBA" if has_alpha else "RGB")

    new_width, new_height = fit_dimensions(
        converted.width, converted.height, max_width, max_height
    )
    return converted.resize((new_width, new_height), Image.Resampling.BILINEAR)


class ImageResolver:
    """Resolve an article's thumbnail, falling back to the bundled image.

    Decoding runs in a worker thread so the event loop stays free. Every await
    is followed by a cancellation check; once the owner's token is cancelled
    ``resolve`` returns None and no result is produced. The bundled image is
    decoded once per resolver and shared by all cards.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        default_image: Union[str, Path, None] = None,
        max_width: int = MAX_WIDTH,
        max_height: int = MAX_HEIGHT,
    ) -> None:
        self._client = client
        self.default_image = Path(default_image) if default_image else default_image_path()
        self.max_width = max_width
        self.max_height = max_height
        self._default: Optional[ImageHandle] = None
        self._default_lock = asyncio.Lock()

    async def resolve(
        self, article: Article, token: Optional[CancellationToken] = None
    ) -> Optional[ImageHandle]:
        token = token or CancellationToken()
        if token.is_cancelled:
            return None

        url = article.image_url
        if not url:
            return await self.load_default(token)

        try:
            response = await self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            if token.is_cancelled:
                return None
            logger.warning("Image fetch failed for %r: %s", url, exc)
            return await self.load_default(token)

        if token.is_cancelled:
            return None

        if response.status_code != 200:
            logger.warning("Image load failed (HTTP %d): %s", response.status_code, url)
            return await self.load_default(token)

        content_type = response.headers.get("content-type")
        if content_type and not content_type.lower().startswith("image/"):
            logger.warning(
                "Skipping invalid image content-type '%s' for %s", content_type, url
            )
            return await self.load_default(token)

        try:
            image = await asyncio.to_thread(
                decode_and_scale, response.content, self.max_width, self.max_height
            )
        except _DECODE_ERRORS as exc:
            if token.is_cancelled:
                return None
            logger.warning("Failed to decode image from %s: %s", url, exc)
            return await self.load_default(token)

        if token.is_cancelled:
            return None
        return ImageHandle(
            source=ImageSource.REMOTE,
            image=image,
            width=image.width,
            height=image.height,
            url=url,
        )

    async def load_default(
        self, token: Optional[CancellationToken] = None
    ) -> Optional[ImageHandle]:
        """Return the scaled bundled image; a placeholder if it cannot be read."""
        if token is not None and token.is_cancelled:
            return None

        async with self._default_lock:
            if self._default is None:
                self._default = await asyncio.to_thread(self._decode_default)

        if token is not None and token.is_cancelled:
            return None
        return self._default

    def _decode_default(self) -> ImageHandle:
        try:
            data = self.default_image.read_bytes()
            image = decode_and_scale(data, self.max_width, self.max_height)
        except _DECODE_ERRORS as exc:
            logger.error("Failed to load default image %s: %s", self.default_image, exc)
            return ImageHandle(source=ImageSource.PLACEHOLDER)

        return ImageHandle(
            source=ImageSource.DEFAULT,
            image=image,
            width=image.width,
            height=image.height,
        )
