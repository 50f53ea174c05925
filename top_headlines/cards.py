"""Per-article card: display text plus its own image request lifetime."""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from typing import Callable, Optional

from .images import CancellationToken, ImageResolver
from .models import Article, ImageHandle, ImageSource

logger = logging.getLogger(__name__)

TRUNCATE_AT = 100

UrlLauncher = Callable[[str], object]


def truncate_text(value: Optional[str], limit: int = TRUNCATE_AT) -> str:
    """Limit text length to ``limit`` characters, marking the cut with '...'."""
    if not value:
        return ""
    if len(value) <= limit:
        return value
    return value[:limit] + "..."


def format_meta(article: Article) -> str:
    date_str = article.published_raw.split("T")[0] if article.published_raw else ""
    publisher = article.source_name or "Unknown"
    return f"{date_str} • {publisher}"


class ArticleCard:
    """Rendered unit for one article.

    The card starts out with the default image and swaps in the remote
    thumbnail once it resolves. ``destroy`` cancels any request still in
    flight; results arriving afterwards are discarded.
    """

    def __init__(
        self,
        article: Article,
        resolver: Optional[ImageResolver] = None,
        on_activate: Optional[UrlLauncher] = None,
    ) -> None:
        self.article = article
        self.title = truncate_text(article.title or "No Title")
        self.meta = format_meta(article)
        self.description = truncate_text(article.description) or "No description"
        self.image: Optional[ImageHandle] = None
        self._resolver = resolver
        self._on_activate = on_activate
        self._token = CancellationToken()
        self._task: Optional[asyncio.Task] = None

    @property
    def url(self) -> str:
        return self.article.url

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    @property
    def destroyed(self) -> bool:
        return self._token.is_cancelled

    def _apply(self, handle: Optional[ImageHandle]) -> None:
        if handle is None or self._token.is_cancelled:
            return
        if handle.source is ImageSource.PLACEHOLDER and self.image is not None:
            return
        self.image = handle

    async def load_image(self) -> Optional[ImageHandle]:
        """Show the default image, then try the article's own thumbnail."""
        if self._resolver is None:
            return None

        self._apply(await self._resolver.load_default(self._token))
        if self.article.image_url:
            self._apply(await self._resolver.resolve(self.article, self._token))
        return self.image

    def start_loading(self) -> asyncio.Task:
        """Schedule ``load_image`` on the running loop and keep its task."""
        self._task = asyncio.ensure_future(self.load_image())
        return self._task

    def activate(self) -> None:
        """Open the article in the browser."""
        if self._token.is_cancelled or not self.url:
            return
        launcher = self._on_activate or webbrowser.open
        logger.info("Opening %s", self.url)
        launcher(self.url)

    def destroy(self) -> None:
        self._token.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
