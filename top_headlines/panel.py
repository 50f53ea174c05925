"""Toolkit-free model of the headlines popup.

The panel owns the visible state a widget toolkit would draw: which tab is
shown, the status row, the current cards and the category checkboxes. It
consumes :class:`HeadlinesAggregator` results with replace-all semantics.
"""

from __future__ import annotations

import asyncio
import enum
import gettext
import logging
from dataclasses import dataclass
from typing import List, Optional

from . import categories
from .aggregator import Fetcher, HeadlinesAggregator
from .cards import ArticleCard, UrlLauncher
from .images import ImageResolver
from .models import FeedResult, FeedStatus
from .settings import CategorySettings

logger = logging.getLogger(__name__)

_ = gettext.translation("top_headlines", fallback=True).gettext

STATUS_MESSAGES = {
    FeedStatus.LOADING: "Loading...",
    FeedStatus.NO_CATEGORIES: "No categories selected. Please check settings.",
    FeedStatus.NO_NEWS: "No news found from selected categories",
}


class View(enum.Enum):
    NEWS = "news"
    SETTINGS = "settings"


@dataclass(frozen=True)
class CategoryRow:
    id: str
    label: str
    checked: bool


class NewsPanel:
    """Presentation state for one panel session."""

    def __init__(
        self,
        settings: CategorySettings,
        fetcher: Fetcher,
        resolver: Optional[ImageResolver] = None,
        launcher: Optional[UrlLauncher] = None,
        load_images: bool = True,
    ) -> None:
        self.settings = settings
        self.resolver = resolver
        self.launcher = launcher
        self.load_images = load_images
        self.view = View.NEWS
        self.is_open = False
        self.status: Optional[FeedResult] = None
        self.cards: List[ArticleCard] = []
        self.aggregator = HeadlinesAggregator(
            fetcher, selection_provider=settings.selected, sink=self.show_feed
        )

    @property
    def title(self) -> str:
        return _("Settings") if self.view is View.SETTINGS else _("Top Headlines")

    @property
    def settings_heading(self) -> str:
        return _("Select Categories")

    @property
    def status_message(self) -> Optional[str]:
        if self.status is None:
            return None
        if self.status.status is FeedStatus.ERROR:
            return self.status.error
        message = STATUS_MESSAGES.get(self.status.status)
        return _(message) if message else None

    def category_rows(self) -> List[CategoryRow]:
        current = self.settings.selected()
        return [
            CategoryRow(
                id=category.id,
                label=_(category.display_name),
                checked=categories.checkbox_state(category.id, current),
            )
            for category in categories.CATEGORIES
        ]

    def show_feed(self, result: FeedResult) -> None:
        """Replace everything currently displayed with ``result``."""
        self.clear_cards()
        self.status = result
        if result.status is not FeedStatus.READY:
            logger.debug("Showing status row: %s", result.status.value)
            return

        logger.debug("Showing %d article cards", len(result.articles))
        for article in result.articles:
            card = ArticleCard(article, self.resolver, self.launcher)
            self.cards.append(card)
            if self.load_images and self.resolver is not None:
                card.start_loading()

    def clear_cards(self) -> None:
        for card in self.cards:
            card.destroy()
        self.cards = []

    async def refresh(self) -> Optional[FeedResult]:
        return await self.aggregator.refresh()

    async def open(self) -> None:
        """Open the popup, fetching only if nothing has been shown yet."""
        self.is_open = True
        if self.view is View.NEWS and self.status is None:
            await self.refresh()

    def close(self) -> None:
        self.is_open = False

    async def toggle_settings(self) -> None:
        if self.view is View.SETTINGS:
            self.view = View.NEWS
            await self.refresh()
        else:
            self.view = View.SETTINGS

    async def wait_for_images(self) -> None:
        """Wait until every live card has settled on an image."""
        tasks = [card.task for card in self.cards if card.task is not None]
        if tasks:
            await asyncio.gather(*tasks)

    def toggle_category(self, category_id: str) -> List[CategoryRow]:
        self.settings.toggle(category_id)
        return self.category_rows()

    def activate(self, index: int) -> None:
        """Click the card at ``index``: close the popup and open its URL."""
        card = self.cards[index]
        self.close()
        card.activate()

    def destroy(self) -> None:
        self.clear_cards()
        self.is_open = False
