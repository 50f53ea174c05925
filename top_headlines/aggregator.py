"""Concurrent aggregation of per-category headlines into one feed."""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Callable, Iterable, List, Optional, Protocol, Sequence

from . import categories
from .models import Article, Category, FeedResult, FeedStatus

logger = logging.getLogger(__name__)

FeedSink = Callable[[FeedResult], None]
SelectionProvider = Callable[[], Iterable[str]]


class Fetcher(Protocol):
    async def fetch(self, category: Category) -> List[Article]: ...


class FetchState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"


def sort_articles(articles: Iterable[Article]) -> List[Article]:
    """Newest first; articles without a timestamp sort as the epoch."""
    return sorted(articles, key=lambda article: article.sort_key, reverse=True)


def deduplicate(articles: Iterable[Article]) -> List[Article]:
    """Drop repeated article URLs, keeping the first occurrence."""
    unique: List[Article] = []
    seen_links = set()
    for article in articles:
        if article.url:
            if article.url in seen_links:
                continue
            seen_links.add(article.url)
        unique.append(article)
    return unique


class HeadlinesAggregator:
    """Turn a category selection into an ordered feed.

    Only one refresh runs at a time; calls made while a wave is in flight are
    dropped and return None. Each result is pushed to ``sink`` as a whole, so
    consumers only ever see the loading placeholder or a complete feed.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        selection_provider: Optional[SelectionProvider] = None,
        sink: Optional[FeedSink] = None,
    ) -> None:
        self._fetcher = fetcher
        self._selection_provider = selection_provider
        self._sink = sink
        self.state = FetchState.IDLE

    @property
    def is_fetching(self) -> bool:
        return self.state is FetchState.FETCHING

    def _emit(self, result: FeedResult) -> Optional[Exception]:
        """Hand ``result`` to the sink; a failing sink is logged, not raised."""
        if self._sink is None:
            return None
        try:
            self._sink(result)
        except Exception as exc:  # noqa: BLE001 - consumer errors stay local
            logger.exception("Feed consumer failed on %s result", result.status.value)
            return exc
        return None

    def _current_selection(self, selection: Optional[Iterable[str]]) -> Sequence[str]:
        if selection is None:
            selection = self._selection_provider() if self._selection_provider else ()
        return sorted(categories.normalize(selection))

    async def refresh(
        self, selection: Optional[Iterable[str]] = None
    ) -> Optional[FeedResult]:
        if self.state is FetchState.FETCHING:
            logger.debug("Refresh already in progress; ignoring request")
            return None

        self.state = FetchState.FETCHING
        try:
            self._emit(FeedResult(status=FeedStatus.LOADING))
            result = await self._collect(selection)
        except Exception as exc:  # noqa: BLE001 - rendered as an error row
            logger.exception("Error fetching news")
            result = FeedResult(status=FeedStatus.ERROR, error=f"Error: {exc}")
        finally:
            self.state = FetchState.IDLE

        failure = self._emit(result)
        if failure is not None and result.status is not FeedStatus.ERROR:
            result = FeedResult(status=FeedStatus.ERROR, error=f"Error: {failure}")
            self._emit(result)
        return result

    async def _collect(self, selection: Optional[Iterable[str]]) -> FeedResult:
        selected_ids = self._current_selection(selection)
        logger.debug("Selected category ids: %s", ", ".join(selected_ids))

        to_fetch = categories.resolve(selected_ids)
        if not to_fetch:
            logger.info("No known categories selected")
            return FeedResult(status=FeedStatus.NO_CATEGORIES)

        logger.info(
            "Fetching categories: %s", ", ".join(category.id for category in to_fetch)
        )
        results = await asyncio.gather(
            *(self._fetcher.fetch(category) for category in to_fetch)
        )

        merged = [article for per_category in results for article in per_category]
        ordered = deduplicate(sort_articles(merged))
        logger.info(
            "Merged %d articles (%d unique) from %d categories",
            len(merged),
            len(ordered),
            len(to_fetch),
        )

        fetched = tuple(category.id for category in to_fetch)
        if not ordered:
            return FeedResult(status=FeedStatus.NO_NEWS, categories=fetched)
        return FeedResult(
            status=FeedStatus.READY, articles=tuple(ordered), categories=fetched
        )
