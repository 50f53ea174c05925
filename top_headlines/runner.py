"""High-level orchestration for one top_headlines panel session."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import httpx

from . import db
from .feeds import DEFAULT_NEWS_URL, DEFAULT_USER_AGENT, HeadlineFetcher
from .images import MAX_HEIGHT, MAX_WIDTH, ImageResolver
from .models import FeedStatus
from .panel import NewsPanel
from .renderers import (
    render_feed_html,
    render_feed_json,
    render_feed_text,
    render_settings_text,
)
from .settings import (
    CategorySettings,
    DatabaseSettingsStore,
    MemorySettingsStore,
    SettingsStore,
)

logger = logging.getLogger(__name__)

RENDERERS = {
    "text": render_feed_text,
    "html": render_feed_html,
    "json": render_feed_json,
}


@dataclass
class RunConfig:
    """Runtime options for one session."""

    news_url: str = DEFAULT_NEWS_URL
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: Optional[float] = None
    initial_categories: List[str] = field(default_factory=list)
    categories: Optional[List[str]] = None
    toggles: List[str] = field(default_factory=list)
    output_format: str = "text"
    show_settings: bool = False
    load_images: bool = True
    max_width: int = MAX_WIDTH
    max_height: int = MAX_HEIGHT
    default_image: Optional[str] = None
    thumbnails_dir: Optional[str] = None
    open_index: Optional[int] = None
    database_enabled: bool = False
    database_connection_string: Optional[str] = None


@dataclass
class RunResult:
    """Returned data after executing a session."""

    output_text: str
    status: Optional[FeedStatus]
    article_count: int


def _build_store(config: RunConfig) -> SettingsStore:
    if config.database_enabled:
        if not config.database_connection_string:
            logger.warning(
                "Database enabled but no connection string provided. "
                "Settings will not be persisted."
            )
        else:
            engine = db.init_engine(config.database_connection_string)
            if engine:
                return DatabaseSettingsStore(db.get_session_factory(engine))
    return MemorySettingsStore()


def _save_thumbnails(panel: NewsPanel, directory: str) -> int:
    location = Path(directory)
    location.mkdir(parents=True, exist_ok=True)
    saved = 0
    for index, card in enumerate(panel.cards, start=1):
        if card.image is None or card.image.image is None:
            continue
        target = location / f"{index:03d}-{card.image.source.value}.png"
        card.image.image.save(target, format="PNG")
        saved += 1
    logger.info("Saved %d thumbnails to %s", saved, location)
    return saved


async def run_session(config: RunConfig, client: httpx.AsyncClient) -> RunResult:
    """Drive a panel through open/refresh and render the visible view."""
    settings = CategorySettings(_build_store(config))
    if config.initial_categories:
        settings.seed(config.initial_categories)

    for category_id in config.toggles:
        selection = settings.toggle(category_id)
        logger.info("Toggled '%s'; selection is now %s", category_id, sorted(selection))

    fetcher = HeadlineFetcher(client, config.news_url, config.user_agent)
    resolver = ImageResolver(
        client,
        default_image=config.default_image,
        max_width=config.max_width,
        max_height=config.max_height,
    )
    panel = NewsPanel(
        settings, fetcher, resolver=resolver, load_images=config.load_images
    )

    try:
        if config.show_settings:
            await panel.toggle_settings()
            return RunResult(
                output_text=render_settings_text(panel), status=None, article_count=0
            )

        if config.categories is not None:
            await panel.aggregator.refresh(config.categories)
        else:
            await panel.open()
        await panel.wait_for_images()

        if config.thumbnails_dir:
            _save_thumbnails(panel, config.thumbnails_dir)

        output_text = RENDERERS[config.output_format](panel)

        if config.open_index is not None:
            if not 1 <= config.open_index <= len(panel.cards):
                raise RuntimeError(
                    f"No article #{config.open_index}; "
                    f"{len(panel.cards)} articles are shown."
                )
            panel.activate(config.open_index - 1)

        return RunResult(
            output_text=output_text,
            status=panel.status.status if panel.status else None,
            article_count=len(panel.cards),
        )
    finally:
        panel.destroy()


async def _execute(config: RunConfig) -> RunResult:
    async with httpx.AsyncClient(
        timeout=config.request_timeout, follow_redirects=True
    ) as client:
        return await run_session(config, client)


def execute(config: RunConfig) -> RunResult:
    """Run one session and return the rendered output."""
    if config.output_format not in RENDERERS:
        raise ValueError(f"Unsupported output format: {config.output_format}")
    return asyncio.run(_execute(config))
