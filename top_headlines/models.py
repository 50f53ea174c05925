"""Shared data models for top_headlines."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Category:
    """A news topic with a stable identifier."""

    id: str
    display_name: str


@dataclass(frozen=True)
class Article:
    """A single headline as delivered by the news endpoint."""

    title: str
    url: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    published_at: Optional[datetime] = None
    published_raw: Optional[str] = None
    source_name: Optional[str] = None
    category: Optional[str] = None

    @property
    def sort_key(self) -> datetime:
        return self.published_at or EPOCH


class FeedStatus(enum.Enum):
    LOADING = "loading"
    READY = "ready"
    NO_NEWS = "no-news"
    NO_CATEGORIES = "no-categories"
    ERROR = "error"


@dataclass(frozen=True)
class FeedResult:
    """Outcome of one refresh cycle, delivered to the presentation layer."""

    status: FeedStatus
    articles: Tuple[Article, ...] = ()
    categories: Tuple[str, ...] = ()
    error: Optional[str] = None


class ImageSource(enum.Enum):
    REMOTE = "remote"
    DEFAULT = "default"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class ImageHandle:
    """Decoded and scaled thumbnail owned by a single card."""

    source: ImageSource
    image: Any = field(default=None, compare=False, repr=False)
    width: int = 0
    height: int = 0
    url: Optional[str] = None

    @property
    def has_alpha(self) -> bool:
        return self.image is not None and self.image.mode == "RGBA"
