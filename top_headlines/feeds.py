"""Headline fetching and parsing helpers."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, List, Optional

import httpx
from bs4 import BeautifulSoup

from .models import Article, Category

logger = logging.getLogger(__name__)

DEFAULT_NEWS_URL = "https://saurav.tech/NewsAPI/top-headlines/category/{category}/us.json"
DEFAULT_USER_AGENT = "top-headlines/1.0"


def parse_published(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into an aware datetime, or None."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Unparseable publishedAt value: %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _strip_html(raw_value: str) -> str:
    """Return text content extracted from HTML fragments."""
    soup = BeautifulSoup(raw_value, "html.parser")
    text = soup.get_text(separator=" ", strip=True)
    text = re.sub(r"\s+([.,;:!?])", r"\1", text)
    text = re.sub(r"\s{2,}", " ", text)
    return text.strip()


def _clean_str(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def parse_article(item: Any, category: Optional[str] = None) -> Optional[Article]:
    """Build an Article from one entry of the ``articles`` array."""
    if not isinstance(item, dict):
        return None

    description = _clean_str(item.get("description"))
    if description and "<" in description:
        description = _strip_html(description) or None

    source = item.get("source")
    source_name = _clean_str(source.get("name")) if isinstance(source, dict) else None
    published_raw = _clean_str(item.get("publishedAt"))

    return Article(
        title=_clean_str(item.get("title")) or "",
        url=_clean_str(item.get("url")) or "",
        description=description,
        image_url=_clean_str(item.get("urlToImage")),
        published_at=parse_published(published_raw),
        published_raw=published_raw,
        source_name=source_name,
        category=category,
    )


def parse_articles(payload: Any, category: Optional[str] = None) -> List[Article]:
    """Extract the article list from a decoded response body."""
    if not isinstance(payload, dict):
        raise ValueError("response body is not a JSON object")

    items = payload.get("articles") or []
    if not isinstance(items, list):
        raise ValueError("'articles' is not a list")

    articles: List[Article] = []
    for item in items:
        article = parse_article(item, category)
        if article is None:
            logger.debug("Skipping malformed article entry in category '%s'", category)
            continue
        articles.append(article)
    return articles


class HeadlineFetcher:
    """Fetch the headline list for one category at a time.

    ``fetch`` never raises: transport errors, non-200 responses and malformed
    bodies all resolve to an empty list so a single bad category cannot abort
    an aggregation wave.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        url_template: str = DEFAULT_NEWS_URL,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        if "{category}" not in url_template:
            raise ValueError("News URL template must contain '{category}'.")
        self._client = client
        self.url_template = url_template
        self.user_agent = user_agent

    def url_for(self, category: Category) -> str:
        return self.url_template.format(category=category.id)

    async def fetch(self, category: Category) -> List[Article]:
        url = self.url_for(category)
        logger.info("Fetching headlines for category '%s' (%s)", category.id, url)
        try:
            response = await self._client.get(
                url, headers={"User-Agent": self.user_agent}
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "Failed to fetch category '%s' (%s): %s", category.id, url, exc
            )
            return []

        if response.status_code != 200:
            logger.warning(
                "HTTP %d for category '%s' url: %s",
                response.status_code,
                category.id,
                url,
            )
            return []

        try:
            articles = parse_articles(response.json(), category.id)
        except ValueError as exc:
            logger.warning(
                "Invalid JSON for category '%s' (%s): %s", category.id, url, exc
            )
            return []

        logger.info(
            "Collected %d articles from category '%s'", len(articles), category.id
        )
        return articles
