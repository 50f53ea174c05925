"""Rendering helpers for the panel's news and settings views."""

from __future__ import annotations

import json

from .panel import NewsPanel
from .templating import get_environment


def render_feed_text(panel: NewsPanel) -> str:
    """Render the news view as plain text."""
    template = get_environment().get_template("feed.txt.j2")
    return template.render(panel=panel)


def render_feed_html(panel: NewsPanel) -> str:
    """Render the news view as a standalone HTML page."""
    template = get_environment().get_template("feed.html.j2")
    return template.render(panel=panel)


def render_settings_text(panel: NewsPanel) -> str:
    """Render the category checkboxes."""
    template = get_environment().get_template("settings.txt.j2")
    return template.render(panel=panel, rows=panel.category_rows())


def render_feed_json(panel: NewsPanel) -> str:
    status = panel.status
    payload = {
        "status": status.status.value if status else None,
        "message": panel.status_message,
        "categories": list(status.categories) if status else [],
        "articles": [
            {
                "title": card.article.title,
                "description": card.article.description,
                "url": card.article.url,
                "image_url": card.article.image_url,
                "published_at": card.article.published_raw,
                "source": card.article.source_name,
                "category": card.article.category,
                "image": card.image.source.value if card.image else None,
            }
            for card in panel.cards
        ],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)
