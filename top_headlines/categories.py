"""Category catalogue and selection rules.

The selection is a flat set of category ids with one meta value, ``general``,
standing for "all categories". The helpers here are pure; persistence lives in
:mod:`top_headlines.settings`.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, List, Optional, Sequence

from .models import Category

logger = logging.getLogger(__name__)

GENERAL = "general"

CATEGORIES: Sequence[Category] = (
    Category(GENERAL, "All Categories"),
    Category("technology", "Technology"),
    Category("business", "Business"),
    Category("entertainment", "Entertainment"),
    Category("health", "Health"),
    Category("science", "Science"),
    Category("sports", "Sports"),
)

CONCRETE_IDS: FrozenSet[str] = frozenset(c.id for c in CATEGORIES if c.id != GENERAL)
DEFAULT_SELECTION: FrozenSet[str] = frozenset({GENERAL})


def normalize(stored: Optional[Iterable[str]]) -> FrozenSet[str]:
    """Return the stored selection, or the ``general`` default when empty."""
    selection = frozenset(stored or ())
    if not selection:
        return DEFAULT_SELECTION
    return selection


def is_all_selected(current: Iterable[str]) -> bool:
    """True when every concrete category is part of ``current``."""
    return CONCRETE_IDS.issubset(frozenset(current))


def toggle(current: Iterable[str], clicked: str) -> FrozenSet[str]:
    """Apply a click on ``clicked`` to the selection and return the new one."""
    current = frozenset(current)

    if clicked == GENERAL:
        if is_all_selected(current):
            return DEFAULT_SELECTION
        return CONCRETE_IDS

    working = set() if current == DEFAULT_SELECTION else set(current)
    if clicked in working:
        working.discard(clicked)
    else:
        working.add(clicked)
    working.discard(GENERAL)

    if not working:
        return DEFAULT_SELECTION
    return frozenset(working)


def checkbox_state(category_id: str, current: Iterable[str]) -> bool:
    """Whether the settings checkbox for ``category_id`` renders as checked."""
    current = frozenset(current)
    if category_id == GENERAL:
        return is_all_selected(current)
    if not current or current == DEFAULT_SELECTION:
        return False
    return category_id in current


def resolve(selection: Iterable[str]) -> List[Category]:
    """Map selected ids onto the catalogue, dropping unknown ids."""
    selected = frozenset(selection)
    resolved = [category for category in CATEGORIES if category.id in selected]
    unknown = selected - {category.id for category in resolved}
    if unknown:
        logger.debug("Ignoring unknown category ids: %s", ", ".join(sorted(unknown)))
    return resolved


def ordered_ids(selection: Iterable[str]) -> List[str]:
    """Return ids in catalogue order followed by unknown ids sorted by name."""
    selected = frozenset(selection)
    known = [category.id for category in CATEGORIES if category.id in selected]
    unknown = sorted(selected - set(known))
    return known + unknown


def get_category(category_id: str) -> Optional[Category]:
    for category in CATEGORIES:
        if category.id == category_id:
            return category
    return None
