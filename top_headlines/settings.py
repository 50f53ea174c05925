"""Settings stores and the category selection accessor."""

from __future__ import annotations

import logging
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Protocol

from sqlalchemy.orm import Session

from . import categories, db

logger = logging.getLogger(__name__)

CATEGORIES_KEY = "categories"


class SettingsStore(Protocol):
    def get_strv(self, key: str) -> Optional[List[str]]: ...

    def set_strv(self, key: str, values: Iterable[str]) -> None: ...


class MemorySettingsStore:
    """Settings kept for the lifetime of the process only."""

    def __init__(self, initial: Optional[Dict[str, Iterable[str]]] = None) -> None:
        self._values: Dict[str, List[str]] = {
            key: list(values) for key, values in (initial or {}).items()
        }

    def get_strv(self, key: str) -> Optional[List[str]]:
        values = self._values.get(key)
        return list(values) if values is not None else None

    def set_strv(self, key: str, values: Iterable[str]) -> None:
        self._values[key] = list(values)


class DatabaseSettingsStore:
    """Settings persisted through SQLAlchemy."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get_strv(self, key: str) -> Optional[List[str]]:
        with self._session_factory() as session:
            return db.get_setting(session, key)

    def set_strv(self, key: str, values: Iterable[str]) -> None:
        with self._session_factory() as session:
            db.put_setting(session, key, list(values))


class CategorySettings:
    """Read and update the persisted category selection."""

    def __init__(self, store: SettingsStore, key: str = CATEGORIES_KEY) -> None:
        self._store = store
        self.key = key

    def stored(self) -> List[str]:
        return self._store.get_strv(self.key) or []

    def selected(self) -> FrozenSet[str]:
        return categories.normalize(self.stored())

    def save(self, selection: Iterable[str]) -> None:
        values = categories.ordered_ids(selection)
        logger.info("Saving category selection: %s", ", ".join(values))
        self._store.set_strv(self.key, values)

    def toggle(self, category_id: str) -> FrozenSet[str]:
        updated = categories.toggle(self.selected(), category_id)
        self.save(updated)
        return updated

    def seed(self, selection: Iterable[str]) -> None:
        """Write ``selection`` only if nothing has been stored yet."""
        if self._store.get_strv(self.key) is None:
            self.save(selection)
