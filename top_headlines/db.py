"""Database layer for the persisted key-value settings."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Column, DateTime, String, Text, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class SettingModel(Base):
    """One settings key holding a JSON-encoded list of strings."""

    __tablename__ = "settings"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))


def init_engine(connection_string: Optional[str]) -> Optional[Engine]:
    """Initialize the database engine."""
    if not connection_string:
        return None

    logger.info("Initializing settings database: %s", connection_string)
    engine = create_engine(connection_string)
    Base.metadata.create_all(engine)
    return engine


def get_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory for the given engine."""
    return sessionmaker(bind=engine)


def get_setting(session: Session, key: str) -> Optional[List[str]]:
    """Return the stored list for ``key``, or None if it was never written."""
    stmt = select(SettingModel).where(SettingModel.key == key)
    result = session.execute(stmt).scalar_one_or_none()
    if result is None:
        return None

    try:
        value = json.loads(result.value)
    except json.JSONDecodeError:
        logger.warning("Discarding unreadable value for setting '%s'", key)
        return []
    if not isinstance(value, list):
        logger.warning("Setting '%s' is not a list; ignoring it", key)
        return []
    return [str(item) for item in value]


def put_setting(session: Session, key: str, values: List[str]) -> None:
    """Insert or update the list stored under ``key``."""
    stmt = select(SettingModel).where(SettingModel.key == key)
    existing = session.execute(stmt).scalar_one_or_none()
    encoded = json.dumps(list(values))

    if existing:
        existing.value = encoded
        existing.updated_at = datetime.now(timezone.utc)
    else:
        session.add(
            SettingModel(
                key=key, value=encoded, updated_at=datetime.now(timezone.utc)
            )
        )

    try:
        session.commit()
    except Exception:
        session.rollback()
        raise
