"""Configuration loading for top_headlines."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
from xml.etree import ElementTree as ET

from .feeds import DEFAULT_NEWS_URL, DEFAULT_USER_AGENT
from .images import MAX_HEIGHT, MAX_WIDTH

logger = logging.getLogger(__name__)


@dataclass
class ImageConfig:
    enabled: bool = True
    max_width: int = MAX_WIDTH
    max_height: int = MAX_HEIGHT
    default_image: Optional[str] = None


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class DatabaseConfig:
    enabled: bool = False
    connection_string: Optional[str] = None


@dataclass
class AppConfig:
    news_url: str = DEFAULT_NEWS_URL
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: Optional[float] = None
    categories: List[str] = field(default_factory=list)
    images: ImageConfig = field(default_factory=ImageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def _resolve_path(base_path: Path, target_path: str) -> str:
    """Resolve a path relative to the base config file if it's not absolute."""
    target = Path(target_path)
    if target.is_absolute():
        return str(target)
    return str((base_path.parent / target).resolve())


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() == "true"


def _parse_number(node: ET.Element, tag: str, cast, default):
    text = node.findtext(tag)
    if text is None or not text.strip():
        return default
    try:
        return cast(text.strip())
    except ValueError:
        raise ValueError(f"Invalid value for <{tag}>: {text.strip()!r}")


def parse_app_config(path: str) -> AppConfig:
    """Parse the main application configuration XML."""
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    try:
        root = ET.parse(config_path).getroot()
    except ET.ParseError as exc:
        raise ValueError(f"Config file is not valid XML: {exc}")

    config = AppConfig()

    news_url = root.findtext("news-url")
    if news_url and news_url.strip():
        config.news_url = news_url.strip()
    if "{category}" not in config.news_url:
        raise ValueError("<news-url> must contain the '{category}' placeholder.")

    user_agent = root.findtext("user-agent")
    if user_agent and user_agent.strip():
        config.user_agent = user_agent.strip()

    config.request_timeout = _parse_number(root, "request-timeout", float, None)
    if config.request_timeout is not None and config.request_timeout <= 0:
        raise ValueError("<request-timeout> must be positive.")

    # Initial category selection
    cats_node = root.find("categories")
    if cats_node is not None:
        config.categories = [
            node.text.strip()
            for node in cats_node.findall("category")
            if node.text and node.text.strip()
        ]

    # Images
    img_node = root.find("images")
    if img_node is not None:
        images = config.images
        images.enabled = _parse_bool(img_node.findtext("enabled"), True)
        images.max_width = _parse_number(img_node, "max-width", int, MAX_WIDTH)
        images.max_height = _parse_number(img_node, "max-height", int, MAX_HEIGHT)
        if images.max_width <= 0 or images.max_height <= 0:
            raise ValueError("Image box dimensions must be positive.")
        default_image = img_node.findtext("default-image")
        if default_image and default_image.strip():
            images.default_image = _resolve_path(config_path, default_image.strip())

    # Logging
    log_node = root.find("logging")
    if log_node is not None:
        config.logging.level = log_node.findtext("level", "INFO")
        log_file = log_node.findtext("file")
        if log_file:
            config.logging.file = _resolve_path(config_path, log_file)

    # Database
    db_node = root.find("database")
    if db_node is not None:
        config.database.enabled = _parse_bool(db_node.findtext("enabled"), False)
        config.database.connection_string = db_node.findtext("connection-string")

    logger.debug("Loaded configuration: %s", config)
    return config
