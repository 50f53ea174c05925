"""Command-line interface for the top_headlines panel."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import pprint
from pathlib import Path
from typing import List, Optional

from .config import AppConfig, parse_app_config
from .runner import RENDERERS, RunConfig, execute

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Show top headlines for the selected news categories."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the configuration XML file. Built-in defaults if omitted.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides config.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides config.",
    )
    parser.add_argument(
        "--category",
        dest="categories",
        action="append",
        metavar="ID",
        help="Fetch this category for this run only (repeatable).",
    )
    parser.add_argument(
        "--toggle",
        action="append",
        default=[],
        metavar="ID",
        help="Toggle a category in the stored selection (repeatable, applied in order).",
    )
    parser.add_argument(
        "--settings",
        action="store_true",
        help="Show the category settings instead of the headlines.",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=sorted(RENDERERS),
        default="text",
        help="Output format for the headlines.",
    )
    parser.add_argument(
        "--no-images",
        action="store_true",
        help="Skip thumbnail downloads.",
    )
    parser.add_argument(
        "--thumbnails",
        metavar="DIR",
        help="Write the resolved thumbnails to DIR as PNG files.",
    )
    parser.add_argument(
        "--open",
        dest="open_index",
        type=int,
        metavar="N",
        help="Open the N-th headline in the default browser.",
    )
    return parser


def configure_logging(level_name: str, log_file: Optional[str] = None) -> None:
    """Initialise logging according to options."""
    log_level = getattr(logging, level_name.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file)
        if log_path.parent and not log_path.parent.exists():
            log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        logger.debug(
            "Logger initialised with level %s and file output to %s",
            level_name.upper(),
            log_path,
        )
    else:
        logger.debug(
            "Logger initialised with console output at level %s", level_name.upper()
        )


def build_run_config(app_config: AppConfig, args: argparse.Namespace) -> RunConfig:
    return RunConfig(
        news_url=app_config.news_url,
        user_agent=app_config.user_agent,
        request_timeout=app_config.request_timeout,
        initial_categories=app_config.categories,
        categories=args.categories,
        toggles=args.toggle,
        output_format=args.output_format,
        show_settings=args.settings,
        load_images=app_config.images.enabled and not args.no_images,
        max_width=app_config.images.max_width,
        max_height=app_config.images.max_height,
        default_image=app_config.images.default_image,
        thumbnails_dir=args.thumbnails,
        open_index=args.open_index,
        database_enabled=app_config.database.enabled,
        database_connection_string=app_config.database.connection_string,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = parse_app_config(args.config) if args.config else AppConfig()

        # CLI overrides config
        log_level = args.log_level or app_config.logging.level
        log_file = args.log_file or app_config.logging.file
        configure_logging(log_level, log_file)

        config = build_run_config(app_config, args)

        config_dict = dataclasses.asdict(config)
        if config_dict.get("database_connection_string"):
            config_dict["database_connection_string"] = "***MASKED***"
        logger.info("Active Configuration:\n%s", pprint.pformat(config_dict))

        result = execute(config)
    except ValueError as exc:
        parser.error(str(exc))
    except (RuntimeError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error during execution.")
        return 1

    print(result.output_text)
    return 0
