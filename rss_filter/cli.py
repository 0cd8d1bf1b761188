"""Command-line interface for the rss_filter application."""

from __future__ import annotations

import argparse
import functools
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .aggregator import generate_feed
from .config import ConfigError, load_app_settings, load_category
from .feeds import fetch_feed
from .rss import RenderError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Print the filtered RSS feed for a configured category."
    )
    parser.add_argument("category", help="Category name from the configuration.")
    parser.add_argument(
        "--config-file",
        default=None,
        help="Read the configuration from a local JSON file instead of S3.",
    )
    parser.add_argument("--bucket", default=None, help="S3 bucket holding the config.")
    parser.add_argument("--key", default=None, help="S3 key of the config object.")
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Number of feeds fetched in parallel. Overrides environment.",
    )

    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides environment.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides environment.",
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

    # StreamHandler writes to stderr; stdout carries only the document.
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


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_app_settings()
        settings = replace(
            settings,
            config_file=args.config_file or settings.config_file,
            bucket=args.bucket or settings.bucket,
            key=args.key or settings.key,
            log_level=args.log_level or settings.log_level,
            log_file=args.log_file or settings.log_file,
        )
        if args.concurrency is not None:
            if args.concurrency <= 0:
                raise ValueError("--concurrency must be positive.")
            settings = replace(settings, concurrency=args.concurrency)

        configure_logging(settings.log_level, settings.log_file)

        rule, global_settings = load_category(settings, args.category)
        document = generate_feed(
            rule,
            global_settings,
            fetcher=functools.partial(fetch_feed, timeout=settings.fetch_timeout),
            concurrency=settings.concurrency,
        )
    except ValueError as exc:
        parser.error(str(exc))
    except (ConfigError, RenderError) as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error while generating the feed.")
        return 1

    print(document)
    return 0
