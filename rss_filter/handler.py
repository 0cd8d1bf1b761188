"""AWS Lambda entry point for API Gateway proxy requests."""

from __future__ import annotations

import functools
import hmac
import logging
from typing import Any, Dict, Optional

from .aggregator import generate_feed
from .cli import configure_logging
from .config import AppSettings, ConfigError, load_app_settings, load_category
from .feeds import fetch_feed
from .rss import RenderError

logger = logging.getLogger(__name__)

TOKEN_PARAM = "token"
CATEGORY_PARAM = "category"

_SETTINGS: Optional[AppSettings] = None


def _get_settings() -> AppSettings:
    global _SETTINGS
    if _SETTINGS is None:
        settings = load_app_settings()
        try:
            configure_logging(settings.log_level, settings.log_file)
        except (ValueError, OSError) as exc:
            raise ConfigError(f"Cannot configure logging: {exc}") from exc
        _SETTINGS = settings
    return _SETTINGS


def _response(
    status: int, body: str, headers: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    return {
        "statusCode": status,
        "headers": headers or {"Content-Type": "text/plain; charset=utf-8"},
        "body": body,
    }


def is_authorized(token: Optional[str], expected: Optional[str]) -> bool:
    """Compare the request token with the configured secret."""
    if not expected or token is None:
        return False
    return hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8"))


def lambda_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    try:
        settings = _get_settings()
    except ConfigError as exc:
        logger.error("Invalid runtime settings: %s", exc)
        return _response(500, "Internal server error")

    params = (event or {}).get("queryStringParameters") or {}

    if not is_authorized(params.get(TOKEN_PARAM), settings.access_token):
        logger.warning("Rejected request with missing or invalid token")
        return _response(401, "Unauthorized: invalid token")

    category = params.get(CATEGORY_PARAM)
    if not category:
        return _response(400, "Missing 'category' query parameter")

    try:
        rule, global_settings = load_category(settings, category)
    except ConfigError as exc:
        logger.error("Failed to load configuration: %s", exc)
        return _response(400, f"Failed to load configuration: {exc}")

    try:
        document = generate_feed(
            rule,
            global_settings,
            fetcher=functools.partial(fetch_feed, timeout=settings.fetch_timeout),
            concurrency=settings.concurrency,
        )
    except RenderError as exc:
        logger.error("%s", exc)
        return _response(500, f"RSS generation error: {exc}")
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error while generating category '%s'", category)
        return _response(500, "RSS generation error")

    return _response(200, document, {"Content-Type": "application/rss+xml"})
