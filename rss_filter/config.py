"""Configuration loading for category filters and runtime settings."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .models import CategoryRule, FilterConfig, GlobalSettings

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = "rss-feed-filtering"
DEFAULT_KEY = "config.json"


class ConfigError(RuntimeError):
    """Raised when the filter configuration cannot be loaded or decoded."""


class CategoryNotFoundError(ConfigError):
    """Raised when the requested category is not configured."""

    def __init__(self, category: str):
        super().__init__(f"Category '{category}' not found")
        self.category = category


@dataclass
class AppSettings:
    bucket: str = DEFAULT_BUCKET
    key: str = DEFAULT_KEY
    config_file: Optional[str] = None
    access_token: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None
    concurrency: int = 1
    fetch_timeout: float = 10.0


def _number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def load_app_settings(env: Optional[Mapping[str, str]] = None) -> AppSettings:
    """Read runtime settings from environment variables."""
    if env is None:
        env = os.environ

    log_level = env.get("RSS_FILTER_LOG_LEVEL") or "INFO"
    if not isinstance(getattr(logging, log_level.upper(), None), int):
        raise ConfigError(f"Unsupported log level: {log_level}")

    return AppSettings(
        bucket=env.get("RSS_FILTER_BUCKET") or DEFAULT_BUCKET,
        key=env.get("RSS_FILTER_KEY") or DEFAULT_KEY,
        config_file=env.get("RSS_FILTER_CONFIG_FILE") or None,
        access_token=env.get("RSS_FILTER_ACCESS_TOKEN") or None,
        log_level=log_level,
        log_file=env.get("RSS_FILTER_LOG_FILE") or None,
        concurrency=_number(env, "RSS_FILTER_CONCURRENCY", 1, int),
        fetch_timeout=_number(env, "RSS_FILTER_FETCH_TIMEOUT", 10.0, float),
    )


def _string_list(entry: Mapping[str, Any], name: str, where: str) -> Tuple[str, ...]:
    value = entry.get(name)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{where}: '{name}' must be a list of strings")
    return tuple(value)


def _string(entry: Mapping[str, Any], name: str, where: str) -> str:
    value = entry.get(name, "")
    if not isinstance(value, str):
        raise ConfigError(f"{where}: '{name}' must be a string")
    return value


def parse_filter_config(payload: Any) -> FilterConfig:
    """Decode the JSON configuration document."""
    if not isinstance(payload, dict):
        raise ConfigError("Configuration document must be a JSON object")

    settings = GlobalSettings(
        global_exclude_keywords=_string_list(
            payload, "global_exclude_keywords", "config"
        ),
        delayed_domains=_string_list(payload, "delayed_domains", "config"),
    )

    configs = payload.get("configs")
    if configs is None:
        configs = []
    if not isinstance(configs, list):
        raise ConfigError("config: 'configs' must be a list")

    categories = []
    for index, entry in enumerate(configs):
        where = f"configs[{index}]"
        if not isinstance(entry, dict):
            raise ConfigError(f"{where} must be an object")
        categories.append(
            CategoryRule(
                category=_string(entry, "category", where),
                description=_string(entry, "description", where),
                include_keywords=_string_list(entry, "include_keywords", where),
                exclude_keywords=_string_list(entry, "exclude_keywords", where),
                urls=_string_list(entry, "urls", where),
            )
        )

    logger.debug("Decoded %d category definitions", len(categories))
    return FilterConfig(settings=settings, categories=tuple(categories))


def _decode(raw: bytes, source: str) -> FilterConfig:
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Configuration {source} is not valid JSON: {exc}") from exc
    return parse_filter_config(payload)


def load_config_file(path: str) -> FilterConfig:
    location = Path(path)
    logger.info("Loading filter configuration from %s", location)
    try:
        raw = location.read_bytes()
    except OSError as exc:
        raise ConfigError(f"Failed to read configuration {location}: {exc}") from exc
    return _decode(raw, str(location))


def load_config_document(bucket: str, key: str) -> FilterConfig:
    """Fetch and decode the configuration object stored in S3."""
    source = f"s3://{bucket}/{key}"
    logger.info("Loading filter configuration from %s", source)
    try:
        client = boto3.client("s3")
        response = client.get_object(Bucket=bucket, Key=key)
        raw = response["Body"].read()
    except (BotoCoreError, ClientError) as exc:
        raise ConfigError(f"Failed to fetch configuration {source}: {exc}") from exc
    return _decode(raw, source)


def effective_rule(rule: CategoryRule, settings: GlobalSettings) -> CategoryRule:
    """Return a copy of the rule with the global exclude keywords appended."""
    return replace(
        rule,
        exclude_keywords=rule.exclude_keywords + settings.global_exclude_keywords,
    )


def find_category(config: FilterConfig, name: str) -> CategoryRule:
    for rule in config.categories:
        if rule.category == name:
            return effective_rule(rule, config.settings)
    raise CategoryNotFoundError(name)


def load_category(
    app_settings: AppSettings, name: str
) -> Tuple[CategoryRule, GlobalSettings]:
    """Load the configuration document and resolve one category."""
    if app_settings.config_file:
        config = load_config_file(app_settings.config_file)
    else:
        config = load_config_document(app_settings.bucket, app_settings.key)

    rule = find_category(config, name)
    logger.info(
        "Resolved category '%s' with %d feed URLs", rule.category, len(rule.urls)
    )
    return rule, config.settings
