"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, FeedConfig, PushConfig) are defined in src/core/config.py
to avoid information leakage between layers.
"""

import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Any

import yaml

from src.core.config import (
    Config,
    FeedConfig,
    PushConfig,
    parse_duration,
    validate_config,
)


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "config/config.yaml"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(Exception):
    """Configuration is missing or invalid; the process cannot start."""


def _resolve_value(value: Any) -> Any:
    """Resolve a ``${ENV_VAR}`` placeholder from the environment.

    Non-string values and plain strings are returned unchanged. An unset
    variable leaves the placeholder in place so validation can report it.
    """
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        env_value = os.environ.get(var_name)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_name)

    return value


def _parse_bool(value: Any) -> bool:
    """Parse a boolean from YAML or environment text."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean value: {value!r}")


def _parse_duration_field(value: Any, field_name: str) -> float:
    try:
        return parse_duration(_resolve_value(value))
    except ValueError as e:
        raise ConfigError(f"{field_name}: {e}") from e


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a nested settings block, treating a missing or empty one as {}."""
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"{name}: must be a mapping, got {type(value).__name__}")
    return value


def _parse_feed(data: dict[str, Any]) -> FeedConfig:
    """Parse feed settings from config data."""
    defaults = FeedConfig()
    return FeedConfig(
        base_url=_resolve_value(data.get("base_url", defaults.base_url)),
        updates=int(data.get("updates", defaults.updates)),
        timeout_seconds=_parse_duration_field(
            data.get("timeout", defaults.timeout_seconds), "feed.timeout",
        ),
        verify_tls=_parse_bool(data.get("verify_tls", defaults.verify_tls)),
    )


def _parse_push(data: dict[str, Any]) -> PushConfig:
    """Parse push sink settings from config data."""
    defaults = PushConfig()
    return PushConfig(
        base_url=_resolve_value(data.get("base_url", defaults.base_url)),
        timeout_seconds=_parse_duration_field(
            data.get("timeout", defaults.timeout_seconds), "push.timeout",
        ),
        verify_tls=_parse_bool(data.get("verify_tls", defaults.verify_tls)),
    )


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object

    Raises:
        ConfigError: If a value cannot be parsed
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a mapping, got {type(data).__name__}")

    defaults = Config()

    try:
        return Config(
            push_key=str(_resolve_value(data.get("push_key", defaults.push_key)) or ""),
            poll_interval_seconds=_parse_duration_field(
                data.get("poll_interval", defaults.poll_interval_seconds), "poll_interval",
            ),
            staleness_threshold_seconds=_parse_duration_field(
                data.get("staleness_threshold", defaults.staleness_threshold_seconds),
                "staleness_threshold",
            ),
            timezone=str(data.get("timezone", defaults.timezone)),
            shutdown_grace_seconds=_parse_duration_field(
                data.get("shutdown_grace", defaults.shutdown_grace_seconds), "shutdown_grace",
            ),
            feed=_parse_feed(_section(data, "feed")),
            push=_parse_push(_section(data, "push")),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        ConfigError: If the file is not valid YAML or has invalid values
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: interval %.1fs, feed %s",
        config.poll_interval_seconds,
        config.feed.base_url,
    )

    return config


def load_config_from_env(base: Config | None = None) -> Config:
    """Overlay configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        QUAKE_PUSH_KEY: Push provider credential
        POLL_INTERVAL: Poll interval duration (e.g. '3s')
        FEED_BASE_URL: Feed API base URL
        FEED_VERIFY_TLS: Verify the feed certificate (true/false)
        PUSH_BASE_URL: Push provider base URL
        ALERT_TIMEZONE: IANA zone for alert timestamps

    Args:
        base: Config to overlay onto (defaults if not provided)

    Returns:
        Config object with environment values applied
    """
    config = base or Config()
    feed = config.feed
    push = config.push

    push_key = os.environ.get("QUAKE_PUSH_KEY")
    if push_key:
        config = replace(config, push_key=push_key)

    interval = os.environ.get("POLL_INTERVAL")
    if interval:
        config = replace(
            config,
            poll_interval_seconds=_parse_duration_field(interval, "POLL_INTERVAL"),
        )

    tz_name = os.environ.get("ALERT_TIMEZONE")
    if tz_name:
        config = replace(config, timezone=tz_name)

    feed_url = os.environ.get("FEED_BASE_URL")
    if feed_url:
        feed = replace(feed, base_url=feed_url)

    feed_verify = os.environ.get("FEED_VERIFY_TLS")
    if feed_verify:
        feed = replace(feed, verify_tls=_parse_bool(feed_verify))

    push_url = os.environ.get("PUSH_BASE_URL")
    if push_url:
        push = replace(push, base_url=push_url)

    return replace(config, feed=feed, push=push)


def apply_overrides(
    config: Config,
    key: str | None = None,
    interval: str | None = None,
) -> Config:
    """Apply command-line overrides on top of loaded configuration.

    Raises:
        ConfigError: If the interval is not a valid duration
    """
    if key:
        config = replace(config, push_key=key)
    if interval:
        config = replace(
            config,
            poll_interval_seconds=_parse_duration_field(interval, "--duration"),
        )
    return config


def build_config(
    config_path: str | Path | None = None,
    key: str | None = None,
    interval: str | None = None,
) -> Config:
    """Load, override and validate configuration for startup.

    Precedence: command line, then environment, then YAML file, then defaults.

    Raises:
        ConfigError: If validation finds any critical error
    """
    config = load_config(config_path)
    config = load_config_from_env(config)
    config = apply_overrides(config, key=key, interval=interval)

    result = validate_config(config)
    for warning in result.warnings:
        logger.warning("Config warning: %s: %s", warning.field, warning.message)

    if not result.valid:
        for error in result.critical_errors:
            logger.error("Config error: %s: %s", error.field, error.message)
        raise ConfigError(
            "; ".join(f"{e.field}: {e.message}" for e in result.critical_errors)
        )

    return config
