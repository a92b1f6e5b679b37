"""Configuration for kiosksync.

Settings come from an optional JSON file (``kiosksync.json`` by default) with
environment variables layered on top::

    {
        "auction_id": "los-angeles-modern-auctions-march-2015",
        "page_size": 10,
        "sync_interval_seconds": 60,
        "http": {"base_url": "https://api.artsy.net", "timeout_seconds": 30}
    }
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping

DEFAULT_CONFIG_FILE = "kiosksync.json"
DEFAULT_PAGE_SIZE = 10
DEFAULT_SYNC_INTERVAL_SECONDS = 60.0
DEFAULT_BASE_URL = "https://api.artsy.net"

ENV_AUCTION_ID = "KIOSKSYNC_AUCTION_ID"
ENV_PAGE_SIZE = "KIOSKSYNC_PAGE_SIZE"
ENV_SYNC_INTERVAL = "KIOSKSYNC_SYNC_INTERVAL"
ENV_BASE_URL = "KIOSKSYNC_BASE_URL"


class ConfigError(ValueError):
    """Raised when a configuration value is missing or malformed."""


def load_config(path: Path | str | None = None) -> Dict[str, Any]:
    """Load a JSON config file and return it as a dictionary.

    A missing file yields an empty dictionary.
    """
    config_path = Path(path) if path is not None else Path(DEFAULT_CONFIG_FILE)
    if not config_path.exists():
        return {}
    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"{config_path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a JSON object")
    return data


def _positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}") from exc
    if number < 1 or (isinstance(value, float) and value != number):
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")
    return number


def _non_negative_float(name: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be a number, got {value!r}") from exc
    if number < 0:
        raise ConfigError(f"{name} must not be negative, got {value!r}")
    return number


@dataclass(frozen=True)
class SyncSettings:
    """Validated settings for one kiosk sync session.

    ``sync_interval_seconds == 0`` disables the periodic loop: the scheduler
    then runs a single pass per ``start()``.
    """

    auction_id: str
    page_size: int = DEFAULT_PAGE_SIZE
    sync_interval_seconds: float = DEFAULT_SYNC_INTERVAL_SECONDS
    max_pages: int | None = None
    base_url: str = DEFAULT_BASE_URL
    request_timeout_seconds: float = 30.0
    retry_attempts: int = 3

    @property
    def periodic(self) -> bool:
        return self.sync_interval_seconds > 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SyncSettings":
        auction_id = data.get("auction_id")
        if not isinstance(auction_id, str) or not auction_id.strip():
            raise ConfigError("auction_id is required")

        http_cfg = data.get("http", {})
        if not isinstance(http_cfg, Mapping):
            raise ConfigError("http must be an object")

        max_pages = data.get("max_pages")
        return cls(
            auction_id=auction_id.strip(),
            page_size=_positive_int("page_size", data.get("page_size", DEFAULT_PAGE_SIZE)),
            sync_interval_seconds=_non_negative_float(
                "sync_interval_seconds",
                data.get("sync_interval_seconds", DEFAULT_SYNC_INTERVAL_SECONDS),
            ),
            max_pages=None if max_pages is None else _positive_int("max_pages", max_pages),
            base_url=str(http_cfg.get("base_url", DEFAULT_BASE_URL)).rstrip("/"),
            request_timeout_seconds=_non_negative_float(
                "http.timeout_seconds", http_cfg.get("timeout_seconds", 30.0)
            ),
            retry_attempts=_positive_int("http.retry_attempts", http_cfg.get("retry_attempts", 3)),
        )


def _apply_env(data: Dict[str, Any], environ: Mapping[str, str]) -> Dict[str, Any]:
    merged = dict(data)
    if environ.get(ENV_AUCTION_ID):
        merged["auction_id"] = environ[ENV_AUCTION_ID]
    if environ.get(ENV_PAGE_SIZE):
        merged["page_size"] = environ[ENV_PAGE_SIZE]
    if environ.get(ENV_SYNC_INTERVAL):
        merged["sync_interval_seconds"] = environ[ENV_SYNC_INTERVAL]
    if environ.get(ENV_BASE_URL):
        http_cfg = dict(merged.get("http") or {})
        http_cfg["base_url"] = environ[ENV_BASE_URL]
        merged["http"] = http_cfg
    return merged


def load_settings(
    path: Path | str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> SyncSettings:
    """Read the config file, apply environment variables, then ``overrides``."""
    data = _apply_env(load_config(path), os.environ if environ is None else environ)
    for key, value in overrides.items():
        if value is None:
            continue
        if key == "base_url":
            data["http"] = {**(data.get("http") or {}), "base_url": value}
        else:
            data[key] = value
    return SyncSettings.from_mapping(data)


__all__ = [
    "ConfigError",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_SYNC_INTERVAL_SECONDS",
    "SyncSettings",
    "load_config",
    "load_settings",
]
