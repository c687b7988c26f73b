from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal

DEFAULT_PRICE_FEED_URL = "https://api.metals.dev/v1"
DEFAULT_RULES_PATH = "storage/rules/section99_rules.json"
DEFAULT_DATABASE_URL = "sqlite:///./tariffwizard_dev.db"


@dataclass(frozen=True)
class Settings:
    metal_price_api_key: str | None
    price_feed_url: str
    price_feed_timeout_s: float
    price_cache_ttl_hours: float
    rules_source: Literal["json", "sql"]
    rules_path: Path
    database_url: str
    log_level: str


def _normalize_database_url(database_url: str) -> str:
    if database_url.startswith("postgres://"):
        return f"postgresql://{database_url[len('postgres://'):]}"
    return database_url


def _read_positive_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


@lru_cache
def get_settings() -> Settings:
    raw_database_url = os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL
    rules_source = os.getenv("TARIFFWIZARD_RULES_SOURCE", "json").lower()
    if rules_source not in {"json", "sql"}:
        raise ValueError("TARIFFWIZARD_RULES_SOURCE must be 'json' or 'sql'")
    return Settings(
        metal_price_api_key=os.getenv("METAL_PRICE_API_KEY") or None,
        price_feed_url=os.getenv("TARIFFWIZARD_PRICE_FEED_URL", DEFAULT_PRICE_FEED_URL).rstrip("/"),
        price_feed_timeout_s=_read_positive_float("TARIFFWIZARD_PRICE_FEED_TIMEOUT_S", "10"),
        price_cache_ttl_hours=_read_positive_float("TARIFFWIZARD_PRICE_CACHE_TTL_HOURS", "168"),
        rules_source=rules_source,
        rules_path=Path(os.getenv("TARIFFWIZARD_RULES_PATH", DEFAULT_RULES_PATH)),
        database_url=_normalize_database_url(raw_database_url),
        log_level=os.getenv("TARIFFWIZARD_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
