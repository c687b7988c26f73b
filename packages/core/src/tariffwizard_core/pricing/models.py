from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

PriceSource = Literal["cache", "live", "stale_cache", "fallback"]

TRACKED_COMMODITIES: tuple[str, ...] = ("copper", "aluminum")

# Approximate LME prices in USD per kg, used only when the feed and cache both fail.
FALLBACK_PRICES: dict[str, float] = {
    "copper": 9.15,
    "aluminum": 1.82,
}


class CachedPrice(BaseModel):
    model_config = ConfigDict(frozen=True)

    price: float
    fetched_at: datetime


class PriceQuote(BaseModel):
    model_config = ConfigDict(frozen=True)

    commodity: str
    price: float
    source: PriceSource
    fetched_at: datetime | None = None


class CacheEntryStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    commodity: str
    cached: bool
    price: float | None = None
    last_updated: str | None = None
    age_hours: int | None = None
    is_expired: bool | None = None


def normalize_commodity(name: str) -> str:
    return name.strip().lower()
