from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from datetime import timedelta

from tariffwizard_core.errors import PriceUnavailableError
from tariffwizard_core.pricing.cache import PriceCache
from tariffwizard_core.pricing.feed import PriceFeed, PriceFeedError
from tariffwizard_core.pricing.models import (
    FALLBACK_PRICES,
    TRACKED_COMMODITIES,
    CachedPrice,
    CacheEntryStatus,
    PriceQuote,
    normalize_commodity,
)

logger = logging.getLogger(__name__)

DEFAULT_FRESHNESS = timedelta(days=7)


class PriceOracle:
    """Resolves per-kg commodity prices.

    Lookup order: fresh cache entry, live feed, stale cache entry, static
    fallback. Only the live feed result is written to the cache.
    """

    def __init__(
        self,
        feed: PriceFeed,
        cache: PriceCache | None = None,
        *,
        freshness: timedelta = DEFAULT_FRESHNESS,
        timeout_s: float | None = 10.0,
        tracked: Iterable[str] = TRACKED_COMMODITIES,
        fallback_prices: Mapping[str, float] | None = None,
    ) -> None:
        self._feed = feed
        self._cache = cache or PriceCache()
        self._freshness = freshness
        self._timeout_s = timeout_s
        self._tracked = tuple(normalize_commodity(name) for name in tracked)
        source = FALLBACK_PRICES if fallback_prices is None else fallback_prices
        self._fallback_prices = {normalize_commodity(k): float(v) for k, v in source.items()}

    def is_tracked(self, commodity: str) -> bool:
        return normalize_commodity(commodity) in self._tracked

    async def get_price(self, commodity: str) -> float:
        quote = await self.get_quote(commodity)
        return quote.price

    async def get_quote(self, commodity: str) -> PriceQuote:
        name = normalize_commodity(commodity)
        if name not in self._tracked:
            raise PriceUnavailableError(f"{commodity!r} is not a tracked commodity")
        cached = self._cache.get(name)
        if cached is not None and self._cache.now() - cached.fetched_at < self._freshness:
            logger.debug("Using cached %s price: %.4f/kg", name, cached.price)
            return PriceQuote(commodity=name, price=cached.price, source="cache", fetched_at=cached.fetched_at)
        try:
            price = await asyncio.wait_for(self._feed.fetch_price(name), timeout=self._timeout_s)
        except (PriceFeedError, asyncio.TimeoutError) as exc:
            return self._recover(name, cached, str(exc) or type(exc).__name__, exc)
        except Exception as exc:
            logger.exception("Price feed raised an unexpected error for %s", name)
            return self._recover(name, cached, f"{type(exc).__name__}: {exc}", exc)
        entry = self._cache.put(name, price)
        logger.info("Fetched fresh %s price: %.4f/kg", name, price)
        return PriceQuote(commodity=name, price=entry.price, source="live", fetched_at=entry.fetched_at)

    def _recover(self, name: str, cached: CachedPrice | None, reason: str, exc: Exception) -> PriceQuote:
        if cached is not None:
            logger.warning("Price feed failed for %s (%s); using stale cached price %.4f/kg", name, reason, cached.price)
            return PriceQuote(commodity=name, price=cached.price, source="stale_cache", fetched_at=cached.fetched_at)
        fallback = self._fallback_prices.get(name)
        if fallback is not None:
            logger.warning("Price feed failed for %s (%s); using fallback price %.4f/kg", name, reason, fallback)
            return PriceQuote(commodity=name, price=fallback, source="fallback")
        raise PriceUnavailableError(f"No price available for {name}: {reason}") from exc

    async def get_all_prices(self) -> dict[str, float | None]:
        quotes = await asyncio.gather(
            *(self.get_quote(name) for name in self._tracked),
            return_exceptions=True,
        )
        prices: dict[str, float | None] = {}
        for name, quote in zip(self._tracked, quotes):
            if isinstance(quote, PriceUnavailableError):
                logger.error("Failed to get %s price: %s", name, quote)
                prices[name] = None
            elif isinstance(quote, BaseException):
                raise quote
            else:
                prices[name] = quote.price
        return prices

    async def refresh_prices(self) -> dict[str, float | None]:
        self.clear_cache()
        return await self.get_all_prices()

    def get_cache_status(self) -> dict[str, CacheEntryStatus]:
        now = self._cache.now()
        status: dict[str, CacheEntryStatus] = {}
        for name in self._tracked:
            cached = self._cache.get(name)
            if cached is None:
                status[name] = CacheEntryStatus(commodity=name, cached=False)
                continue
            age = now - cached.fetched_at
            status[name] = CacheEntryStatus(
                commodity=name,
                cached=True,
                price=cached.price,
                last_updated=cached.fetched_at.isoformat(),
                age_hours=round(age.total_seconds() / 3600),
                is_expired=age >= self._freshness,
            )
        return status

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("Metal price cache cleared")
