from tariffwizard_core.pricing.cache import PriceCache
from tariffwizard_core.pricing.feed import MetalsDevPriceFeed, PriceFeed, PriceFeedError
from tariffwizard_core.pricing.models import (
    FALLBACK_PRICES,
    TRACKED_COMMODITIES,
    CacheEntryStatus,
    PriceQuote,
)
from tariffwizard_core.pricing.oracle import PriceOracle

__all__ = [
    "FALLBACK_PRICES",
    "TRACKED_COMMODITIES",
    "CacheEntryStatus",
    "MetalsDevPriceFeed",
    "PriceCache",
    "PriceFeed",
    "PriceFeedError",
    "PriceOracle",
    "PriceQuote",
]
