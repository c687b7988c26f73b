from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime, timezone

from tariffwizard_core.pricing.models import CachedPrice

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PriceCache:
    """Process-wide commodity price cache.

    One instance is built per process and handed to every ``PriceOracle`` that
    should share prices. Writes are whole-entry replacements under a lock, so a
    reader sees either the previous entry or the new one, never a mix.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._entries: dict[str, CachedPrice] = {}
        self._lock = threading.Lock()

    def now(self) -> datetime:
        return self._clock()

    def get(self, commodity: str) -> CachedPrice | None:
        with self._lock:
            return self._entries.get(commodity)

    def put(self, commodity: str, price: float) -> CachedPrice:
        entry = CachedPrice(price=price, fetched_at=self._clock())
        with self._lock:
            self._entries[commodity] = entry
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
