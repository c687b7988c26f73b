from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from tariffwizard_core.config import DEFAULT_PRICE_FEED_URL
from tariffwizard_core.pricing.models import normalize_commodity

logger = logging.getLogger(__name__)

METALS_DEV_SYMBOLS: dict[str, str] = {
    "copper": "lme_copper",
    "aluminum": "lme_aluminum",
}


class PriceFeedError(Exception):
    """Raised when the external price feed cannot produce a price."""


class PriceFeed(Protocol):
    """Source of live per-kg prices.

    Implementations should raise ``PriceFeedError``; the oracle also treats any
    other exception as a feed failure and falls back to cached or static prices.
    """

    async def fetch_price(self, commodity: str) -> float:
        ...


class MetalsDevPriceFeed:
    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_PRICE_FEED_URL,
        timeout_s: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._client = client

    async def fetch_price(self, commodity: str) -> float:
        if not self._api_key:
            raise PriceFeedError("METAL_PRICE_API_KEY environment variable not set")
        name = normalize_commodity(commodity)
        symbol = METALS_DEV_SYMBOLS.get(name)
        if not symbol:
            supported = ", ".join(sorted(METALS_DEV_SYMBOLS))
            raise PriceFeedError(f"Unsupported metal: {commodity}. Supported: {supported}")
        payload = await self._get_latest()
        return _extract_price(payload, name, symbol)

    async def _get_latest(self) -> dict[str, Any]:
        params = {"api_key": self._api_key, "currency": "USD", "unit": "kg"}
        url = f"{self._base_url}/latest"
        try:
            if self._client is not None:
                response = await self._client.get(url, params=params, timeout=self._timeout_s)
            else:
                async with httpx.AsyncClient(timeout=self._timeout_s) as client:
                    response = await client.get(url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise PriceFeedError(f"Metals.dev API error: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise PriceFeedError(f"Metals.dev request failed: {exc}") from exc
        except ValueError as exc:
            raise PriceFeedError("Metals.dev returned a non-JSON body") from exc
        if not isinstance(payload, dict):
            raise PriceFeedError("Metals.dev returned an unexpected payload")
        return payload


def _extract_price(payload: dict[str, Any], commodity: str, symbol: str) -> float:
    if payload.get("status") != "success":
        error = payload.get("error")
        message = error.get("message") if isinstance(error, dict) else None
        raise PriceFeedError(f"API Error: {message or payload.get('status') or 'Unknown error'}")
    metals = payload.get("metals")
    raw = metals.get(symbol) if isinstance(metals, dict) else None
    if raw is None:
        raise PriceFeedError(f"Price not found for {commodity} ({symbol}) in API response")
    try:
        price = float(raw)
    except (TypeError, ValueError) as exc:
        raise PriceFeedError(f"Price for {commodity} is not numeric: {raw!r}") from exc
    if price <= 0:
        raise PriceFeedError(f"Price for {commodity} must be positive, got {price}")
    logger.debug("%s LME price: %.4f USD/kg", commodity, price)
    return price
