from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import timedelta

from tariffwizard_core.config import Settings, get_settings
from tariffwizard_core.engine.calculator import TariffCalculator
from tariffwizard_core.engine.models import CalculationResult
from tariffwizard_core.invoice.models import DutySummary, InvoiceAddendum, InvoiceRows
from tariffwizard_core.invoice.rows import build_invoice_addendum, build_invoice_rows
from tariffwizard_core.invoice.summary import build_duty_summary
from tariffwizard_core.pricing.cache import PriceCache
from tariffwizard_core.pricing.feed import MetalsDevPriceFeed
from tariffwizard_core.pricing.models import CacheEntryStatus
from tariffwizard_core.pricing.oracle import PriceOracle
from tariffwizard_core.rules.repository import RuleRepository, build_rule_repository


class TariffService:
    def __init__(self, repository: RuleRepository, oracle: PriceOracle) -> None:
        self._oracle = oracle
        self._calculator = TariffCalculator(repository, oracle)

    @property
    def oracle(self) -> PriceOracle:
        return self._oracle

    async def calculate(
        self,
        classification_code: str,
        origin_country: str,
        unit_cost: object,
        materials: Iterable[str] = (),
        material_weights_by_name: Mapping[str, object] | None = None,
        quantity: int = 1,
        line_number: int | None = None,
    ) -> CalculationResult:
        return await self._calculator.calculate(
            classification_code,
            origin_country,
            unit_cost,
            materials,
            material_weights_by_name,
            quantity,
            line_number,
        )

    async def build_invoice_rows(
        self,
        classification_code: str,
        origin_country: str,
        unit_cost: object,
        materials: Iterable[str] = (),
        material_weights_by_name: Mapping[str, object] | None = None,
        quantity: int = 1,
        line_number: int | None = None,
        manufacturer_part_number: str | None = None,
        cast_country: str | None = None,
        smelt_country: str | None = None,
    ) -> InvoiceRows:
        result = await self.calculate(
            classification_code,
            origin_country,
            unit_cost,
            materials,
            material_weights_by_name,
            quantity,
            line_number,
        )
        return build_invoice_rows(
            result,
            manufacturer_part_number=manufacturer_part_number,
            cast_country=cast_country,
            smelt_country=smelt_country,
        )

    def build_duty_summary(
        self,
        result: CalculationResult,
        cast_country: str | None = None,
        smelt_country: str | None = None,
    ) -> DutySummary:
        return build_duty_summary(result, cast_country=cast_country, smelt_country=smelt_country)

    def build_invoice_addendum(
        self,
        results: Sequence[CalculationResult],
        report_id: str | None = None,
        manufacturer_part_numbers: Sequence[str | None] | None = None,
        cast_country: str | None = None,
        smelt_country: str | None = None,
    ) -> InvoiceAddendum:
        return build_invoice_addendum(
            results,
            report_id=report_id,
            manufacturer_part_numbers=manufacturer_part_numbers,
            cast_country=cast_country,
            smelt_country=smelt_country,
        )

    def get_cache_status(self) -> dict[str, CacheEntryStatus]:
        return self._oracle.get_cache_status()

    def clear_cache(self) -> None:
        self._oracle.clear_cache()

    async def refresh_prices(self) -> dict[str, float | None]:
        return await self._oracle.refresh_prices()


def build_oracle(settings: Settings, cache: PriceCache | None = None) -> PriceOracle:
    feed = MetalsDevPriceFeed(
        api_key=settings.metal_price_api_key,
        base_url=settings.price_feed_url,
        timeout_s=settings.price_feed_timeout_s,
    )
    return PriceOracle(
        feed,
        cache,
        freshness=timedelta(hours=settings.price_cache_ttl_hours),
        timeout_s=settings.price_feed_timeout_s,
    )


def build_service(settings: Settings | None = None, cache: PriceCache | None = None) -> TariffService:
    settings = settings or get_settings()
    return TariffService(build_rule_repository(settings), build_oracle(settings, cache))
