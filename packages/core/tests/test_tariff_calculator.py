from __future__ import annotations

import asyncio
import time

import pytest
from fakes import FailingRepository, FakeClock, FakePriceFeed, RecordingRepository, line
from tariffwizard_core.engine.calculator import TariffCalculator
from tariffwizard_core.errors import InvalidInputError, RepositoryUnavailableError
from tariffwizard_core.pricing.cache import PriceCache
from tariffwizard_core.pricing.oracle import PriceOracle
from tariffwizard_core.rules.models import ValueBasis
from tariffwizard_core.rules.repository import InMemoryRuleRepository


@pytest.mark.asyncio
async def test_single_full_value_line(repository: InMemoryRuleRepository, oracle: PriceOracle) -> None:
    calculator = TariffCalculator(repository, oracle)
    result = await calculator.calculate("8526910020", "VN", 100, quantity=1)
    assert result.total_tariff_amount == pytest.approx(20.0)
    assert result.final_landed_cost == pytest.approx(120.0)
    assert result.effective_tariff_rate_pct == pytest.approx(20.0)
    assert result.remainder_value == 100.0
    assert result.metal_content_value == 0.0


@pytest.mark.asyncio
async def test_remainder_and_metal_content_split(repository: InMemoryRuleRepository, oracle: PriceOracle) -> None:
    calculator = TariffCalculator(repository, oracle)
    result = await calculator.calculate("8544421000", "TW", 100, ["copper"], {"copper": 2})
    assert result.remainder_value == pytest.approx(80.0)
    assert result.metal_content_value == pytest.approx(20.0)
    remainder, metal = result.outcomes
    assert remainder.value_basis is ValueBasis.REMAINDER_VALUE
    assert remainder.amount == pytest.approx(12.0)
    assert metal.value_basis is ValueBasis.METAL_CONTENT_VALUE
    assert metal.amount == pytest.approx(10.0)
    assert result.total_tariff_amount == pytest.approx(22.0)
    assert result.effective_tariff_rate_pct == pytest.approx(22.0)


@pytest.mark.asyncio
async def test_no_matching_rules_owes_nothing(repository: InMemoryRuleRepository, oracle: PriceOracle) -> None:
    calculator = TariffCalculator(repository, oracle)
    result = await calculator.calculate("0101210000", "FR", 40, quantity=3)
    assert result.outcomes == []
    assert result.total_tariff_amount == 0.0
    assert result.final_landed_cost == pytest.approx(120.0)
    assert result.effective_tariff_rate_pct == 0.0


@pytest.mark.asyncio
async def test_unpriced_material_still_calculates(repository: InMemoryRuleRepository, clock: FakeClock) -> None:
    feed = FakePriceFeed({"copper": 10.0}, delay_s=0.5)
    oracle = PriceOracle(feed, PriceCache(clock=clock), timeout_s=0.01, fallback_prices={})
    calculator = TariffCalculator(repository, oracle)
    result = await calculator.calculate("8544421000", "TW", 100, ["copper"], {"copper": 2})
    (copper,) = result.per_unit.materials
    assert copper.unit_price is None
    assert copper.cost == 0.0
    assert result.metal_content_value == 0.0
    assert result.remainder_value == 100.0
    assert result.total_tariff_amount == pytest.approx(15.0)


@pytest.mark.asyncio
async def test_materials_exceeding_cost_clamp_remainder(repository: InMemoryRuleRepository, oracle: PriceOracle) -> None:
    calculator = TariffCalculator(repository, oracle)
    result = await calculator.calculate("8544421000", "TW", 100, ["copper"], {"copper": 15})
    assert result.remainder_value == 0.0
    assert result.metal_content_value == pytest.approx(150.0)
    assert result.total_tariff_amount == pytest.approx(75.0)


@pytest.mark.asyncio
async def test_quantity_scaling_is_linear(repository: InMemoryRuleRepository, oracle: PriceOracle) -> None:
    calculator = TariffCalculator(repository, oracle)
    single = await calculator.calculate("8517710000", "TW", 250, ["aluminum"], {"aluminum": 4}, quantity=1)
    double = await calculator.calculate("8517710000", "TW", 250, ["aluminum"], {"aluminum": 4}, quantity=2)
    assert double.per_unit.model_dump(exclude={"materials"}) == single.per_unit.model_dump(exclude={"materials"})
    assert double.total_tariff_amount == 2 * single.total_tariff_amount
    assert double.final_landed_cost == 2 * single.final_landed_cost
    assert [o.amount for o in double.outcomes] == [2 * o.amount for o in single.outcomes]
    assert double.extended.materials[0].cost == 2 * single.extended.materials[0].cost
    assert double.effective_tariff_rate_pct == single.effective_tariff_rate_pct


@pytest.mark.asyncio
async def test_totals_match_effective_rate(repository: InMemoryRuleRepository, oracle: PriceOracle) -> None:
    calculator = TariffCalculator(repository, oracle)
    result = await calculator.calculate("8517710000", "TW", 333.33, ["aluminum", "copper"], {"aluminum": 7.3, "copper": 1.1}, quantity=1)
    assert result.total_tariff_amount == pytest.approx(sum(o.amount for o in result.outcomes))
    rederived = result.effective_tariff_rate_pct * result.full_value / 100
    assert rederived == pytest.approx(result.per_unit.total_tariff_amount)
    assert result.remainder_value >= 0


@pytest.mark.asyncio
async def test_identical_inputs_are_idempotent(repository: InMemoryRuleRepository, oracle: PriceOracle, feed: FakePriceFeed) -> None:
    calculator = TariffCalculator(repository, oracle)
    first = await calculator.calculate("8544421000", "TW", 100, ["copper"], {"copper": 2}, quantity=4)
    second = await calculator.calculate("8544421000", "TW", 100, ["copper"], {"copper": 2}, quantity=4)
    assert first.model_dump(exclude={"per_unit": {"materials"}, "extended": {"materials"}}) == second.model_dump(
        exclude={"per_unit": {"materials"}, "extended": {"materials"}}
    )
    assert [m.cost for m in first.extended.materials] == [m.cost for m in second.extended.materials]
    assert feed.calls == ["copper"]


@pytest.mark.asyncio
async def test_origin_is_normalized(repository: InMemoryRuleRepository, oracle: PriceOracle) -> None:
    calculator = TariffCalculator(repository, oracle)
    result = await calculator.calculate(" 8526910020 ", "vn", "100")
    assert result.origin_country == "VN"
    assert result.classification_code == "8526910020"
    assert result.total_tariff_amount == pytest.approx(20.0)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("code", "country", "cost", "quantity"),
    [
        ("", "VN", 100, 1),
        ("8526910020", "", 100, 1),
        ("8526910020", "VN", None, 1),
        ("8526910020", "VN", 0, 1),
        ("8526910020", "VN", -5, 1),
        ("8526910020", "VN", "abc", 1),
        ("8526910020", "VN", float("inf"), 1),
        ("8526910020", "VN", 100, 0),
        ("8526910020", "VN", 100, 1.5),
    ],
)
async def test_invalid_input_rejected_before_any_lookup(
    code: str,
    country: str,
    cost: object,
    quantity: object,
    clock: FakeClock,
) -> None:
    repository = RecordingRepository([line("X", 10, ValueBasis.FULL_VALUE)])
    feed = FakePriceFeed({"copper": 10.0})
    calculator = TariffCalculator(repository, PriceOracle(feed, PriceCache(clock=clock)))
    with pytest.raises(InvalidInputError):
        await calculator.calculate(code, country, cost, ["copper"], {"copper": 1}, quantity=quantity)  # type: ignore[arg-type]
    assert repository.calls == []
    assert feed.calls == []


@pytest.mark.asyncio
async def test_repository_failure_is_fatal(oracle: PriceOracle, feed: FakePriceFeed) -> None:
    repository = FailingRepository()
    calculator = TariffCalculator(repository, oracle)
    with pytest.raises(RepositoryUnavailableError):
        await calculator.calculate("8544421000", "TW", 100, ["copper"], {"copper": 2})
    assert repository.calls == 1
    assert feed.calls == []


@pytest.mark.asyncio
async def test_line_number_defaults_and_validates(repository: InMemoryRuleRepository, oracle: PriceOracle) -> None:
    calculator = TariffCalculator(repository, oracle)
    result = await calculator.calculate("8526910020", "VN", 100)
    assert result.line_number == 1
    numbered = await calculator.calculate("8526910020", "VN", 100, line_number=7)
    assert numbered.line_number == 7
    with pytest.raises(InvalidInputError):
        await calculator.calculate("8526910020", "VN", 100, line_number=0)


@pytest.mark.asyncio
async def test_material_prices_are_looked_up_concurrently(repository: InMemoryRuleRepository, clock: FakeClock) -> None:
    feed = FakePriceFeed({"copper": 10.0, "aluminum": 2.5}, delay_s=0.3)
    calculator = TariffCalculator(repository, PriceOracle(feed, PriceCache(clock=clock), timeout_s=2.0))
    started = time.perf_counter()
    result = await calculator.calculate("8517710000", "TW", 250, ["copper", "aluminum"], {"copper": 1, "aluminum": 4})
    elapsed = time.perf_counter() - started
    assert result.metal_content_value == pytest.approx(20.0)
    assert sorted(feed.calls) == ["aluminum", "copper"]
    assert elapsed < 0.55


@pytest.mark.asyncio
async def test_concurrent_calculations_share_one_cache(repository: InMemoryRuleRepository, clock: FakeClock) -> None:
    feed = FakePriceFeed({"copper": 10.0, "aluminum": 2.5}, delay_s=0.05)
    cache = PriceCache(clock=clock)
    calculators = [TariffCalculator(repository, PriceOracle(feed, cache, timeout_s=2.0)) for _ in range(2)]
    results = await asyncio.gather(
        *(
            calculators[i % 2].calculate(
                "8517710000", "TW", 250, ["copper", "aluminum"], {"copper": 1, "aluminum": 4}, quantity=i + 1
            )
            for i in range(6)
        )
    )

    for i, result in enumerate(results):
        assert result.metal_content_value == pytest.approx(20.0)
        assert result.total_tariff_amount == pytest.approx(results[0].total_tariff_amount * (i + 1))
    assert cache.get("copper").price == 10.0
    assert cache.get("aluminum").price == 2.5

    calls_before = len(feed.calls)
    warm = await calculators[0].calculate("8517710000", "TW", 250, ["copper"], {"copper": 1})
    assert warm.per_unit.materials[0].price_source == "cache"
    assert len(feed.calls) == calls_before
