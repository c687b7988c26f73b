from __future__ import annotations

import pytest
from fakes import FakeClock, FakePriceFeed, line
from tariffwizard_core.pricing.cache import PriceCache
from tariffwizard_core.pricing.oracle import PriceOracle
from tariffwizard_core.rules.models import DutyRule, ValueBasis
from tariffwizard_core.rules.repository import InMemoryRuleRepository


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def feed() -> FakePriceFeed:
    return FakePriceFeed({"copper": 10.0, "aluminum": 2.5})


@pytest.fixture
def oracle(feed: FakePriceFeed, clock: FakeClock) -> PriceOracle:
    return PriceOracle(feed, PriceCache(clock=clock), timeout_s=1.0)


@pytest.fixture
def repository() -> InMemoryRuleRepository:
    return InMemoryRuleRepository(
        [
            DutyRule(
                rule_number=1,
                classification_code="8526910020",
                origin_country="VN",
                lines=[line("9903.02.69", 20, ValueBasis.FULL_VALUE, "20% - IEEPA Vietnam")],
            ),
            DutyRule(
                rule_number=2,
                classification_code="8544421000",
                origin_country="TW",
                rule_type="Section 232_MetalSplit",
                lines=[
                    line("9903.02.60", 15, ValueBasis.REMAINDER_VALUE, "15% - Remainder duty"),
                    line("9903.78.01", 50, ValueBasis.METAL_CONTENT_VALUE, "50% - Section 232 Copper"),
                ],
            ),
            DutyRule(
                rule_number=3,
                classification_code="8517710000",
                origin_country="TW",
                rule_type="Section 232_MetalSplit",
                lines=[
                    line("9903.02.60", 20, ValueBasis.REMAINDER_VALUE, "20% - IEEPA Taiwan"),
                    line("9903.01.33", 0, ValueBasis.REMAINDER_VALUE, "0% - IEEPA Reciprocal 232 Exclusion"),
                    line("9903.01.33", 0, ValueBasis.METAL_CONTENT_VALUE, "0% - IEEPA Reciprocal 232 Exclusion"),
                    line("9903.85.08", 50, ValueBasis.METAL_CONTENT_VALUE, "50% - Section 232 Aluminum"),
                ],
            ),
            DutyRule(
                rule_number=4,
                classification_code="7616995190",
                origin_country="CN",
                lines=[line("9903.85.08", 50, ValueBasis.METAL_CONTENT_VALUE, "50% - Section 232 Aluminum")],
            ),
        ]
    )
