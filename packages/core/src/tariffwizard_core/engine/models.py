from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from tariffwizard_core.rules.models import ValueBasis
from tariffwizard_core.valuation.models import PricedMaterial


class ValueBases(BaseModel):
    model_config = ConfigDict(frozen=True)

    full_value: float
    remainder_value: float
    metal_content_value: float

    def value_for(self, basis: ValueBasis) -> float:
        if basis is ValueBasis.FULL_VALUE:
            return self.full_value
        if basis is ValueBasis.REMAINDER_VALUE:
            return self.remainder_value
        if basis is ValueBasis.METAL_CONTENT_VALUE:
            return self.metal_content_value
        raise ValueError(f"Unknown value basis: {basis!r}")


class RuleLineOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    reference_code: str
    rate_pct: float
    value_basis: ValueBasis
    basis_value: float
    amount: float
    description: str = ""


class TariffBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    full_value: float
    remainder_value: float
    metal_content_value: float
    total_metal_weight_kg: float = 0.0
    materials: list[PricedMaterial] = Field(default_factory=list)
    outcomes: list[RuleLineOutcome] = Field(default_factory=list)
    total_tariff_amount: float = 0.0
    final_landed_cost: float = 0.0


class CalculationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    classification_code: str
    origin_country: str
    unit_cost: float
    quantity: int
    line_number: int = 1
    effective_tariff_rate_pct: float
    per_unit: TariffBreakdown
    extended: TariffBreakdown

    @property
    def full_value(self) -> float:
        return self.per_unit.full_value

    @property
    def remainder_value(self) -> float:
        return self.per_unit.remainder_value

    @property
    def metal_content_value(self) -> float:
        return self.per_unit.metal_content_value

    @property
    def outcomes(self) -> list[RuleLineOutcome]:
        return self.extended.outcomes

    @property
    def total_tariff_amount(self) -> float:
        return self.extended.total_tariff_amount

    @property
    def final_landed_cost(self) -> float:
        return self.extended.final_landed_cost
