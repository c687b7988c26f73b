"""Value basis resolution and per-line tariff accumulation.

The computation runs in two stages. ``resolve_bases`` needs the full material
valuation before it can derive the remainder value; ``evaluate_rule_lines``
only ever reads the finished bases. Amounts are summed per line, never by
adding rates first, because lines in one rule tax different bases.
"""

from __future__ import annotations

from collections.abc import Iterable

from tariffwizard_core.engine.models import RuleLineOutcome, TariffBreakdown, ValueBases
from tariffwizard_core.rules.models import RuleLine
from tariffwizard_core.valuation.models import MaterialValuation


def resolve_bases(full_value: float, total_material_cost: float) -> ValueBases:
    return ValueBases(
        full_value=full_value,
        remainder_value=max(0.0, full_value - total_material_cost),
        metal_content_value=total_material_cost,
    )


def evaluate_rule_lines(lines: Iterable[RuleLine], bases: ValueBases) -> list[RuleLineOutcome]:
    outcomes: list[RuleLineOutcome] = []
    for line in lines:
        basis_value = bases.value_for(line.value_basis)
        outcomes.append(
            RuleLineOutcome(
                reference_code=line.reference_code,
                rate_pct=line.rate_pct,
                value_basis=line.value_basis,
                basis_value=basis_value,
                amount=basis_value * line.rate_pct / 100,
                description=line.description,
            )
        )
    return outcomes


def effective_rate_pct(total_tariff_amount: float, full_value: float) -> float:
    if full_value == 0:
        return 0.0
    return total_tariff_amount / full_value * 100


def build_breakdown(
    bases: ValueBases,
    valuation: MaterialValuation,
    outcomes: list[RuleLineOutcome],
) -> TariffBreakdown:
    total = sum(outcome.amount for outcome in outcomes)
    return TariffBreakdown(
        full_value=bases.full_value,
        remainder_value=bases.remainder_value,
        metal_content_value=bases.metal_content_value,
        total_metal_weight_kg=valuation.total_metal_weight_kg,
        materials=list(valuation.materials),
        outcomes=outcomes,
        total_tariff_amount=total,
        final_landed_cost=bases.full_value + total,
    )
