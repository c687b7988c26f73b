from __future__ import annotations

from collections.abc import Iterable

from tariffwizard_core.engine.models import CalculationResult, RuleLineOutcome
from tariffwizard_core.invoice.formatting import (
    extract_country_code,
    format_money,
    format_rate,
    format_weight,
    strip_code_separators,
)
from tariffwizard_core.invoice.models import CommoditySummary, DutySummary, DutySummaryEntry, GroupedDuty


def group_outcomes(outcomes: Iterable[RuleLineOutcome]) -> list[GroupedDuty]:
    """Merge outcomes sharing a reference code, in first-seen order.

    Amounts are summed; the rate and description come from the first line
    carrying the code.
    """
    groups: dict[str, GroupedDuty] = {}
    for outcome in outcomes:
        existing = groups.get(outcome.reference_code)
        if existing is None:
            groups[outcome.reference_code] = GroupedDuty(
                reference_code=outcome.reference_code,
                description=outcome.description,
                rate_pct=outcome.rate_pct,
                value_bases=[outcome.value_basis],
                amount=outcome.amount,
            )
            continue
        bases = list(existing.value_bases)
        if outcome.value_basis not in bases:
            bases.append(outcome.value_basis)
        groups[outcome.reference_code] = existing.model_copy(
            update={
                "description": existing.description or outcome.description,
                "value_bases": bases,
                "amount": existing.amount + outcome.amount,
            }
        )
    return list(groups.values())


def build_duty_summary(
    result: CalculationResult,
    cast_country: str | None = None,
    smelt_country: str | None = None,
) -> DutySummary:
    cast_code = extract_country_code(cast_country or result.origin_country)
    smelt_code = extract_country_code(smelt_country or result.origin_country)
    duties = [
        DutySummaryEntry(
            reference_code=group.reference_code,
            description=group.description,
            rate=format_rate(group.rate_pct),
            value_bases=group.value_bases,
            amount=format_money(group.amount),
        )
        for group in group_outcomes(result.extended.outcomes)
    ]
    commodities = [
        CommoditySummary(
            material=material.name,
            weight_kg=format_weight(material.weight_kg),
            unit_price=format_money(material.unit_price) if material.unit_price is not None else None,
            cast_country=cast_code,
            smelt_country=smelt_code,
        )
        for material in result.extended.materials
        if material.contributes_metal_content
    ]
    return DutySummary(
        line_number=result.line_number,
        classification_code=strip_code_separators(result.classification_code),
        origin_country=result.origin_country,
        quantity=result.quantity,
        duties=duties,
        commodities=commodities,
        total_duty=format_money(result.total_tariff_amount),
        effective_rate=f"{result.effective_tariff_rate_pct:.2f}%",
    )
