from __future__ import annotations

from collections.abc import Sequence
from uuid import uuid4

from tariffwizard_core.engine.models import CalculationResult, RuleLineOutcome
from tariffwizard_core.errors import InvalidInputError
from tariffwizard_core.invoice.formatting import (
    JOIN_SEPARATOR,
    extract_country_code,
    format_money,
    format_rate,
    format_weight,
    strip_code_separators,
)
from tariffwizard_core.invoice.models import AddendumSummary, InvoiceAddendum, InvoiceRow, InvoiceRows
from tariffwizard_core.invoice.summary import group_outcomes
from tariffwizard_core.rules.models import ValueBasis


def build_invoice_rows(
    result: CalculationResult,
    manufacturer_part_number: str | None = None,
    cast_country: str | None = None,
    smelt_country: str | None = None,
) -> InvoiceRows:
    """Lay a calculation out as fixed-column customs invoice rows.

    When the rule lines tax both the remainder and the metal content, the
    entry is split into a non-metal row and a metal row; full-value lines ride
    on the non-metal row. Any other mix is filed as a single row priced at the
    full declared value.
    """
    rows = _layout_rows(result, manufacturer_part_number, cast_country, smelt_country)
    return InvoiceRows(invoice_rows=[row for row, _ in rows], total_duties=format_money(_printed_total(rows)))


def build_invoice_addendum(
    results: Sequence[CalculationResult],
    report_id: str | None = None,
    manufacturer_part_numbers: Sequence[str | None] | None = None,
    cast_country: str | None = None,
    smelt_country: str | None = None,
) -> InvoiceAddendum:
    """Combine several calculated lines into one multi-product invoice addendum.

    Each line keeps its own row layout. Summary totals are summed unrounded
    and only formatted at the end; ``total_duties`` adds up the printed rows.
    """
    if not results:
        raise InvalidInputError("An addendum needs at least one calculated line")
    part_numbers = list(manufacturer_part_numbers) if manufacturer_part_numbers is not None else [None] * len(results)
    if len(part_numbers) != len(results):
        raise InvalidInputError(
            f"Got {len(part_numbers)} manufacturer part numbers for {len(results)} lines"
        )
    seen: set[int] = set()
    for result in results:
        if result.line_number in seen:
            raise InvalidInputError(f"Duplicate invoice line number {result.line_number}")
        seen.add(result.line_number)

    rows: list[tuple[InvoiceRow, float]] = []
    for result, part_number in zip(results, part_numbers):
        rows.extend(_layout_rows(result, part_number, cast_country, smelt_country))

    summary = AddendumSummary(
        total_products=len(results),
        total_product_cost=format_money(sum(result.extended.full_value for result in results)),
        total_tariff_amount=format_money(sum(result.total_tariff_amount for result in results)),
        total_final_cost=format_money(sum(result.final_landed_cost for result in results)),
    )
    return InvoiceAddendum(
        report_id=report_id or f"TW-{uuid4().hex[:12].upper()}",
        invoice_rows=[row for row, _ in rows],
        total_duties=format_money(_printed_total(rows)),
        summary=summary,
    )


def _layout_rows(
    result: CalculationResult,
    manufacturer_part_number: str | None,
    cast_country: str | None,
    smelt_country: str | None,
) -> list[tuple[InvoiceRow, float]]:
    outcomes = result.extended.outcomes
    bases = {outcome.value_basis for outcome in outcomes}
    split = ValueBasis.REMAINDER_VALUE in bases and ValueBasis.METAL_CONTENT_VALUE in bases
    context = _RowContext(
        result=result,
        part_number=manufacturer_part_number or "",
        cast_code=extract_country_code(cast_country or result.origin_country),
        smelt_code=extract_country_code(smelt_country or result.origin_country),
    )

    rows: list[tuple[InvoiceRow, float]] = []
    if split:
        non_metal = [o for o in outcomes if o.value_basis is not ValueBasis.METAL_CONTENT_VALUE]
        metal = [o for o in outcomes if o.value_basis is ValueBasis.METAL_CONTENT_VALUE]
        rows.append(
            context.row(
                non_metal,
                unit_price=result.per_unit.remainder_value,
                entered_value=result.extended.remainder_value,
                metal_row=False,
            )
        )
        rows.append(
            context.row(
                metal,
                unit_price=result.per_unit.metal_content_value,
                entered_value=result.extended.metal_content_value,
                metal_row=True,
            )
        )
    else:
        rows.append(
            context.row(
                outcomes,
                unit_price=result.per_unit.full_value,
                entered_value=result.extended.full_value,
                metal_row=ValueBasis.METAL_CONTENT_VALUE in bases,
            )
        )

    return rows


def _printed_total(rows: list[tuple[InvoiceRow, float]]) -> float:
    # Printed row amounts, not the unrounded duties.
    return sum(round(duty, 2) for _, duty in rows)


class _RowContext:
    def __init__(self, result: CalculationResult, part_number: str, cast_code: str, smelt_code: str) -> None:
        self._result = result
        self._part_number = part_number
        self._cast_code = cast_code
        self._smelt_code = smelt_code

    def row(
        self,
        outcomes: list[RuleLineOutcome],
        *,
        unit_price: float,
        entered_value: float,
        metal_row: bool,
    ) -> tuple[InvoiceRow, float]:
        groups = group_outcomes(outcomes)
        duty_owed = sum(group.amount for group in groups)
        result = self._result
        row = InvoiceRow(
            line_number=result.line_number,
            classification_code=strip_code_separators(result.classification_code),
            manufacturer_part_number=self._part_number,
            origin_country=result.origin_country,
            cast_country=self._cast_code if metal_row else "",
            smelt_country=self._smelt_code if metal_row else "",
            gross_weight_kg=format_weight(result.extended.total_metal_weight_kg) if metal_row else "",
            unit_price=format_money(unit_price),
            entered_value=format_money(entered_value),
            reference_codes=JOIN_SEPARATOR.join(group.reference_code for group in groups),
            descriptions=JOIN_SEPARATOR.join(group.description for group in groups if group.description),
            rates=JOIN_SEPARATOR.join(format_rate(group.rate_pct) for group in groups),
            duty_owed=format_money(duty_owed),
        )
        return row, duty_owed
