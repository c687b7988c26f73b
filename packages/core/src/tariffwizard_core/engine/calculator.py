from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Iterable, Mapping
from decimal import Decimal

from tariffwizard_core.engine.bases import build_breakdown, effective_rate_pct, evaluate_rule_lines, resolve_bases
from tariffwizard_core.engine.models import CalculationResult
from tariffwizard_core.engine.quantity import scale_breakdown, validate_quantity
from tariffwizard_core.errors import InvalidInputError
from tariffwizard_core.pricing.oracle import PriceOracle
from tariffwizard_core.rules.repository import RuleRepository
from tariffwizard_core.valuation.materials import build_declarations, value_materials

logger = logging.getLogger(__name__)


class TariffCalculator:
    def __init__(self, repository: RuleRepository, oracle: PriceOracle) -> None:
        self._repository = repository
        self._oracle = oracle

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
        code = _require_text(classification_code, "Classification code")
        origin = _require_text(origin_country, "Origin country").upper()
        full_value = _parse_unit_cost(unit_cost)
        quantity = validate_quantity(quantity)
        line = _parse_line_number(line_number)
        declarations = build_declarations(materials, material_weights_by_name)

        lines = await asyncio.to_thread(self._repository.find_active_rule_lines, code, origin)
        if not lines:
            logger.info("No active duty rule lines for %s from %s", code, origin)

        valuation = await value_materials(declarations, self._oracle)
        bases = resolve_bases(full_value, valuation.total_material_cost)
        outcomes = evaluate_rule_lines(lines, bases)
        per_unit = build_breakdown(bases, valuation, outcomes)

        return CalculationResult(
            classification_code=code,
            origin_country=origin,
            unit_cost=full_value,
            quantity=quantity,
            line_number=line,
            effective_tariff_rate_pct=effective_rate_pct(per_unit.total_tariff_amount, full_value),
            per_unit=per_unit,
            extended=scale_breakdown(per_unit, quantity),
        )


def _require_text(value: object, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{label} is required")
    return value.strip()


def _parse_unit_cost(value: object) -> float:
    if value is None or isinstance(value, bool):
        raise InvalidInputError("Product cost is required")
    if isinstance(value, (int, float, Decimal)):
        cost = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            cost = float(value.strip())
        except ValueError as exc:
            raise InvalidInputError(f"Product cost must be numeric, got {value!r}") from exc
    else:
        raise InvalidInputError(f"Product cost must be numeric, got {value!r}")
    if not math.isfinite(cost) or cost <= 0:
        raise InvalidInputError(f"Product cost must be a positive number, got {value!r}")
    return cost


def _parse_line_number(value: int | None) -> int:
    if value is None:
        return 1
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidInputError(f"Line number must be a positive integer, got {value!r}")
    return value
