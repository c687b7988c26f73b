from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Iterable, Mapping

from tariffwizard_core.errors import InvalidInputError, PriceUnavailableError
from tariffwizard_core.pricing.models import normalize_commodity
from tariffwizard_core.pricing.oracle import PriceOracle
from tariffwizard_core.valuation.models import MaterialDeclaration, MaterialValuation, PricedMaterial

logger = logging.getLogger(__name__)


def build_declarations(
    materials: Iterable[str],
    weights_by_name: Mapping[str, object] | None = None,
) -> list[MaterialDeclaration]:
    """Pair declared material names with their per-item weights.

    Names are matched case-insensitively. A name listed twice yields a single
    declaration; when the weight map holds several spellings of one name the
    last one wins.
    """
    weights: dict[str, float | None] = {}
    for raw_name, raw_weight in (weights_by_name or {}).items():
        weights[_clean_name(raw_name)] = _parse_weight(raw_name, raw_weight)
    declarations: list[MaterialDeclaration] = []
    seen: set[str] = set()
    for raw_name in materials:
        name = _clean_name(raw_name)
        if name in seen:
            continue
        seen.add(name)
        declarations.append(MaterialDeclaration(name=name, weight_kg=weights.get(name)))
    return declarations


async def value_materials(
    declarations: Iterable[MaterialDeclaration],
    oracle: PriceOracle,
    quantity_unit: str = "per item",
) -> MaterialValuation:
    items = list(declarations)
    priced = await asyncio.gather(*(_price_material(item, oracle) for item in items))
    total_cost = sum(material.cost for material in priced)
    total_weight = sum(material.weight_kg for material in priced if material.contributes_metal_content)
    return MaterialValuation(
        materials=list(priced),
        total_material_cost=total_cost,
        total_metal_weight_kg=total_weight,
        quantity_unit=quantity_unit,
    )


async def _price_material(declaration: MaterialDeclaration, oracle: PriceOracle) -> PricedMaterial:
    weight = declaration.weight_kg or 0.0
    if not oracle.is_tracked(declaration.name):
        logger.debug("Material %s is not a tracked commodity; valued at zero", declaration.name)
        return PricedMaterial(name=declaration.name, weight_kg=weight)
    if weight <= 0:
        return PricedMaterial(name=declaration.name, weight_kg=0.0, tracked=True)
    try:
        quote = await oracle.get_quote(declaration.name)
    except PriceUnavailableError as exc:
        logger.warning("Material %s left unpriced: %s", declaration.name, exc)
        return PricedMaterial(name=declaration.name, weight_kg=weight, tracked=True)
    return PricedMaterial(
        name=declaration.name,
        weight_kg=weight,
        unit_price=quote.price,
        cost=quote.price * weight,
        tracked=True,
        price_source=quote.source,
    )


def _clean_name(raw_name: object) -> str:
    if not isinstance(raw_name, str) or not raw_name.strip():
        raise InvalidInputError(f"Material names must be non-empty strings, got {raw_name!r}")
    return normalize_commodity(raw_name)


def _parse_weight(name: object, raw_weight: object) -> float | None:
    if raw_weight is None or raw_weight == "":
        return None
    if isinstance(raw_weight, bool):
        raise InvalidInputError(f"Weight for {name} must be a number")
    try:
        weight = float(raw_weight)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Weight for {name} must be a number, got {raw_weight!r}") from exc
    if not math.isfinite(weight) or weight < 0:
        raise InvalidInputError(f"Weight for {name} must be a non-negative number, got {raw_weight!r}")
    return weight
