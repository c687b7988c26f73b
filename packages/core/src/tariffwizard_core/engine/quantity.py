from __future__ import annotations

from tariffwizard_core.engine.models import TariffBreakdown
from tariffwizard_core.errors import InvalidInputError


def validate_quantity(quantity: object) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidInputError(f"Quantity must be a positive integer, got {quantity!r}")
    if quantity < 1:
        raise InvalidInputError(f"Quantity must be at least 1, got {quantity}")
    return quantity


def scale_breakdown(breakdown: TariffBreakdown, quantity: int) -> TariffBreakdown:
    """Turn a per-unit breakdown into the line-item total for ``quantity`` units.

    Rates and per-kg prices are intensive and stay as they are. Material
    weights scale with costs so ``cost == unit_price * weight_kg`` still holds.
    """
    quantity = validate_quantity(quantity)
    return breakdown.model_copy(
        update={
            "full_value": breakdown.full_value * quantity,
            "remainder_value": breakdown.remainder_value * quantity,
            "metal_content_value": breakdown.metal_content_value * quantity,
            "total_metal_weight_kg": breakdown.total_metal_weight_kg * quantity,
            "materials": [
                material.model_copy(
                    update={
                        "weight_kg": material.weight_kg * quantity,
                        "cost": material.cost * quantity,
                    }
                )
                for material in breakdown.materials
            ],
            "outcomes": [
                outcome.model_copy(
                    update={
                        "basis_value": outcome.basis_value * quantity,
                        "amount": outcome.amount * quantity,
                    }
                )
                for outcome in breakdown.outcomes
            ],
            "total_tariff_amount": breakdown.total_tariff_amount * quantity,
            "final_landed_cost": breakdown.final_landed_cost * quantity,
        }
    )
