from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from tariffwizard_core.pricing.models import PriceSource


class MaterialDeclaration(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    weight_kg: float | None = None


class PricedMaterial(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    weight_kg: float = 0.0
    unit_price: float | None = None
    cost: float = 0.0
    tracked: bool = False
    price_source: PriceSource | None = None

    @property
    def contributes_metal_content(self) -> bool:
        return self.tracked and self.weight_kg > 0


class MaterialValuation(BaseModel):
    model_config = ConfigDict(frozen=True)

    materials: list[PricedMaterial] = Field(default_factory=list)
    total_material_cost: float = 0.0
    total_metal_weight_kg: float = 0.0
    quantity_unit: str = "per item"
