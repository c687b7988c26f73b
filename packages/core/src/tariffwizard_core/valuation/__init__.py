from tariffwizard_core.valuation.materials import build_declarations, value_materials
from tariffwizard_core.valuation.models import MaterialDeclaration, MaterialValuation, PricedMaterial

__all__ = [
    "MaterialDeclaration",
    "MaterialValuation",
    "PricedMaterial",
    "build_declarations",
    "value_materials",
]
