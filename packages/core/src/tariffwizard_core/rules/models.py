from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ValueBasis(str, Enum):
    FULL_VALUE = "FullValue"
    REMAINDER_VALUE = "RemainderValue"
    METAL_CONTENT_VALUE = "MetalContentValue"


class RuleLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    reference_code: str
    rate_pct: float = Field(ge=0)
    value_basis: ValueBasis
    description: str = ""
    is_active: bool = True

    @field_validator("rate_pct", mode="before")
    @classmethod
    def _parse_rate(cls, value: object) -> object:
        # Seed data stores rates as "7.5%".
        if isinstance(value, str):
            cleaned = value.strip().rstrip("%").strip()
            return float(cleaned) if cleaned else 0.0
        return value


class DutyRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_number: int
    classification_code: str
    origin_country: str
    rule_type: str = "Simple"
    is_active: bool = True
    lines: list[RuleLine] = Field(default_factory=list)

    def matches(self, classification_code: str, origin_country: str) -> bool:
        return (
            self.classification_code.strip() == classification_code.strip()
            and self.origin_country.strip().upper() == origin_country.strip().upper()
        )
