from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from tariffwizard_core.rules.models import ValueBasis


class GroupedDuty(BaseModel):
    model_config = ConfigDict(frozen=True)

    reference_code: str
    description: str
    rate_pct: float
    value_bases: list[ValueBasis] = Field(default_factory=list)
    amount: float


class DutySummaryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    reference_code: str
    description: str
    rate: str
    value_bases: list[ValueBasis] = Field(default_factory=list)
    amount: str


class CommoditySummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    material: str
    weight_kg: str
    unit_price: str | None = None
    cast_country: str
    smelt_country: str


class DutySummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    line_number: int
    classification_code: str
    origin_country: str
    quantity: int
    duties: list[DutySummaryEntry] = Field(default_factory=list)
    commodities: list[CommoditySummary] = Field(default_factory=list)
    total_duty: str
    effective_rate: str


class InvoiceRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    line_number: int
    classification_code: str
    manufacturer_part_number: str = ""
    origin_country: str
    cast_country: str = ""
    smelt_country: str = ""
    gross_weight_kg: str = ""
    unit_price: str
    entered_value: str
    reference_codes: str = ""
    descriptions: str = ""
    rates: str = ""
    duty_owed: str


class InvoiceRows(BaseModel):
    model_config = ConfigDict(frozen=True)

    invoice_rows: list[InvoiceRow] = Field(default_factory=list)
    total_duties: str


class AddendumSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_products: int
    total_product_cost: str
    total_tariff_amount: str
    total_final_cost: str


class InvoiceAddendum(BaseModel):
    model_config = ConfigDict(frozen=True)

    report_id: str
    invoice_rows: list[InvoiceRow] = Field(default_factory=list)
    total_duties: str
    summary: AddendumSummary
