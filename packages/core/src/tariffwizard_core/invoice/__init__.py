from tariffwizard_core.invoice.formatting import extract_country_code, format_money, strip_code_separators
from tariffwizard_core.invoice.models import (
    AddendumSummary,
    CommoditySummary,
    DutySummary,
    DutySummaryEntry,
    GroupedDuty,
    InvoiceAddendum,
    InvoiceRow,
    InvoiceRows,
)
from tariffwizard_core.invoice.rows import build_invoice_addendum, build_invoice_rows
from tariffwizard_core.invoice.summary import build_duty_summary, group_outcomes

__all__ = [
    "AddendumSummary",
    "CommoditySummary",
    "DutySummary",
    "DutySummaryEntry",
    "GroupedDuty",
    "InvoiceAddendum",
    "InvoiceRow",
    "InvoiceRows",
    "build_duty_summary",
    "build_invoice_addendum",
    "build_invoice_rows",
    "extract_country_code",
    "format_money",
    "group_outcomes",
    "strip_code_separators",
]
