from __future__ import annotations

import re

JOIN_SEPARATOR = ", "

_CODE_SEPARATORS = re.compile(r"[.\-\s]")
_TRAILING_CODE = re.compile(r"\(([^)]+)\)\s*$")


def format_money(value: float) -> str:
    return f"{value:.2f}"


def format_weight(value: float) -> str:
    return f"{value:.3f}"


def format_rate(value: float) -> str:
    return f"{value:g}%"


def strip_code_separators(classification_code: str) -> str:
    return _CODE_SEPARATORS.sub("", classification_code)


def extract_country_code(country: str | None) -> str:
    """Return "TW" for "Taiwan (TW)"; plain values pass through trimmed."""
    if not country or not country.strip():
        return ""
    match = _TRAILING_CODE.search(country)
    return match.group(1).strip() if match else country.strip()
