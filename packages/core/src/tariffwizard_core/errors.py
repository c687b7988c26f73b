from __future__ import annotations


class TariffWizardError(Exception):
    """Base error for tariff calculation failures."""


class InvalidInputError(TariffWizardError):
    """Raised when a calculation request is missing or has malformed fields."""


class PriceUnavailableError(TariffWizardError):
    """Raised when no live, cached or fallback price exists for a commodity."""


class RepositoryUnavailableError(TariffWizardError):
    """Raised when the duty rule store cannot be read."""
