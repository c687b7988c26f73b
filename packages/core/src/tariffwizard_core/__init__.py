from tariffwizard_core.engine.models import CalculationResult
from tariffwizard_core.errors import (
    InvalidInputError,
    PriceUnavailableError,
    RepositoryUnavailableError,
    TariffWizardError,
)
from tariffwizard_core.service import TariffService, build_service

__all__ = [
    "CalculationResult",
    "InvalidInputError",
    "PriceUnavailableError",
    "RepositoryUnavailableError",
    "TariffService",
    "TariffWizardError",
    "build_service",
]
