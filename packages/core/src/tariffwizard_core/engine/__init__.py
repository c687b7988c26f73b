from tariffwizard_core.engine.bases import effective_rate_pct, evaluate_rule_lines, resolve_bases
from tariffwizard_core.engine.calculator import TariffCalculator
from tariffwizard_core.engine.models import CalculationResult, RuleLineOutcome, TariffBreakdown, ValueBases
from tariffwizard_core.engine.quantity import scale_breakdown, validate_quantity

__all__ = [
    "CalculationResult",
    "RuleLineOutcome",
    "TariffBreakdown",
    "TariffCalculator",
    "ValueBases",
    "effective_rate_pct",
    "evaluate_rule_lines",
    "resolve_bases",
    "scale_breakdown",
    "validate_quantity",
]
