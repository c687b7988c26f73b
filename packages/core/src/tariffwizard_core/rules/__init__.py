from tariffwizard_core.rules.models import DutyRule, RuleLine, ValueBasis
from tariffwizard_core.rules.repository import (
    InMemoryRuleRepository,
    JsonRuleRepository,
    RuleRepository,
    build_rule_repository,
    load_duty_rules,
)

__all__ = [
    "DutyRule",
    "InMemoryRuleRepository",
    "JsonRuleRepository",
    "RuleLine",
    "RuleRepository",
    "ValueBasis",
    "build_rule_repository",
    "load_duty_rules",
]
