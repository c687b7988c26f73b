from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import orjson
from pydantic import ValidationError

from tariffwizard_core.errors import RepositoryUnavailableError
from tariffwizard_core.rules.models import DutyRule, RuleLine

if TYPE_CHECKING:
    from tariffwizard_core.config import Settings

logger = logging.getLogger(__name__)


class RuleRepository(Protocol):
    def find_active_rule_lines(
        self,
        classification_code: str,
        origin_country: str,
    ) -> list[RuleLine]:
        ...


class InMemoryRuleRepository:
    def __init__(self, rules: Iterable[DutyRule] = ()) -> None:
        self._rules = list(rules)

    @property
    def rules(self) -> list[DutyRule]:
        return list(self._rules)

    def find_active_rule_lines(
        self,
        classification_code: str,
        origin_country: str,
    ) -> list[RuleLine]:
        lines: list[RuleLine] = []
        for rule in self._rules:
            if not rule.is_active or not rule.matches(classification_code, origin_country):
                continue
            lines.extend(line for line in rule.lines if line.is_active)
        return lines


class JsonRuleRepository:
    def __init__(self, path: Path) -> None:
        self._path = path
        self._delegate: InMemoryRuleRepository | None = None

    def find_active_rule_lines(
        self,
        classification_code: str,
        origin_country: str,
    ) -> list[RuleLine]:
        if self._delegate is None:
            self._delegate = InMemoryRuleRepository(load_duty_rules(self._path))
        return self._delegate.find_active_rule_lines(classification_code, origin_country)


def load_duty_rules(path: Path) -> list[DutyRule]:
    try:
        payload = orjson.loads(path.read_bytes())
    except OSError as exc:
        raise RepositoryUnavailableError(f"Cannot read duty rules from {path}: {exc}") from exc
    except orjson.JSONDecodeError as exc:
        raise RepositoryUnavailableError(f"Duty rules file {path} is not valid JSON") from exc
    if isinstance(payload, dict):
        payload = payload.get("rules", [])
    if not isinstance(payload, list):
        raise RepositoryUnavailableError(f"Duty rules file {path} must hold a list of rules")
    try:
        rules = [DutyRule.model_validate(entry) for entry in payload]
    except ValidationError as exc:
        raise RepositoryUnavailableError(f"Duty rules file {path} has invalid records") from exc
    logger.info("Loaded %d duty rules from %s", len(rules), path)
    return rules


def build_rule_repository(settings: Settings) -> RuleRepository:
    if settings.rules_source == "sql":
        from tariffwizard_core.rules.sql import SqlRuleRepository, create_engine_from_url, create_sessionmaker

        engine = create_engine_from_url(settings.database_url)
        return SqlRuleRepository(create_sessionmaker(engine))
    return JsonRuleRepository(settings.rules_path)
