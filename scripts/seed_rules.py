#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT / "packages" / "core" / "src"))

from tariffwizard_core.config import configure_logging, get_settings
from tariffwizard_core.rules.repository import load_duty_rules
from tariffwizard_core.rules.sql import SqlRuleRepository, create_engine_from_url, create_sessionmaker

logger = logging.getLogger("seed_rules")


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Load duty rules from JSON into the SQL rule store.")
    parser.add_argument("--rules", default=str(settings.rules_path), help="Path to the JSON rule file")
    parser.add_argument("--database-url", default=settings.database_url, help="SQLAlchemy database URL")
    args = parser.parse_args()

    configure_logging(settings.log_level)
    rules = load_duty_rules(Path(args.rules))
    engine = create_engine_from_url(args.database_url)
    repository = SqlRuleRepository(create_sessionmaker(engine))
    repository.create_schema()
    count = repository.add_rules(rules)
    line_count = sum(len(rule.lines) for rule in rules)
    logger.info("Seeded %d duty rules (%d lines) into %s", count, line_count, args.database_url)


if __name__ == "__main__":
    main()
