#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

import orjson

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT / "packages" / "core" / "src"))

from tariffwizard_core.config import configure_logging
from tariffwizard_core.errors import TariffWizardError
from tariffwizard_core.service import build_service


def _parse_material(raw: str) -> tuple[str, str | None]:
    name, _, weight = raw.partition("=")
    return name, weight or None


async def _run(args: argparse.Namespace) -> bytes:
    service = build_service()
    materials = [_parse_material(raw) for raw in args.material]
    names = [name for name, _ in materials]
    weights = {name: weight for name, weight in materials}
    if args.output == "rows":
        rows = await service.build_invoice_rows(
            args.code,
            args.country,
            args.cost,
            names,
            weights,
            args.quantity,
            args.line,
            manufacturer_part_number=args.part_number,
            cast_country=args.cast_country,
            smelt_country=args.smelt_country,
        )
        payload = rows.model_dump(mode="json")
    else:
        result = await service.calculate(args.code, args.country, args.cost, names, weights, args.quantity, args.line)
        if args.output == "summary":
            summary = service.build_duty_summary(result, args.cast_country, args.smelt_country)
            payload = summary.model_dump(mode="json")
        else:
            payload = result.model_dump(mode="json")
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2)


def main() -> None:
    parser = argparse.ArgumentParser(description="Estimate import duties for one invoice line.")
    parser.add_argument("--code", required=True, help="Classification code, e.g. 8544421000")
    parser.add_argument("--country", required=True, help="Country of origin code, e.g. TW")
    parser.add_argument("--cost", required=True, help="Declared unit cost")
    parser.add_argument("--quantity", type=int, default=1)
    parser.add_argument("--line", type=int, default=None, help="Invoice line number")
    parser.add_argument(
        "--material",
        action="append",
        default=[],
        help="Material and per-item weight in kg, e.g. copper=0.25 (repeatable)",
    )
    parser.add_argument("--part-number", default=None)
    parser.add_argument("--cast-country", default=None)
    parser.add_argument("--smelt-country", default=None)
    parser.add_argument("--output", default="result", choices=["result", "summary", "rows"])
    args = parser.parse_args()

    configure_logging()
    try:
        output = asyncio.run(_run(args))
    except TariffWizardError as exc:
        sys.stderr.write(f"error: {exc}\n")
        sys.exit(1)
    sys.stdout.write(output.decode() + "\n")


if __name__ == "__main__":
    main()
