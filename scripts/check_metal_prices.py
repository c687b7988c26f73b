#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

import orjson

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT / "packages" / "core" / "src"))

from tariffwizard_core.config import configure_logging, get_settings
from tariffwizard_core.service import build_oracle


async def _run(refresh: bool) -> dict:
    oracle = build_oracle(get_settings())
    prices = await (oracle.refresh_prices() if refresh else oracle.get_all_prices())
    # Second pass shows the cache serving the prices just fetched.
    second = await oracle.get_all_prices()
    status = {name: entry.model_dump() for name, entry in oracle.get_cache_status().items()}
    return {"prices": prices, "cached_prices": second, "cache_status": status}


def main() -> None:
    parser = argparse.ArgumentParser(description="Fetch tracked metal prices and show the price cache.")
    parser.add_argument("--refresh", action="store_true", help="Clear the cache before fetching")
    args = parser.parse_args()

    configure_logging()
    report = asyncio.run(_run(args.refresh))
    sys.stdout.write(orjson.dumps(report, option=orjson.OPT_INDENT_2).decode() + "\n")


if __name__ == "__main__":
    main()
