"""Manual live check against a running restaurant service.

Run from the repository root with:
  PYTHONPATH=src BASE_URL=http://192.168.8.150:1988 DATA_DIR=/tmp/drawlots \
  python scripts/live_check.py

Add a restaurant before drawing:
  PYTHONPATH=src BASE_URL=... DATA_DIR=... \
    python scripts/live_check.py --add https://maps.app.goo.gl/abc --rating 2

Optional environment variables:
  API_URI   (defaults to "api")
  DATA_DIR  (defaults to ./drawlots-data)

Draws are recorded in the history document of DATA_DIR; pass --draws 0 to
only refresh.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from collections import Counter

from pydrawlots import Client, DrawLotsError
from pydrawlots.const import DEFAULT_API_URI, TIERS
from pydrawlots.models import Restaurant
from pydrawlots.selection import tier_distribution

_LOGGER = logging.getLogger(__name__)
_DEFAULT_DATA_DIR = "drawlots-data"


def _require_value(name: str, value: str | None) -> str:
    if not value:
        print(f"Missing required value: {name}", file=sys.stderr)
        raise SystemExit(2)
    return value


def _format_restaurant(restaurant: Restaurant) -> str:
    name = restaurant.name or "-"
    stars = "*" * restaurant.rating
    return f"{restaurant.id} | {stars:<3} | {name} | {restaurant.maps_url}"


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a restaurant service live check.")
    parser.add_argument("--base-url", dest="base_url", help="Service base URL.")
    parser.add_argument("--api-uri", dest="api_uri", help="Service API URI.")
    parser.add_argument("--data-dir", dest="data_dir", help="Directory for local documents.")
    parser.add_argument("--add", dest="add_url", help="Maps URL of a restaurant to add first.")
    parser.add_argument(
        "--rating",
        dest="rating",
        type=int,
        choices=TIERS,
        default=1,
        help="Tier for --add.",
    )
    parser.add_argument(
        "--draws",
        dest="draws",
        type=int,
        default=1,
        help="Number of draws to perform and record.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO).",
    )
    return parser.parse_args()


async def main() -> int:
    args = _parse_args()
    logging.basicConfig(level=args.log_level.upper())
    base_url = _require_value("BASE_URL", args.base_url or os.getenv("BASE_URL"))
    api_uri = args.api_uri or os.getenv("API_URI") or DEFAULT_API_URI
    data_dir = args.data_dir or os.getenv("DATA_DIR") or _DEFAULT_DATA_DIR

    async with Client(base_url=base_url, api_uri=api_uri, data_dir=data_dir) as client:
        store = client.store
        for issue in await store.load_local():
            _LOGGER.info("Local data: %s", issue)
        try:
            if args.add_url:
                await store.add_restaurant(args.add_url, args.rating)
            else:
                await store.refresh_from_remote()
        except DrawLotsError as exc:
            print(f"Remote error: {exc.__class__.__name__}: {exc}", file=sys.stderr)
            print("Continuing with the local mirror.", file=sys.stderr)

        restaurants = store.restaurants
        print(f"Restaurants: {len(restaurants)}")
        for restaurant in restaurants:
            print(f"- {_format_restaurant(restaurant)}")
        expected = tier_distribution(restaurants)
        print("Expected tier share: " + ", ".join(f"{t}: {expected[t]:.1%}" for t in TIERS))

        picked: Counter[int] = Counter()
        try:
            for _ in range(max(0, args.draws)):
                selection = await client.engine.select()
                if selection is None:
                    print("No restaurants available.")
                    break
                picked[selection.restaurant.rating] += 1
                if args.draws == 1:
                    print(f"Selected: {_format_restaurant(selection.restaurant)}")
        except DrawLotsError as exc:
            print(f"Error: {exc.__class__.__name__}: {exc}", file=sys.stderr)
            return 1
        if sum(picked.values()) > 1:
            total = sum(picked.values())
            print("Drawn tier share: " + ", ".join(f"{t}: {picked[t] / total:.1%}" for t in TIERS))
        print(f"History records: {len(store.history)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
