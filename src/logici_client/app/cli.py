"""Command-line entry point: search listings and look up cities.

Usage:
    logici-client search --location Pune --min-size 1000 --max-size 5000
    logici-client cities pun
"""

import argparse
import asyncio
import logging

from logici_client.app.config import get_settings
from logici_client.domain.contracts import Filter
from logici_client.domain.enums import StorageType
from logici_client.infra.http import ApiClient
from logici_client.services.city_suggestions import CitySuggestionClient
from logici_client.services.warehouse_search import WarehouseResults

logger = logging.getLogger(__name__)


async def search(filter: Filter, page: int) -> int:
    async with ApiClient() as client:
        results = WarehouseResults(client, filter)
        results.pagination.page = max(1, page)
        await results.refresh()

        print(results.summary_text)
        for warehouse in results.warehouses:
            print(f"  [{warehouse.id}] {results.card_title(warehouse)}  (₹{warehouse.rent:g}/sq ft)")
        if results.pages:
            print(f"\nPage {results.pagination.page} of {results.pages}")
    return 0


async def cities(query: str) -> int:
    async with ApiClient() as client:
        suggestions = await CitySuggestionClient(client).fetch(query)
    if not suggestions:
        print("No matching cities.")
        return 1
    for city in suggestions:
        print(city)
    return 0


def _filter_from_args(args: argparse.Namespace) -> Filter:
    params = {
        "location": args.location or "",
        "min_size": args.min_size or "",
        "max_size": args.max_size or "",
        "min_rent": args.min_rent or "",
        "max_rent": args.max_rent or "",
        "warehouse_type": args.type or "",
    }
    filter = Filter.from_query_params(params)
    if filter == Filter():
        return Filter(fetch_all=True)
    return filter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="logici-client", description="Warehouse marketplace client")
    sub = parser.add_subparsers(dest="command", required=True)

    search_cmd = sub.add_parser("search", help="List warehouses matching a filter")
    search_cmd.add_argument("--location", help="City or area to search in")
    search_cmd.add_argument("--min-size", help="Minimum built-up area (sq ft)")
    search_cmd.add_argument("--max-size", help="Maximum built-up area (sq ft)")
    search_cmd.add_argument("--min-rent", help="Minimum rent per sq ft")
    search_cmd.add_argument("--max-rent", help="Maximum rent per sq ft")
    search_cmd.add_argument("--type", choices=[t.value for t in StorageType], help="Storage type")
    search_cmd.add_argument("--page", type=int, default=1)

    cities_cmd = sub.add_parser("cities", help="Suggest cities for a partial name")
    cities_cmd.add_argument("query")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=logging.INFO if settings.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.command == "search":
        return asyncio.run(search(_filter_from_args(args), args.page))
    return asyncio.run(cities(args.query))


if __name__ == "__main__":
    raise SystemExit(main())
