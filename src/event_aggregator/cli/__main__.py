"""CLI entry point: python -m event_aggregator.cli {search,populate}"""

import argparse
import asyncio
import sys

import httpx
import structlog
from pydantic import ValidationError

from event_aggregator.aggregation.factory import build_aggregator
from event_aggregator.config.settings import get_settings
from event_aggregator.db.engine import create_tables, get_engine
from event_aggregator.db.session import get_session_factory
from event_aggregator.logging_config import configure_logging
from event_aggregator.models.search import MAX_PAGE_SIZE, SearchRequest, UserPreferences
from event_aggregator.persistence.sink import store_events


def _positive_float(text: str) -> float:
    value = float(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {text}")
    return value


def _non_negative_int(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or greater, got {text}")
    return value


def _page_size(text: str) -> int:
    value = int(text)
    if not 1 <= value <= MAX_PAGE_SIZE:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_PAGE_SIZE}, got {text}")
    return value


def _build_request(args: argparse.Namespace) -> SearchRequest:
    return SearchRequest(
        keyword=args.keyword,
        location=args.location,
        radius=args.radius,
        page=getattr(args, "page", 0),
        size=getattr(args, "size", 20),
        sort=getattr(args, "sort", "relevance"),
        preferences=UserPreferences(
            favorite_categories=args.category or [],
            price_preference=getattr(args, "price", "any"),
            time_preference=getattr(args, "time", "any"),
        ),
    )


async def run_search(request: SearchRequest) -> int:
    """Print one page of results as JSON; exit code 1 when the envelope has an error."""
    settings = get_settings()
    async with httpx.AsyncClient(follow_redirects=True) as client:
        aggregator = build_aggregator(settings, client)
        envelope = await aggregator.aggregate(request)

    print(envelope.model_dump_json(by_alias=True, indent=2))
    return 1 if envelope.error else 0


async def run_populate(request: SearchRequest) -> int:
    """Aggregate every surviving event for a location and upsert it."""
    log = structlog.get_logger()
    settings = get_settings()

    async with httpx.AsyncClient(follow_redirects=True) as client:
        aggregator = build_aggregator(settings, client)
        ranked = await aggregator.rank(request)

    if ranked.error:
        log.error("populate_failed", error=ranked.error)
        return 1

    await create_tables(get_engine())
    written = await store_events(get_session_factory(), ranked.events)
    log.info(
        "populate_complete",
        location=str(request.location),
        events=len(ranked.events),
        written=written,
        sources=ranked.sources,
    )
    return 0


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("location", help='City, address or "lat, lng"')
    parser.add_argument("--keyword", "-k", default=None, help="Search keyword")
    parser.add_argument(
        "--radius",
        type=_positive_float,
        default=25.0,
        help="Search radius in miles (default: 25)",
    )
    parser.add_argument(
        "--category",
        action="append",
        help="Favourite category to boost (repeatable)",
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="event_aggregator.cli",
        description="Event Aggregator CLI",
    )
    subparsers = parser.add_subparsers(dest="command")

    search_parser = subparsers.add_parser("search", help="Search events and print JSON")
    _add_common(search_parser)
    search_parser.add_argument("--page", type=_non_negative_int, default=0, help="Zero-based page")
    search_parser.add_argument("--size", type=_page_size, default=20, help="Page size")
    search_parser.add_argument(
        "--sort",
        default="relevance",
        choices=["relevance", "date", "distance", "price", "popularity", "alphabetical"],
    )
    search_parser.add_argument("--price", default="any", choices=["free", "paid", "any"])
    search_parser.add_argument(
        "--time", default="any", choices=["morning", "afternoon", "evening", "any"]
    )

    populate_parser = subparsers.add_parser(
        "populate", help="Aggregate events for a location and store them in the database"
    )
    _add_common(populate_parser)

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    settings = get_settings()
    # stdout carries the JSON result
    configure_logging(
        json_output=settings.log_json, log_level=settings.log_level, stream=sys.stderr
    )
    try:
        request = _build_request(args)
    except ValidationError as e:
        parser.error(str(e))

    if args.command == "search":
        sys.exit(asyncio.run(run_search(request)))
    if args.command == "populate":
        sys.exit(asyncio.run(run_populate(request)))


if __name__ == "__main__":
    main()
