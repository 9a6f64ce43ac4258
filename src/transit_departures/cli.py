"""Command-line front end for stop search and departure lookups."""

import argparse
import asyncio
import json
import sys
from typing import Any

import aiohttp

from transit_departures.adapters.config import AppConfig
from transit_departures.domain.errors import TransitDeparturesError
from transit_departures.domain.models.stop_departures import StopDepartures
from transit_departures.domain.models.stop_info import StopInfo
from transit_departures.main import configure_logging, create_departure_service


def _print_stops(stops: list[StopInfo], as_json: bool, empty_message: str) -> None:
    if as_json:
        print(json.dumps([stop.to_dict() for stop in stops], indent=2, ensure_ascii=False))
        return
    if not stops:
        print(empty_message, file=sys.stderr)
        return
    print(f"\nFound {len(stops)} stop(s):\n")
    for stop in stops:
        lines = ", ".join(stop.line_hints) or "-"
        modes = ", ".join(stop.transport_modes) or "-"
        print(f"  {stop.name}")
        print(f"    ID: {stop.id}  Modes: {modes}  Lines: {lines}")
        print()


def _print_departures(result: StopDepartures, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return
    if result.stop is None:
        print("Stop not found.", file=sys.stderr)
        return
    print(f"\nDepartures from {result.stop.name} ({result.stop.id}):\n")
    if not result.departures:
        print("  No upcoming departures.")
    for departure in result.departures:
        marker = "*" if departure.is_realtime else " "
        print(
            f"  {departure.minutes_until_departure:>3} min{marker} "
            f"{departure.line:<6} {departure.destination}  [{departure.stop_name}]"
        )
    print()


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be zero or more, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Transit departures lookup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search for stops
  transit-departures search "Hôtel de Ville"

  # Stops near a coordinate
  transit-departures nearby 49.4431 1.0993

  # Next departures of a stop, only lines T1 and F1
  transit-departures departures TCAR:1234 --lines T1 F1

  # Next departures of a Cityway logical stop
  transit-departures logical-departures 5678
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    search_parser = subparsers.add_parser("search", help="Search stops by name, id or code")
    search_parser.add_argument("query", help="Text to search for")
    search_parser.add_argument(
        "--limit", type=_non_negative_int, default=20, help="Maximum results"
    )
    search_parser.add_argument("--json", action="store_true", help="Output as JSON")

    nearby_parser = subparsers.add_parser("nearby", help="Stops near a coordinate")
    nearby_parser.add_argument("lat", type=float, help="Latitude")
    nearby_parser.add_argument("lon", type=float, help="Longitude")
    nearby_parser.add_argument(
        "--limit", type=_non_negative_int, default=20, help="Maximum results"
    )
    nearby_parser.add_argument("--json", action="store_true", help="Output as JSON")

    for name, id_type, id_help in (
        ("departures", str, "Feed stop ID (e.g., TCAR:1234 or CITYWAY:logical:5678)"),
        ("logical-departures", int, "Cityway logical stop ID"),
    ):
        departures_parser = subparsers.add_parser(name, help=f"Next departures ({id_help})")
        departures_parser.add_argument("stop_id", type=id_type, help=id_help)
        departures_parser.add_argument(
            "--limit", type=_non_negative_int, default=8, help="Maximum departures"
        )
        departures_parser.add_argument(
            "--max-minutes", type=_non_negative_int, default=90, help="Look-ahead window in minutes"
        )
        departures_parser.add_argument("--lines", nargs="*", default=[], help="Only these lines")
        departures_parser.add_argument("--json", action="store_true", help="Output as JSON")

    return parser


async def run_command(args: argparse.Namespace, config: AppConfig) -> Any:
    """Execute one CLI command against a freshly wired service."""
    timeout = aiohttp.ClientTimeout(total=config.http_timeout_seconds)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        service = create_departure_service(config, session)

        if args.command == "search":
            stops = await service.search_stops(args.query, args.limit)
            _print_stops(stops, args.json, f"No stops found for '{args.query}'")
            return stops

        if args.command == "nearby":
            stops = await service.search_nearby(args.lat, args.lon, args.limit)
            _print_stops(stops, args.json, "No stops nearby")
            return stops

        if args.command == "departures":
            result = await service.get_departures(
                args.stop_id, args.limit, args.max_minutes, args.lines
            )
        else:
            result = await service.get_departures_for_logical_stop(
                args.stop_id, args.limit, args.max_minutes, args.lines
            )
        _print_departures(result, args.json)
        return result


async def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = AppConfig()
    configure_logging(config.log_level)

    try:
        await run_command(args, config)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(1)
    except TransitDeparturesError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cli_main() -> None:
    """Synchronous entry point for the CLI command."""
    asyncio.run(main())


if __name__ == "__main__":
    cli_main()
