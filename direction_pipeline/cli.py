"""Command-line interface for direction-pipeline."""

import argparse
import logging
import sys

from direction_pipeline.agencies.config import AGENCY_NAMES
from direction_pipeline.api import convert, resolve_agency, split_feed, validate
from direction_pipeline.gtfs.models import ConvertConfig
from direction_pipeline.version import VERSION


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_service_ids(value: str) -> frozenset[str]:
    """Parse a comma-separated list of service ids."""
    service_ids = frozenset(part.strip() for part in value.split(",") if part.strip())
    if not service_ids:
        raise argparse.ArgumentTypeError("expected at least one service id")
    return service_ids


def _config_from_args(args: argparse.Namespace) -> ConvertConfig:
    return ConvertConfig(
        input_path=args.input,
        output_path=getattr(args, "output", ""),
        agency=args.agency,
        config_path=args.config,
        service_ids=args.service_ids,
    )


def cmd_convert(args: argparse.Namespace) -> int:
    """Execute convert command."""
    setup_logging(args.verbose)

    config = _config_from_args(args)

    try:
        manifest = convert(args.input, args.output, config)
        print("\nConversion successful!")
        print(f"Output: {args.output}")
        print(f"Stats: {manifest.stats}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        logging.exception("Conversion failed")
        return 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Execute validate command."""
    setup_logging(args.verbose)

    try:
        report = validate(args.input)
        if report.valid:
            print("\nValidation successful!")
            print(f"Stats: {report.stats}")
            if report.warnings:
                print(f"Warnings ({len(report.warnings)}):")
                for warning in report.warnings:
                    print(f"  - {warning}")
            return 0
        else:
            print(f"\nValidation failed with {len(report.errors)} errors:")
            for error in report.errors:
                print(f"  - {error}")
            return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        logging.exception("Validation failed")
        return 1


def cmd_classify(args: argparse.Namespace) -> int:
    """Execute classify command: print each trip's direction for one route."""
    setup_logging(args.verbose)

    config = _config_from_args(args)

    try:
        routes, _ = split_feed(args.input, resolve_agency(config), config.service_ids)
        route = next((r for r in routes if r.route_id == args.route), None)
        if route is None:
            print(f"Error: route {args.route} not found", file=sys.stderr)
            return 1

        print(f"Route {route.route_id} ({route.long_name}) #{route.color}")
        for direction in route.directions:
            print(
                f"  [{direction.direction_id}] {direction.label} -> {direction.headsign}: "
                f"{direction.trip_count} trips, {len(direction.stop_ids)} stops"
            )
        for trip in route.trips:
            print(f"  {trip.trip_id}\t{trip.reported.direction_id}\t{trip.reported.headsign}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        logging.exception("Classification failed")
        return 1


def _add_agency_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--agency",
        default="vernon",
        choices=AGENCY_NAMES,
        help="Embedded agency configuration (default: vernon)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="JSON agency configuration file, overrides --agency",
    )
    parser.add_argument(
        "--service-ids",
        type=parse_service_ids,
        default=None,
        help="Comma-separated useful service ids (default: keep all trips)",
    )


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="direction-gtfs",
        description="Split an agency's GTFS trips into rider-facing directions",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Convert command
    convert_parser = subparsers.add_parser("convert", help="Split GTFS trips and write JSON")
    convert_parser.add_argument("--input", required=True, help="Path to GTFS directory")
    convert_parser.add_argument(
        "--output",
        default="./direction_data",
        help="Output directory (default: ./direction_data)",
    )
    _add_agency_arguments(convert_parser)
    convert_parser.set_defaults(func=cmd_convert)

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate JSON output")
    validate_parser.add_argument("--input", required=True, help="Path to output directory")
    validate_parser.set_defaults(func=cmd_validate)

    # Classify command
    classify_parser = subparsers.add_parser("classify", help="Show direction split of one route")
    classify_parser.add_argument("--input", required=True, help="Path to GTFS directory")
    classify_parser.add_argument("--route", required=True, help="Route id (route short name)")
    _add_agency_arguments(classify_parser)
    classify_parser.set_defaults(func=cmd_classify)

    # Parse and execute
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
