import argparse
import sys

from nightsky import __version__
from nightsky.cli import commands
from nightsky.engine.types import LOD_PRESETS


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to config TOML file")
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=["debug", "info", "warn", "error"],
        help="Enable logging at the given level",
    )
    parser.add_argument("--json", action="store_true", help="Output result as JSON")


def _add_request_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--planet", required=True, help="Planet id")
    parser.add_argument("--host-star", dest="host_star", required=True, help="Host star id")
    parser.add_argument("--time", dest="time_utc", help="Instant (ISO 8601, default now, UTC if no offset)")
    parser.add_argument("--lat", dest="latitude_deg", type=float, help="Observer latitude (deg)")
    parser.add_argument("--lon", dest="longitude_deg", type=float, help="Observer longitude (deg)")
    parser.add_argument("--radius", dest="radius_ly", type=float, help="Search radius (ly)")
    parser.add_argument("--max-mag", dest="max_magnitude", type=float, help="Faintest apparent magnitude")
    parser.add_argument("--max-stars", dest="max_stars", type=int, help="Maximum stars returned")
    parser.add_argument("--lod", choices=sorted(LOD_PRESETS), help="Level of detail")
    parser.add_argument("--dataset", help="Star dataset name")
    parser.add_argument(
        "--no-atmosphere",
        dest="no_atmosphere",
        action="store_true",
        help="Disable atmospheric extinction",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nightsky")
    parser.add_argument("--version", action="store_true", help="Show version and exit")

    subparsers = parser.add_subparsers(dest="command")

    doctor_parser = subparsers.add_parser("doctor", help="Run system diagnostics")
    _add_common_args(doctor_parser)

    sky_parser = subparsers.add_parser("sky", help="Compute the night sky for an observer")
    _add_common_args(sky_parser)
    _add_request_args(sky_parser)
    sky_parser.add_argument("--show", type=int, default=25, help="Rows to print in text mode")

    night_parser = subparsers.add_parser("is-night", help="Report whether the host star is down")
    _add_common_args(night_parser)
    _add_request_args(night_parser)

    time_parser = subparsers.add_parser("time", help="Show Julian date and local sidereal time")
    _add_common_args(time_parser)
    time_parser.add_argument("--time", dest="time_utc", help="Instant (ISO 8601, default now)")
    time_parser.add_argument("--lon", dest="longitude_deg", type=float, help="Longitude (deg)")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"nightsky {__version__}")
        return 0

    if args.command == "doctor":
        return commands.run_doctor(args)
    if args.command == "sky":
        return commands.run_sky(args)
    if args.command == "is-night":
        return commands.run_is_night(args)
    if args.command == "time":
        return commands.run_time(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
