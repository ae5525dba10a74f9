"""Waypoint CLI — route listing, resolution dry-runs, and tree checks.

Entry point registered as ``waypoint`` in ``pyproject.toml``::

    [project.scripts]
    waypoint = "waypoint.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``waypoint`` command."""
    parser = argparse.ArgumentParser(
        prog="waypoint",
        description="Waypoint — declarative routing with redirect resolution.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every resolution step to stderr",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- waypoint routes ---------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List the route tree")
    routes_parser.add_argument("router", help="Import string (e.g. myapp:router)")

    # -- waypoint resolve --------------------------------------------------
    resolve_parser = subparsers.add_parser(
        "resolve", help="Resolve a location and show the redirect chain"
    )
    resolve_parser.add_argument("router", help="Import string (e.g. myapp:router)")
    resolve_parser.add_argument(
        "location",
        nargs="?",
        default=None,
        help="Location to resolve (defaults to the router's initial location)",
    )

    # -- waypoint check ----------------------------------------------------
    check_parser = subparsers.add_parser("check", help="Check the route tree for problems")
    check_parser.add_argument("router", help="Import string (e.g. myapp:router)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.command == "routes":
        from waypoint.cli._routes import run_routes

        run_routes(args)
    elif args.command == "resolve":
        from waypoint.cli._navigate import run_resolve

        run_resolve(args)
    elif args.command == "check":
        from waypoint.cli._check import run_check

        run_check(args)
