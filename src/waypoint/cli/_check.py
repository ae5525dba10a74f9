"""``waypoint check`` — route tree validation command.

Resolves an import string to a Router and runs the static route checks,
printing results to stdout.  Exits with code 1 if errors are found.
"""

import argparse

from waypoint.checks import check_routes
from waypoint.cli._resolve import load_router


def run_check(args: argparse.Namespace) -> None:
    """Validate the route tree of a waypoint Router."""
    router = load_router(args.router, compile_tree=False)
    result = check_routes(router.routes)
    print(result.summary())
    if not result.ok:
        raise SystemExit(1)
