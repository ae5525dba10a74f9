"""``waypoint resolve`` — dry-run a navigation.

Prints the redirect chain, the final location, and the match stack, or
the failure kind and its trace.  Exits with code 1 on failure.
"""

import argparse

from waypoint.cli._resolve import load_router
from waypoint.errors import RedirectLoopDetected, ResolutionError


def run_resolve(args: argparse.Namespace) -> None:
    """Resolve a location against a router without navigating."""
    router = load_router(args.router)
    location = args.location or router.config.initial_location

    try:
        resolution = router.resolve(location)
    except ResolutionError as exc:
        print(f"FAILED {exc.kind}: {exc.location}")
        chain = exc.chain if isinstance(exc, RedirectLoopDetected) else exc.trace
        if chain:
            print(f"  trace: {' -> '.join(chain)}")
        if exc.detail:
            print(f"  {exc.detail}")
        raise SystemExit(1) from exc

    for hop in resolution.redirects:
        print(f"  {hop} ->")
    print(resolution.location.full)
    for matched in resolution.stack:
        params = ", ".join(f"{k}={v}" for k, v in matched.params.items())
        suffix = f"  [{params}]" if params else ""
        print(f"  {matched.full_path}{suffix}")
