"""Load a Router for the CLI from a ``"package.module:attribute"`` string."""

import importlib
import logging
import sys

from waypoint.errors import ConfigurationError
from waypoint.router import Router

logger = logging.getLogger("waypoint.cli")

DEFAULT_ATTRIBUTE = "router"


def resolve_router(import_string: str) -> Router:
    """Import the Router named by *import_string*.

    ``"myapp.nav"`` looks up ``myapp.nav.router``; ``"myapp.nav:main"``
    looks up ``myapp.nav.main``.  When the target is a callable rather
    than a Router it is taken as a factory and called once without
    arguments.

    Import and lookup errors propagate unchanged.  ``ValueError`` is
    raised for an empty module part and ``TypeError`` when the target
    (or what its factory returns) is not a Router.
    """
    module_name, _, attribute = import_string.partition(":")
    if not module_name:
        msg = f"{import_string!r} names no module; expected 'package.module[:attribute]'"
        raise ValueError(msg)

    target = getattr(importlib.import_module(module_name), attribute or DEFAULT_ATTRIBUTE)

    if not isinstance(target, Router) and callable(target):
        try:
            target = target()
        except Exception as exc:
            msg = f"router factory {import_string!r} failed with {type(exc).__name__}: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(target, Router):
        msg = f"{import_string!r} is a {type(target).__name__}, not a waypoint.Router instance"
        raise TypeError(msg)
    return target


def load_router(import_string: str, *, compile_tree: bool = True) -> Router:
    """Resolve a router for a subcommand, exiting with status 1 on any error.

    With *compile_tree* the route tree is validated up front, so an
    invalid tree is reported here instead of halfway through a command.
    """
    try:
        router = resolve_router(import_string)
        if compile_tree:
            names = router.matcher.names
            logger.debug("loaded %s with %d named route(s)", import_string, len(names))
    except (ImportError, AttributeError, ValueError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    return router
