"""Waypoint — declarative client-side routing with redirect resolution.

Applications register a tree of route patterns and navigate by location
string.  Every navigation resolves redirects (one router-global rule plus
per-route rules) until the location is stable, with a bounded number of
steps and precise loop detection.

Basic usage::

    from waypoint import Router, RoutePattern

    router = Router(
        [
            RoutePattern("/", redirect=lambda state: "/family/f1"),
            RoutePattern("/family/:fid", name="family", builder=family_page),
        ],
        redirect=lambda state: None if session.logged_in else "/login",
    )

    resolution = router.go("/")
    resolution.location.full     # "/family/f1"
    resolution.state.params      # {"fid": "f1"}
"""

__version__ = "0.1.0-dev"
__all__ = [
    "ConfigurationError",
    "Location",
    "MatchStack",
    "MatchedRoute",
    "MissingBuilder",
    "NotFound",
    "Notifier",
    "QueryParams",
    "RedirectLimitExceeded",
    "RedirectLoopDetected",
    "RefreshChannel",
    "RefreshSignal",
    "Resolution",
    "ResolutionError",
    "RoutePattern",
    "RouteState",
    "Router",
    "RouterConfig",
    "RuleError",
    "WaypointError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import waypoint`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from waypoint.router import Router

        return Router

    if name == "RouterConfig":
        from waypoint.config import RouterConfig

        return RouterConfig

    if name == "Location":
        from waypoint.location import Location

        return Location

    if name == "QueryParams":
        from waypoint.http.query import QueryParams

        return QueryParams

    if name in ("RoutePattern", "MatchStack", "MatchedRoute"):
        from waypoint.routing import route as _route

        return getattr(_route, name)

    if name == "RouteState":
        from waypoint.routing.state import RouteState

        return RouteState

    if name == "Resolution":
        from waypoint.routing.resolver import Resolution

        return Resolution

    if name in ("Notifier", "RefreshChannel", "RefreshSignal"):
        from waypoint import refresh as _refresh

        return getattr(_refresh, name)

    if name in (
        "ConfigurationError",
        "MissingBuilder",
        "NotFound",
        "RedirectLimitExceeded",
        "RedirectLoopDetected",
        "ResolutionError",
        "RuleError",
        "WaypointError",
    ):
        from waypoint import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
