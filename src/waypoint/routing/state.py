"""RouteState — the read-only context handed to redirect rules and builders."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from waypoint.http.query import QueryParams
from waypoint.location import Location
from waypoint.routing.route import MatchedRoute


def _no_params() -> Mapping[str, str]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class RouteState:
    """Context for one resolution step.

    The global redirect rule sees a state built from the location alone
    (no path parameters, no route name).  A route's own redirect rule and
    its builder see the state of the terminal match.

    Attributes:
        location: Full location, path plus query.
        sub_location: Path only.
        params: Path parameters bound from the root to the terminal match.
        query: Query parameters; a name may be absent.
        name: Name of the matched route, if it has one.
        full_path: Full path template of the matched route.
        extra: Opaque payload passed to ``Router.go()``; never inspected.
    """

    location: str
    sub_location: str
    params: Mapping[str, str] = field(default_factory=_no_params)
    query: QueryParams = field(default_factory=QueryParams)
    name: str | None = None
    full_path: str | None = None
    extra: Any = None

    @classmethod
    def for_location(cls, location: Location, extra: Any = None) -> "RouteState":
        return cls(
            location=location.full,
            sub_location=location.sub_location,
            query=location.query_params,
            extra=extra,
        )

    @classmethod
    def for_match(
        cls, location: Location, matched: MatchedRoute, extra: Any = None
    ) -> "RouteState":
        return cls(
            location=location.full,
            sub_location=location.sub_location,
            params=matched.params,
            query=location.query_params,
            name=matched.pattern.name,
            full_path=matched.full_path,
            extra=extra,
        )
