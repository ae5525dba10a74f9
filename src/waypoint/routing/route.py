"""RoutePattern, PathSegment, MatchedRoute, and MatchStack."""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from waypoint._internal.types import Builder, RedirectRule


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:     ``users``   (is_param=False)
    Param:      ``:id``     (is_param=True, param_name="id")
    Catch-all:  ``*rest``   (is_param=True, param_name="rest", catch_all=True)
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    catch_all: bool = False


@dataclass(frozen=True, slots=True, eq=False)
class RoutePattern:
    """A frozen node of the route tree.

    Top-level patterns start with ``/``; child patterns are relative to
    their parent (``family/:fid`` under ``/``).  A pattern needs a
    ``builder`` to be a navigation destination; a pattern with only a
    ``redirect`` must always redirect when it is the terminal match.

    Usage::

        RoutePattern(
            "/",
            builder=home,
            routes=[
                RoutePattern("family/:fid", name="family", builder=family),
            ],
        )

    Equality is identity: two patterns are the same only if they are the
    same registered object.
    """

    path: str
    builder: "Builder | None" = None
    name: str | None = None
    redirect: "RedirectRule | None" = None
    routes: tuple["RoutePattern", ...] = ()
    segments: tuple[PathSegment, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        from waypoint.routing.matcher import parse_path

        object.__setattr__(self, "routes", tuple(self.routes))
        object.__setattr__(self, "segments", tuple(parse_path(self.path)))

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(s.param_name for s in self.segments if s.param_name is not None)

    @property
    def has_catch_all(self) -> bool:
        return bool(self.segments) and self.segments[-1].catch_all

    def walk(self, parent_path: str = "") -> Iterator[tuple["RoutePattern", str, int]]:
        """Yield ``(pattern, full_path, depth)`` for this node and its subtree."""
        yield from _walk(self, parent_path, 0)


def _walk(
    pattern: RoutePattern, parent_path: str, depth: int
) -> Iterator[tuple[RoutePattern, str, int]]:
    full_path = join_paths(parent_path, pattern.path)
    yield pattern, full_path, depth
    for child in pattern.routes:
        yield from _walk(child, full_path, depth + 1)


def join_paths(parent: str, child: str) -> str:
    """Join a parent full path and a child template.

    Examples::

        join_paths("", "/")               -> "/"
        join_paths("/", "family/:fid")    -> "/family/:fid"
        join_paths("/family/:fid", "person/:pid") -> "/family/:fid/person/:pid"
    """
    if not parent or child.startswith("/"):
        return child
    if parent.endswith("/"):
        return parent + child
    return f"{parent}/{child}"


@dataclass(frozen=True, slots=True)
class MatchedRoute:
    """One element of a match stack.

    ``params`` holds every path parameter bound from the root down to
    and including this pattern.  ``sub_location`` is the portion of the
    path consumed so far.
    """

    pattern: RoutePattern
    full_path: str
    sub_location: str
    params: Mapping[str, str]


@dataclass(frozen=True, slots=True)
class MatchStack:
    """Ordered matches from the tree root to the terminal pattern.

    Each pattern is the parent of the next one; the last element is the
    navigation destination and the only one eligible for its own redirect.
    """

    matches: tuple[MatchedRoute, ...]

    def __post_init__(self) -> None:
        if not self.matches:
            msg = "A MatchStack needs at least one match."
            raise ValueError(msg)

    @classmethod
    def of(cls, matches: Iterable[MatchedRoute]) -> "MatchStack":
        return cls(tuple(matches))

    @property
    def terminal(self) -> MatchedRoute:
        return self.matches[-1]

    @property
    def params(self) -> Mapping[str, str]:
        return self.terminal.params

    @property
    def patterns(self) -> tuple[RoutePattern, ...]:
        return tuple(m.pattern for m in self.matches)

    def __iter__(self) -> Iterator[MatchedRoute]:
        return iter(self.matches)

    def __len__(self) -> int:
        return len(self.matches)

    def __getitem__(self, index: int) -> MatchedRoute:
        return self.matches[index]


def frozen_params(params: Mapping[str, str]) -> Mapping[str, str]:
    """Return a read-only view over a copy of *params*."""
    return MappingProxyType(dict(params))
