"""Path matching over the route pattern tree.

Matching is a depth-first walk in registration order: at each level the
first child whose segments consume a prefix of the remaining path, and
whose subtree consumes the rest, wins.  Declaration order is the only
tie-break, so ``/users/new`` registered before ``/users/:id`` shadows it
for that one path and never the other way round.
"""

import logging
from collections.abc import Sequence
from urllib.parse import unquote

from waypoint.errors import ConfigurationError, NotFound
from waypoint.location import Location
from waypoint.routing.route import (
    MatchedRoute,
    MatchStack,
    PathSegment,
    RoutePattern,
    frozen_params,
    join_paths,
)

logger = logging.getLogger("waypoint.matcher")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path template into segments.

    Examples::

        "/"               -> []
        "/users"          -> [PathSegment("users")]
        "family/:fid"     -> [PathSegment("family"), PathSegment(":fid", is_param=True, ...)]
        "/files/*rest"    -> [PathSegment("files"), PathSegment("*rest", ..., catch_all=True)]
    """
    segments: list[PathSegment] = []
    parts = [part for part in path.strip("/").split("/") if part]
    for i, part in enumerate(parts):
        if part.startswith("{") and part.endswith("}"):
            msg = (
                f"Route path {path!r} uses {{param}} syntax. "
                f"Waypoint expects :param segments, e.g. ':{part[1:-1]}'."
            )
            raise ConfigurationError(msg)
        if part.startswith(":"):
            name = part[1:]
            if not name.isidentifier():
                msg = f"Invalid parameter name {name!r} in route path {path!r}."
                raise ConfigurationError(msg)
            segments.append(PathSegment(value=part, is_param=True, param_name=name))
        elif part.startswith("*"):
            if i != len(parts) - 1:
                msg = f"Catch-all segment {part!r} must be the last segment of {path!r}."
                raise ConfigurationError(msg)
            name = part[1:] or "path"
            if not name.isidentifier():
                msg = f"Invalid catch-all name {name!r} in route path {path!r}."
                raise ConfigurationError(msg)
            segments.append(
                PathSegment(value=part, is_param=True, param_name=name, catch_all=True)
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


def _validate(
    pattern: RoutePattern,
    parent_path: str,
    bound: tuple[str, ...],
    names: dict[str, str],
    *,
    top_level: bool,
) -> None:
    """Check one subtree: path anchoring, unique params, unique names."""
    if top_level and not pattern.path.startswith("/"):
        msg = f"Top-level route path {pattern.path!r} must start with '/'."
        raise ConfigurationError(msg)
    if not top_level and pattern.path.startswith("/"):
        msg = (
            f"Child route path {pattern.path!r} under {parent_path!r} must be "
            "relative (no leading '/')."
        )
        raise ConfigurationError(msg)

    full_path = join_paths(parent_path, pattern.path)

    for param in pattern.param_names:
        if param in bound:
            msg = f"Duplicate path parameter {param!r} in {full_path!r}."
            raise ConfigurationError(msg)
    bound = bound + pattern.param_names

    if pattern.has_catch_all and pattern.routes:
        msg = f"Route {full_path!r} ends in a catch-all and cannot have child routes."
        raise ConfigurationError(msg)

    if pattern.name is not None:
        if pattern.name in names:
            msg = (
                f"Duplicate route name {pattern.name!r}: "
                f"{names[pattern.name]!r} and {full_path!r}."
            )
            raise ConfigurationError(msg)
        names[pattern.name] = full_path

    for child in pattern.routes:
        _validate(child, full_path, bound, names, top_level=False)


class PathMatcher:
    """Matches sub-locations against a frozen route pattern tree.

    Usage::

        matcher = PathMatcher([
            RoutePattern("/", builder=home, routes=[
                RoutePattern("family/:fid", builder=family),
            ]),
        ])
        stack = matcher.match("/family/f1")
        stack.terminal.params  # {"fid": "f1"}

    The tree is validated once on construction; ``match`` never mutates it.
    """

    __slots__ = ("_names", "_routes")

    def __init__(self, routes: Sequence[RoutePattern]) -> None:
        if not routes:
            msg = "At least one route must be registered."
            raise ConfigurationError(msg)
        names: dict[str, str] = {}
        for pattern in routes:
            _validate(pattern, "", (), names, top_level=True)
        self._routes: tuple[RoutePattern, ...] = tuple(routes)
        self._names: dict[str, str] = names

    @property
    def routes(self) -> tuple[RoutePattern, ...]:
        return self._routes

    @property
    def names(self) -> dict[str, str]:
        """Route name -> full path template."""
        return dict(self._names)

    def full_path_for(self, name: str) -> str:
        """Return the full path template of the route called *name*."""
        try:
            return self._names[name]
        except KeyError:
            msg = f"No route named {name!r}."
            raise ConfigurationError(msg) from None

    def match(self, location: Location | str) -> MatchStack:
        """Match a location's path against the tree.

        Returns the ``MatchStack`` for the first full match in declaration
        order.  Raises ``NotFound`` if nothing consumes the whole path.
        The query component is ignored.
        """
        if isinstance(location, str):
            location = Location.parse(location)
        parts = [p for p in location.sub_location.strip("/").split("/") if p]

        for pattern in self._routes:
            stack = self._match_pattern(pattern, "", parts, 0, {}, ())
            if stack is not None:
                return MatchStack(stack)

        logger.debug("no route matches %r", location.sub_location)
        raise NotFound(location.full)

    def _match_pattern(
        self,
        pattern: RoutePattern,
        parent_path: str,
        parts: list[str],
        index: int,
        params: dict[str, str],
        stack: tuple[MatchedRoute, ...],
    ) -> tuple[MatchedRoute, ...] | None:
        """Recursively match *pattern* and its subtree against ``parts[index:]``."""
        consumed = _consume(pattern.segments, parts, index)
        if consumed is None:
            return None
        index, bound = consumed
        params = {**params, **bound}

        full_path = join_paths(parent_path, pattern.path)
        matched = MatchedRoute(
            pattern=pattern,
            full_path=full_path,
            sub_location="/" + "/".join(parts[:index]),
            params=frozen_params(params),
        )
        stack = (*stack, matched)

        # All parts consumed: this pattern is the terminal match
        if index == len(parts):
            return stack

        for child in pattern.routes:
            result = self._match_pattern(child, full_path, parts, index, params, stack)
            if result is not None:
                return result

        return None


def _consume(
    segments: tuple[PathSegment, ...],
    parts: list[str],
    index: int,
) -> tuple[int, dict[str, str]] | None:
    """Consume *segments* from ``parts[index:]``.

    Returns the new index and the parameters bound along the way, or
    ``None`` if the segments do not fit.
    """
    bound: dict[str, str] = {}
    for seg in segments:
        if seg.catch_all:
            if index >= len(parts):
                return None
            bound[seg.param_name or "path"] = unquote("/".join(parts[index:]))
            return len(parts), bound
        if index >= len(parts):
            return None
        part = parts[index]
        if seg.is_param:
            bound[seg.param_name or ""] = unquote(part)
        elif seg.value != part:
            return None
        index += 1
    return index, bound
