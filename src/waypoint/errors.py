"""Waypoint exception hierarchy.

Shared across the matcher, redirect chain, resolver, and router so every
module raises and catches the same types.
"""

from dataclasses import dataclass
from typing import ClassVar


class WaypointError(Exception):
    """Base for all waypoint-specific errors."""


class ConfigurationError(WaypointError):
    """Raised when the route tree or router configuration is invalid.

    Typically raised while registering routes or during ``Router._freeze()``.
    """


@dataclass(frozen=True, slots=True)
class ResolutionError(WaypointError):
    """A resolution pass ended in failure.

    Raised by the resolver and surfaced unchanged by ``Router.go()``.
    Every failure carries the locations visited during the pass, in
    order, so the caller can see how it got there.
    """

    location: str
    trace: tuple[str, ...] = ()
    detail: str = ""

    kind: ClassVar[str] = "resolution_error"

    def __str__(self) -> str:
        text = f"{self.kind}: {self.location!r}"
        if self.detail:
            text = f"{text} — {self.detail}"
        if self.trace:
            text = f"{text} (trace: {' -> '.join(self.trace)})"
        return text


class NotFound(ResolutionError):  # noqa: N818
    """No route pattern matches the location."""

    kind = "not_found"

    def __init__(self, location: str, trace: tuple[str, ...] = (), detail: str = "") -> None:
        super().__init__(
            location=location,
            trace=trace,
            detail=detail or "no route matches this location",
        )


class MissingBuilder(ResolutionError):  # noqa: N818
    """The terminal route matched but has no builder and did not redirect."""

    kind = "missing_builder"

    def __init__(self, location: str, trace: tuple[str, ...] = (), detail: str = "") -> None:
        super().__init__(location=location, trace=trace, detail=detail)


@dataclass(frozen=True, slots=True)
class RedirectLimitExceeded(ResolutionError):  # noqa: N818
    """The pass took as many redirects as the configured limit allows."""

    limit: int = 0

    kind = "redirect_limit_exceeded"

    def __str__(self) -> str:
        return (
            f"{self.kind}: too many redirects (limit {self.limit}) "
            f"while resolving {self.location!r} (trace: {' -> '.join(self.trace)})"
        )


class RedirectLoopDetected(ResolutionError):  # noqa: N818
    """A redirect targeted a location already visited in this pass.

    ``trace`` holds the visited locations; ``location`` is the repeated
    target.  ``chain`` joins the two for display: ``("/", "/foo", "/")``.
    """

    kind = "redirect_loop_detected"

    def __init__(self, location: str, trace: tuple[str, ...]) -> None:
        super().__init__(location=location, trace=trace, detail="redirect loop")

    @property
    def chain(self) -> tuple[str, ...]:
        return (*self.trace, self.location)

    def __str__(self) -> str:
        return f"{self.kind}: {' => '.join(self.chain)}"


@dataclass(frozen=True, slots=True)
class RuleError(ResolutionError):  # noqa: N818
    """An application-supplied redirect rule raised.

    ``rule`` is ``"global"`` for the router-level rule, otherwise the
    route's name or full path.  The original exception is chained as
    ``__cause__``.
    """

    rule: str = "global"

    kind = "rule_error"
