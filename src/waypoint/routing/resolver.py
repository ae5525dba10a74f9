"""Resolver — drives matching and redirects until a location is stable.

State machine per pass::

    START -> MATCHING -> (REDIRECTING -> MATCHING)* -> DONE | FAILED

A pass is re-entered from START on every navigation or refresh; nothing
survives between passes except the frozen pattern tree.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from waypoint.errors import MissingBuilder, ResolutionError
from waypoint.location import Location
from waypoint.routing.guard import LoopGuard
from waypoint.routing.matcher import PathMatcher
from waypoint.routing.redirect import RedirectChain, RedirectTo
from waypoint.routing.route import MatchStack
from waypoint.routing.state import RouteState

if TYPE_CHECKING:
    from waypoint._internal.types import RedirectRule

logger = logging.getLogger("waypoint.resolver")


class Phase(Enum):
    """Phases of one resolution pass."""

    START = "start"
    MATCHING = "matching"
    REDIRECTING = "redirecting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class Resolution:
    """A successful pass: the final location and its match stack.

    ``redirects`` lists the locations redirected away from, in order; it
    is empty when the requested location was already final.
    """

    location: Location
    stack: MatchStack
    state: RouteState
    redirects: tuple[str, ...] = ()

    @property
    def redirected(self) -> bool:
        return bool(self.redirects)


class Resolver:
    """Turns a requested location into a ``Resolution`` or a failure.

    Usage::

        resolver = Resolver(matcher, redirect=require_login, redirect_limit=5)
        resolution = resolver.resolve("/settings")
        resolution.location.full  # "/login"

    Failures raise a ``ResolutionError`` subclass carrying the trace; no
    partial match stack is ever returned.
    """

    __slots__ = ("_chain", "_matcher", "_redirect_limit")

    def __init__(
        self,
        matcher: PathMatcher,
        *,
        redirect: "RedirectRule | None" = None,
        redirect_limit: int = 5,
    ) -> None:
        self._matcher = matcher
        self._chain = RedirectChain(matcher, redirect)
        self._redirect_limit = redirect_limit

    @property
    def matcher(self) -> PathMatcher:
        return self._matcher

    def resolve(self, location: Location | str, *, extra: Any = None) -> Resolution:
        """Run one full resolution pass for *location*."""
        current = Location.parse(location) if isinstance(location, str) else location
        guard = LoopGuard(self._redirect_limit)
        phase = Phase.START
        logger.debug("%s %r", phase.value, current.full)

        try:
            while True:
                phase = Phase.MATCHING
                step = self._chain.step(current, trace=guard.trace, extra=extra)

                if isinstance(step.outcome, RedirectTo):
                    phase = Phase.REDIRECTING
                    target = step.outcome.location
                    guard.record(current.full, target.full)
                    logger.debug(
                        "%s %r -> %r (rule %r)",
                        phase.value,
                        current.full,
                        target.full,
                        step.outcome.rule,
                    )
                    current = target
                    continue

                # NoRedirect: the chain only returns that after a successful match
                stack = step.stack
                assert stack is not None
                terminal = stack.terminal
                if terminal.pattern.builder is None:
                    raise MissingBuilder(
                        current.full,
                        guard.trace,
                        f"route {terminal.full_path!r} has no builder and did not redirect",
                    )

                phase = Phase.DONE
                logger.debug("%s %r after %d redirect(s)", phase.value, current.full, guard.steps)
                return Resolution(
                    location=current,
                    stack=stack,
                    state=step.state,
                    redirects=guard.trace,
                )
        except ResolutionError as exc:
            logger.debug("%s %s while %s", Phase.FAILED.value, exc.kind, phase.value)
            raise
