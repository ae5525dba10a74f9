"""RedirectChain — decides whether one resolution step redirects.

Order per step:

1. The router-global rule, with a state built from the location alone.
   A returned location wins and matching is skipped for this step.
2. Path matching.
3. The terminal match's own rule, if it has one.  Ancestors' rules are
   never consulted; they only apply when that ancestor is itself the
   destination.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from waypoint.errors import NotFound, RuleError
from waypoint.location import Location
from waypoint.routing.matcher import PathMatcher
from waypoint.routing.route import MatchStack
from waypoint.routing.state import RouteState

if TYPE_CHECKING:
    from waypoint._internal.types import RedirectRule

logger = logging.getLogger("waypoint.resolver")

GLOBAL_RULE = "global"


@dataclass(frozen=True, slots=True)
class NoRedirect:
    """The current location is final for this step."""


@dataclass(frozen=True, slots=True)
class RedirectTo:
    """Follow a redirect to ``location``; ``rule`` names who asked."""

    location: Location
    rule: str = GLOBAL_RULE


RedirectOutcome = NoRedirect | RedirectTo

NO_REDIRECT = NoRedirect()


@dataclass(frozen=True, slots=True)
class Step:
    """Result of one redirect-chain step.

    ``stack`` is ``None`` only when the global rule redirected before
    matching was attempted.
    """

    outcome: RedirectOutcome
    state: RouteState
    stack: MatchStack | None = None


class RedirectChain:
    """Applies the global rule, then the terminal route's rule.

    Usage::

        chain = RedirectChain(matcher, redirect=require_login)
        step = chain.step(Location.parse("/settings"))
        if isinstance(step.outcome, RedirectTo):
            ...
    """

    __slots__ = ("_matcher", "_redirect")

    def __init__(self, matcher: PathMatcher, redirect: "RedirectRule | None" = None) -> None:
        self._matcher = matcher
        self._redirect = redirect

    def step(
        self,
        location: Location,
        *,
        trace: tuple[str, ...] = (),
        extra: Any = None,
    ) -> Step:
        """Run one step for *location*.

        Raises ``NotFound`` (with *trace*) when no route matches and
        ``RuleError`` when a rule raises or returns something other than
        a string or ``None``.
        """
        state = RouteState.for_location(location, extra)

        if self._redirect is not None:
            target = _invoke(self._redirect, state, GLOBAL_RULE, location, trace)
            if target is not None:
                return Step(outcome=RedirectTo(target, GLOBAL_RULE), state=state)

        try:
            stack = self._matcher.match(location)
        except NotFound:
            raise NotFound(location.full, trace) from None

        terminal = stack.terminal
        state = RouteState.for_match(location, terminal, extra)

        rule = terminal.pattern.redirect
        if rule is not None:
            rule_id = terminal.pattern.name or terminal.full_path
            target = _invoke(rule, state, rule_id, location, trace)
            if target is not None:
                return Step(outcome=RedirectTo(target, rule_id), state=state, stack=stack)

        return Step(outcome=NO_REDIRECT, state=state, stack=stack)


def _invoke(
    rule: Callable[[RouteState], str | None],
    state: RouteState,
    rule_id: str,
    location: Location,
    trace: tuple[str, ...],
) -> Location | None:
    """Call a redirect rule, turning its failures into ``RuleError``."""
    try:
        result = rule(state)
    except Exception as exc:
        raise RuleError(
            location=location.full,
            trace=trace,
            detail=f"redirect rule {rule_id!r} raised {type(exc).__name__}: {exc}",
            rule=rule_id,
        ) from exc

    if result is None or result == "":
        return None
    if not isinstance(result, str):
        raise RuleError(
            location=location.full,
            trace=trace,
            detail=(
                f"redirect rule {rule_id!r} returned {type(result).__name__}, "
                "expected a location string or None"
            ),
            rule=rule_id,
        )
    logger.debug("rule %r redirects %r -> %r", rule_id, location.full, result)
    return Location.parse(result)
