"""LoopGuard — bounds one resolution pass and reports cycles precisely."""

from typing import TypeAlias

from waypoint.errors import RedirectLimitExceeded, RedirectLoopDetected

# Locations redirected away from during one pass, in order
ResolutionTrace: TypeAlias = tuple[str, ...]


class LoopGuard:
    """Tracks the redirects taken during one resolution pass.

    ``record()`` is called before each redirect is followed.  A target
    already in the trace is a loop; that check runs first so a cycle is
    reported as a cycle and not as a generic limit failure.  Otherwise the
    pass fails once the number of redirects taken reaches ``limit``, so a
    chain of ``k`` redirects succeeds iff ``k < limit``.

    A guard lives for exactly one pass and is discarded with it.
    """

    __slots__ = ("_limit", "_trace")

    def __init__(self, limit: int = 5) -> None:
        if limit < 1:
            msg = f"limit must be positive, got {limit}"
            raise ValueError(msg)
        self._limit = limit
        self._trace: list[str] = []

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def trace(self) -> ResolutionTrace:
        return tuple(self._trace)

    @property
    def steps(self) -> int:
        """Number of redirects recorded so far."""
        return len(self._trace)

    def record(self, current: str, target: str) -> None:
        """Record a redirect from *current* to *target*.

        Raises ``RedirectLoopDetected`` or ``RedirectLimitExceeded``.
        """
        self._trace.append(current)

        if target in self._trace:
            raise RedirectLoopDetected(target, self.trace)

        if len(self._trace) >= self._limit:
            raise RedirectLimitExceeded(location=target, trace=self.trace, limit=self._limit)
