"""Waypoint router.

Mutable during setup (route registration).
Frozen on first navigation, when the pattern tree is validated and compiled.
"""

import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from waypoint.config import RouterConfig
from waypoint.errors import ConfigurationError, ResolutionError
from waypoint.location import Location
from waypoint.routing.matcher import PathMatcher, parse_path
from waypoint.routing.resolver import Resolution, Resolver
from waypoint.routing.route import RoutePattern

if TYPE_CHECKING:
    from waypoint._internal.types import Builder, RedirectRule
    from waypoint.refresh import RefreshSignal

logger = logging.getLogger("waypoint.router")

Listener = Callable[[Resolution], Any]


class Router:
    """The waypoint router.

    Mutable during setup (route registration).  Frozen on the first call
    to ``go()``, ``resolve()``, ``refresh()`` or ``location_for()``.

    Usage::

        router = Router(
            [
                RoutePattern("/", redirect=lambda state: "/family/f1"),
                RoutePattern("/family/:fid", name="family", builder=family_page),
            ],
            redirect=require_login,
            refresh=session,
        )
        resolution = router.go("/")
        resolution.location.full  # "/family/f1"

    Concurrency:
        One resolution pass runs at a time.  A ``go()`` or ``refresh()``
        arriving while a pass is active (from a listener, a rule, or
        another thread) is coalesced: the request is remembered, the call
        returns ``None``, and the active caller runs one more pass against
        the most recently requested location when its pass finishes.
    """

    __slots__ = (
        "_active",
        "_current",
        "_extra",
        "_freeze_lock",
        "_frozen",
        "_listeners",
        "_matcher",
        "_pending",
        "_pending_routes",
        "_redirect",
        "_requested",
        "_resolver",
        "_state_lock",
        "_unsubscribe",
        "config",
    )

    def __init__(
        self,
        routes: Sequence[RoutePattern] = (),
        config: RouterConfig | None = None,
        *,
        redirect: "RedirectRule | None" = None,
        refresh: "RefreshSignal | None" = None,
    ) -> None:
        self.config: RouterConfig = config or RouterConfig()
        self._pending_routes: list[RoutePattern] = list(routes)
        self._redirect = redirect
        self._listeners: list[Listener] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._matcher: PathMatcher | None = None
        self._resolver: Resolver | None = None

        # Navigation state, guarded by _state_lock
        self._state_lock: threading.Lock = threading.Lock()
        self._active: bool = False
        self._pending: bool = False
        self._requested: Location | None = None
        self._extra: Any = None
        self._current: Resolution | None = None

        # Only the unsubscribe handle is kept; the signal's owner controls it
        self._unsubscribe: Callable[[], None] | None = (
            refresh.subscribe(self.refresh) if refresh is not None else None
        )

    # -- Route registration --

    def add(self, pattern: RoutePattern) -> None:
        """Register a top-level route pattern (with its subtree)."""
        self._check_not_frozen()
        self._pending_routes.append(pattern)

    def route(
        self,
        path: str,
        *,
        name: str | None = None,
        redirect: "RedirectRule | None" = None,
    ) -> Callable[["Builder"], "Builder"]:
        """Register a top-level route via decorator.

        Args:
            path: Path template, e.g. ``"/family/:fid"``.
            name: Optional route name for ``location_for()``.
            redirect: Optional rule consulted when this route is the
                navigation destination.
        """

        def decorator(builder: "Builder") -> "Builder":
            self.add(RoutePattern(path, builder=builder, name=name, redirect=redirect))
            return builder

        return decorator

    # -- Introspection --

    @property
    def routes(self) -> tuple[RoutePattern, ...]:
        """Top-level patterns in registration order."""
        return tuple(self._pending_routes)

    @property
    def matcher(self) -> PathMatcher:
        self._ensure_frozen()
        assert self._matcher is not None
        return self._matcher

    @property
    def current(self) -> Resolution | None:
        """The last successful resolution, or ``None`` before the first one."""
        return self._current

    @property
    def location(self) -> str | None:
        """Full location of the current resolution."""
        if self._current is None:
            return None
        return self._current.location.full

    # -- Named routes --

    def location_for(
        self,
        name: str,
        params: Mapping[str, str] | None = None,
        query: Mapping[str, str | list[str]] | None = None,
    ) -> str:
        """Build a location from a route name.

        Substitutes ``:param`` and catch-all segments of the route's full
        path with url-encoded values from *params* and appends *query*.

        Raises ``ConfigurationError`` for an unknown name or a missing
        parameter.
        """
        full_path = self.matcher.full_path_for(name)
        params = params or {}
        parts: list[str] = []
        for seg in parse_path(full_path):
            if not seg.is_param:
                parts.append(seg.value)
                continue
            try:
                value = str(params[seg.param_name or ""])
            except KeyError:
                msg = f"Route {name!r} ({full_path}) needs parameter {seg.param_name!r}."
                raise ConfigurationError(msg) from None
            parts.append(quote(value, safe="/" if seg.catch_all else ""))
        return Location.build("/" + "/".join(parts), dict(query) if query else None).full

    # -- Navigation --

    def resolve(self, location: str, *, extra: Any = None) -> Resolution:
        """Run a resolution pass without navigating.

        Nothing is recorded and no listener is called.
        """
        self._ensure_frozen()
        assert self._resolver is not None
        return self._resolver.resolve(location, extra=extra)

    def go(self, location: str, *, extra: Any = None) -> Resolution | None:
        """Navigate to *location*.

        Returns the new ``Resolution``, or ``None`` when the request was
        coalesced into a pass already running.  Raises the pass's
        ``ResolutionError`` on failure, after any request coalesced in the
        meantime has been resolved; a failed pass leaves the previous
        resolution current.
        """
        self._ensure_frozen()
        with self._state_lock:
            self._requested = Location.parse(location)
            self._extra = extra
        return self._schedule()

    def go_named(
        self,
        name: str,
        params: Mapping[str, str] | None = None,
        query: Mapping[str, str | list[str]] | None = None,
        *,
        extra: Any = None,
    ) -> Resolution | None:
        """Navigate to the route called *name*."""
        return self.go(self.location_for(name, params, query), extra=extra)

    def start(self) -> Resolution | None:
        """Navigate to ``config.initial_location``."""
        return self.go(self.config.initial_location)

    def refresh(self) -> Resolution | None:
        """Resolve the last requested location again.

        A no-op before the first navigation.  Refresh signals call this.
        """
        with self._state_lock:
            if self._requested is None:
                return None
        self._ensure_frozen()
        return self._schedule()

    def _schedule(self) -> Resolution | None:
        """Run passes until no request is pending (coalescing entry point).

        A failed pass does not drop a request coalesced while it ran: the
        pending pass still runs, and the first failure is raised once the
        queue is empty.
        """
        with self._state_lock:
            if self._active:
                self._pending = True
                return None
            self._active = True
            self._pending = False

        resolution: Resolution | None = None
        failure: ResolutionError | None = None
        try:
            while True:
                try:
                    resolution = self._run_pass()
                except ResolutionError as exc:
                    if failure is None:
                        failure = exc
                with self._state_lock:
                    if not self._pending:
                        self._active = False
                        break
                    self._pending = False
        except BaseException:
            with self._state_lock:
                self._active = False
                self._pending = False
            raise

        if failure is not None:
            raise failure
        return resolution

    def _run_pass(self) -> Resolution:
        with self._state_lock:
            location = self._requested
            extra = self._extra
        assert location is not None and self._resolver is not None

        self._log("going to %s", location.full)
        try:
            resolution = self._resolver.resolve(location, extra=extra)
        except ResolutionError as exc:
            logger.warning("navigation to %r failed: %s", location.full, exc)
            raise

        if resolution.redirected:
            for hop in (*resolution.redirects[1:], resolution.location.full):
                self._log("redirecting to %s", hop)
        self._current = resolution
        self._notify(resolution)
        return resolution

    # -- Listeners --

    def add_listener(self, listener: Listener) -> None:
        """Call *listener* with every successful resolution from ``go()``/``refresh()``."""
        with self._state_lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        with self._state_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, resolution: Resolution) -> None:
        with self._state_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(resolution)
            except Exception:
                logger.exception("navigation listener %r failed", listener)

    def close(self) -> None:
        """Unsubscribe from the refresh signal, if any."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # -- Freeze --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the pattern tree into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        matcher = PathMatcher(self._pending_routes)
        self._matcher = matcher
        self._resolver = Resolver(
            matcher,
            redirect=self._redirect,
            redirect_limit=self.config.redirect_limit,
        )
        self._frozen = True
        logger.debug("router frozen with %d top-level route(s)", len(self._pending_routes))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the router after navigation has started. "
                "Register routes before calling go(), resolve() or refresh()."
            )
            raise RuntimeError(msg)

    def _log(self, msg: str, *args: Any) -> None:
        level = logging.INFO if self.config.debug_log_diagnostics else logging.DEBUG
        logger.log(level, msg, *args)
