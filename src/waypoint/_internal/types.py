"""Shared type aliases used across waypoint modules."""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from waypoint.routing.state import RouteState

# Redirect rule: pure function of RouteState returning a new location or None
RedirectRule: TypeAlias = Callable[["RouteState"], str | None]

# Page builder: opaque to the core; the rendering layer decides what it takes
Builder: TypeAlias = Callable[..., Any]

# Refresh callback: invoked by a RefreshSignal with no arguments
RefreshCallback: TypeAlias = Callable[[], None]
