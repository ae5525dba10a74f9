"""Router configuration.

RouterConfig is a frozen dataclass validated on construction, so a bad
redirect limit fails before any navigation happens.
"""

from dataclasses import dataclass

from waypoint.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(redirect_limit=10, debug_log_diagnostics=True)
    """

    # Resolution
    redirect_limit: int = 5  # Redirects allowed per pass before failing
    initial_location: str = "/"  # Resolved on the first navigation if go() was never called

    # Diagnostics: log every resolution step at INFO on "waypoint.router"
    debug_log_diagnostics: bool = False

    def __post_init__(self) -> None:
        if (
            isinstance(self.redirect_limit, bool)
            or not isinstance(self.redirect_limit, int)
            or self.redirect_limit < 1
        ):
            msg = f"redirect_limit must be a positive integer, got {self.redirect_limit!r}"
            raise ConfigurationError(msg)
        if not self.initial_location.startswith("/"):
            msg = f"initial_location must start with '/', got {self.initial_location!r}"
            raise ConfigurationError(msg)
