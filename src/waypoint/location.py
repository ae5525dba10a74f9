"""Location strings — a path plus an optional query.

Locations are canonicalized once on parse so that equality checks in the
loop guard compare like with like: ``/users/`` and ``/users`` are the same
location, ``#fragments`` are dropped, and an empty ``?`` disappears.
"""

from dataclasses import dataclass
from urllib.parse import urlencode

from waypoint.http.query import QueryParams


def canonical_path(path: str) -> str:
    """Normalize a path: leading ``/`` guaranteed, trailing ``/`` stripped.

    Examples::

        ""          -> "/"
        "users"     -> "/users"
        "/users/"   -> "/users"
        "/"         -> "/"
    """
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


@dataclass(frozen=True, slots=True)
class Location:
    """A canonical location: ``path`` plus raw ``query`` (no leading ``?``).

    ``full`` is what the loop guard compares and what navigation reports.
    ``sub_location`` is the path alone, which is all the matcher sees.
    """

    path: str = "/"
    query: str = ""

    @classmethod
    def parse(cls, location: str) -> "Location":
        """Parse and canonicalize a location string."""
        location = location.strip()
        location, _, _fragment = location.partition("#")
        path, _, query = location.partition("?")
        return cls(path=canonical_path(path), query=query)

    @classmethod
    def build(cls, path: str, query: dict[str, str | list[str]] | None = None) -> "Location":
        """Build a location from a path and a query mapping."""
        return cls(path=canonical_path(path), query=urlencode(query, doseq=True) if query else "")

    @property
    def full(self) -> str:
        if self.query:
            return f"{self.path}?{self.query}"
        return self.path

    @property
    def sub_location(self) -> str:
        return self.path

    @property
    def query_params(self) -> QueryParams:
        return QueryParams(self.query)

    def __str__(self) -> str:
        return self.full
