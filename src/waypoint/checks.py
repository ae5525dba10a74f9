"""Static route-tree checks.

Redirect rules are arbitrary functions, so whether a builder-less route is
ever a dead end cannot be decided statically.  These checks catch what
can be seen from the tree alone and back the ``waypoint check`` command.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from waypoint.errors import ConfigurationError
from waypoint.routing.matcher import PathMatcher
from waypoint.routing.route import PathSegment, RoutePattern, join_paths


class Severity(Enum):
    """Severity of a route check issue."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class RouteIssue:
    """A single issue found while checking the route tree."""

    severity: Severity
    category: str
    message: str
    route: str | None = None


@dataclass(slots=True)
class CheckResult:
    """Result of a route tree check."""

    issues: list[RouteIssue] = field(default_factory=list)
    routes_checked: int = 0

    @property
    def errors(self) -> list[RouteIssue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[RouteIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [f"Checked {self.routes_checked} routes."]
        if self.ok and not self.warnings:
            lines.append("No issues found.")
        elif self.ok:
            lines.append(f"No errors. {len(self.warnings)} warning(s).")
        else:
            lines.append(f"{len(self.errors)} error(s), {len(self.warnings)} warning(s).")
        for issue in self.issues:
            prefix = issue.severity.value.upper()
            where = f" ({issue.route})" if issue.route else ""
            lines.append(f"  [{prefix}] {issue.message}{where}")
        return "\n".join(lines)


def _shape(segments: tuple[PathSegment, ...]) -> tuple[tuple[str, str], ...]:
    """Structural key of a template: parameter names do not matter."""
    return tuple(
        ("*", "") if seg.catch_all else (":", "") if seg.is_param else ("", seg.value)
        for seg in segments
    )


def check_routes(routes: Sequence[RoutePattern]) -> CheckResult:
    """Check a route tree.

    Checks:
    1. **Tree validity**: anchoring, duplicate parameters and names.
       Anything ``PathMatcher`` rejects is reported as an error and
       stops further checks.
    2. **Dead-end leaves**: a leaf with neither builder nor redirect can
       never be a destination (error).
    3. **Builder-less parents**: a parent with children but no builder
       and no redirect fails with ``MissingBuilder`` when navigated to
       directly (warning).
    4. **Shadowed siblings**: a sibling whose template has the same shape
       as an earlier one is never the terminal match (warning).  Its
       children can still be reached by backtracking.
    """
    result = CheckResult()

    try:
        PathMatcher(routes)
    except ConfigurationError as exc:
        result.issues.append(RouteIssue(Severity.ERROR, "invalid_tree", str(exc)))
        return result

    _check_level(routes, "", result)
    return result


def _check_level(siblings: Sequence[RoutePattern], parent_path: str, result: CheckResult) -> None:
    seen: dict[tuple[tuple[str, str], ...], str] = {}
    for pattern in siblings:
        full_path = join_paths(parent_path, pattern.path)
        result.routes_checked += 1

        shape = _shape(pattern.segments)
        if shape in seen:
            result.issues.append(
                RouteIssue(
                    Severity.WARNING,
                    "shadowed",
                    (
                        f"Route is shadowed by earlier sibling {seen[shape]!r} "
                        "and is never a destination"
                    ),
                    route=full_path,
                )
            )
        else:
            seen[shape] = full_path

        if pattern.builder is None and pattern.redirect is None:
            if pattern.routes:
                result.issues.append(
                    RouteIssue(
                        Severity.WARNING,
                        "no_builder",
                        "Route has no builder or redirect; navigating to it directly fails",
                        route=full_path,
                    )
                )
            else:
                result.issues.append(
                    RouteIssue(
                        Severity.ERROR,
                        "dead_end",
                        "Leaf route has neither a builder nor a redirect",
                        route=full_path,
                    )
                )

        _check_level(pattern.routes, full_path, result)
