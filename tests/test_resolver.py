"""Tests for waypoint.routing.resolver — full resolution passes."""

import pytest

from waypoint.errors import (
    MissingBuilder,
    NotFound,
    RedirectLimitExceeded,
    RedirectLoopDetected,
    RuleError,
)
from waypoint.routing.matcher import PathMatcher
from waypoint.routing.resolver import Resolution, Resolver
from waypoint.routing.route import RoutePattern
from waypoint.routing.state import RouteState


def _builder() -> str:
    return "page"


def _chain_routes(k: int) -> list[RoutePattern]:
    """Routes /r0 -> /r1 -> ... -> /rk, where /rk is final."""
    routes = [
        RoutePattern(f"/r{i}", redirect=lambda state, n=i: f"/r{n + 1}") for i in range(k)
    ]
    routes.append(RoutePattern(f"/r{k}", builder=_builder))
    return routes


class TestRedirectLimit:
    @pytest.mark.parametrize("limit", [1, 2, 5, 8])
    @pytest.mark.parametrize("k", [0, 1, 2, 4, 5, 7, 9])
    def test_succeeds_iff_fewer_redirects_than_limit(self, limit: int, k: int) -> None:
        resolver = Resolver(PathMatcher(_chain_routes(k)), redirect_limit=limit)
        if k < limit:
            resolution = resolver.resolve("/r0")
            assert resolution.location.full == f"/r{k}"
            assert len(resolution.redirects) == k
        else:
            with pytest.raises(RedirectLimitExceeded) as exc_info:
                resolver.resolve("/r0")
            assert exc_info.value.trace == tuple(f"/r{i}" for i in range(limit))
            assert exc_info.value.limit == limit

    def test_default_limit_is_five(self) -> None:
        resolver = Resolver(PathMatcher(_chain_routes(5)))
        with pytest.raises(RedirectLimitExceeded):
            resolver.resolve("/r0")
        assert Resolver(PathMatcher(_chain_routes(4))).resolve("/r0").location.full == "/r4"


class TestLoops:
    def test_two_cycle_reports_both_locations(self) -> None:
        routes = [
            RoutePattern("/a", redirect=lambda state: "/b"),
            RoutePattern("/b", redirect=lambda state: "/a"),
        ]
        with pytest.raises(RedirectLoopDetected) as exc_info:
            Resolver(PathMatcher(routes), redirect_limit=50).resolve("/a")
        assert exc_info.value.trace == ("/a", "/b")

    def test_loop_detected_before_limit(self) -> None:
        routes = [
            RoutePattern("/a", redirect=lambda state: "/b"),
            RoutePattern("/b", redirect=lambda state: "/a"),
        ]
        # limit 2 would fail on the second redirect too; the loop wins
        with pytest.raises(RedirectLoopDetected):
            Resolver(PathMatcher(routes), redirect_limit=2).resolve("/a")

    def test_global_rule_loop(self) -> None:
        def rule(state: RouteState) -> str:
            return "/b" if state.sub_location == "/a" else "/a"

        routes = [RoutePattern("/a", builder=_builder), RoutePattern("/b", builder=_builder)]
        with pytest.raises(RedirectLoopDetected) as exc_info:
            Resolver(PathMatcher(routes), redirect=rule).resolve("/a")
        assert exc_info.value.chain == ("/a", "/b", "/a")

    def test_trailing_slash_variant_is_same_location(self) -> None:
        routes = [
            RoutePattern("/a", redirect=lambda state: "/b/"),
            RoutePattern("/b", redirect=lambda state: "/a/"),
        ]
        with pytest.raises(RedirectLoopDetected) as exc_info:
            Resolver(PathMatcher(routes)).resolve("/a")
        assert exc_info.value.trace == ("/a", "/b")


class TestIdempotence:
    def test_no_rules_matches_direct_match(self) -> None:
        person = RoutePattern("person/:pid", builder=_builder)
        family = RoutePattern("family/:fid", builder=_builder, routes=[person])
        matcher = PathMatcher([RoutePattern("/", builder=_builder, routes=[family])])

        resolution = Resolver(
            matcher, redirect=lambda state: None
        ).resolve("/family/f1/person/p2")

        assert resolution.stack == matcher.match("/family/f1/person/p2")
        assert resolution.redirects == ()
        assert resolution.redirected is False

    def test_rules_returning_none(self) -> None:
        page = RoutePattern("/a", builder=_builder, redirect=lambda state: None)
        matcher = PathMatcher([page])
        resolution = Resolver(matcher, redirect=lambda state: None).resolve("/a")
        assert resolution.stack == matcher.match("/a")


class TestPrecedenceAndTerminal:
    def test_global_beats_leaf_each_step(self) -> None:
        leaf_calls: list[str] = []

        def leaf(state: RouteState) -> str:
            leaf_calls.append(state.location)
            return "/y"

        def global_rule(state: RouteState) -> str | None:
            return "/x" if state.sub_location == "/a" else None

        routes = [
            RoutePattern("/a", builder=_builder, redirect=leaf),
            RoutePattern("/x", builder=_builder),
            RoutePattern("/y", builder=_builder),
        ]
        resolution = Resolver(PathMatcher(routes), redirect=global_rule).resolve("/a")
        assert resolution.location.full == "/x"
        assert leaf_calls == []

    def test_global_rule_reevaluated_every_step(self) -> None:
        seen: list[str] = []

        def global_rule(state: RouteState) -> None:
            seen.append(state.location)

        routes = [
            RoutePattern("/", redirect=lambda state: "/a"),
            RoutePattern("/a", redirect=lambda state: "/b"),
            RoutePattern("/b", builder=_builder),
        ]
        Resolver(PathMatcher(routes), redirect=global_rule).resolve("/")
        assert seen == ["/", "/a", "/b"]

    def test_ancestor_rule_never_invoked(self) -> None:
        calls: list[str] = []

        def parent_rule(state: RouteState) -> str:
            calls.append("parent")
            return "/elsewhere"

        def child_rule(state: RouteState) -> None:
            calls.append("child")

        child = RoutePattern("child", builder=_builder, redirect=child_rule)
        parent = RoutePattern("/parent", builder=_builder, redirect=parent_rule, routes=[child])
        resolution = Resolver(PathMatcher([parent])).resolve("/parent/child")

        assert resolution.stack.patterns == (parent, child)
        assert calls == ["child"]

    def test_ancestor_rule_applies_when_it_is_the_destination(self) -> None:
        child = RoutePattern("child", builder=_builder)
        parent = RoutePattern(
            "/parent", redirect=lambda state: "/parent/child", routes=[child]
        )
        resolution = Resolver(PathMatcher([parent])).resolve("/parent")
        assert resolution.location.full == "/parent/child"
        assert resolution.redirects == ("/parent",)


class TestScenarios:
    def test_root_redirects_to_family(self) -> None:
        routes = [
            RoutePattern("/", redirect=lambda state: "/family/1"),
            RoutePattern("/family/:fid", builder=_builder),
        ]
        resolution = Resolver(PathMatcher(routes)).resolve("/")
        assert resolution.location.full == "/family/1"
        assert dict(resolution.state.params) == {"fid": "1"}
        assert resolution.redirects == ("/",)

    def test_login_guard(self) -> None:
        logged_in = False

        def require_login(state: RouteState) -> str | None:
            if not logged_in and state.sub_location != "/login":
                return "/login"
            return None

        routes = [
            RoutePattern("/settings", builder=_builder),
            RoutePattern("/login", builder=_builder),
        ]
        resolver = Resolver(PathMatcher(routes), redirect=require_login)

        assert resolver.resolve("/settings").location.full == "/login"
        direct = resolver.resolve("/login")
        assert direct.location.full == "/login"
        assert direct.redirects == ()

    def test_cycle_through_root(self) -> None:
        routes = [
            RoutePattern("/", redirect=lambda state: "/foo"),
            RoutePattern("/foo", redirect=lambda state: "/"),
        ]
        with pytest.raises(RedirectLoopDetected) as exc_info:
            Resolver(PathMatcher(routes)).resolve("/")
        assert list(exc_info.value.chain) == ["/", "/foo", "/"]


class TestFailures:
    def test_not_found_after_redirect_has_trace(self) -> None:
        routes = [RoutePattern("/", redirect=lambda state: "/missing")]
        with pytest.raises(NotFound) as exc_info:
            Resolver(PathMatcher(routes)).resolve("/")
        assert exc_info.value.location == "/missing"
        assert exc_info.value.trace == ("/",)

    def test_missing_builder(self) -> None:
        routes = [RoutePattern("/", redirect=lambda state: None)]
        with pytest.raises(MissingBuilder) as exc_info:
            Resolver(PathMatcher(routes)).resolve("/")
        assert "has no builder" in exc_info.value.detail

    def test_missing_builder_on_parent(self) -> None:
        parent = RoutePattern("/p", routes=[RoutePattern("c", builder=_builder)])
        resolver = Resolver(PathMatcher([parent]))
        assert resolver.resolve("/p/c").location.full == "/p/c"
        with pytest.raises(MissingBuilder):
            resolver.resolve("/p")

    def test_rule_error_mid_chain(self) -> None:
        def broken(state: RouteState) -> str:
            raise ValueError("bad state")

        routes = [
            RoutePattern("/", redirect=lambda state: "/b"),
            RoutePattern("/b", name="bee", redirect=broken),
        ]
        with pytest.raises(RuleError) as exc_info:
            Resolver(PathMatcher(routes)).resolve("/")
        assert exc_info.value.rule == "bee"
        assert exc_info.value.location == "/b"
        assert exc_info.value.trace == ("/",)


class TestResolution:
    def test_extra_reaches_final_state(self) -> None:
        routes = [RoutePattern("/a", builder=_builder)]
        resolution = Resolver(PathMatcher(routes)).resolve("/a", extra="payload")
        assert isinstance(resolution, Resolution)
        assert resolution.state.extra == "payload"

    def test_query_preserved_through_redirect(self) -> None:
        routes = [
            RoutePattern(
                "/old", redirect=lambda state: f"/new?{state.query.raw}" if state.query else "/new"
            ),
            RoutePattern("/new", builder=_builder),
        ]
        resolution = Resolver(PathMatcher(routes)).resolve("/old?page=3")
        assert resolution.location.full == "/new?page=3"
        assert resolution.state.query["page"] == "3"
