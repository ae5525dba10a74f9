"""Tests for waypoint.routing.route — RoutePattern, PathSegment, MatchStack."""

import pytest

from waypoint.routing.route import (
    MatchedRoute,
    MatchStack,
    PathSegment,
    RoutePattern,
    frozen_params,
    join_paths,
)


def _builder() -> str:
    return "page"


class TestPathSegment:
    def test_static(self) -> None:
        seg = PathSegment(value="users")
        assert seg.value == "users"
        assert seg.is_param is False
        assert seg.param_name is None
        assert seg.catch_all is False

    def test_frozen(self) -> None:
        seg = PathSegment(value="users")
        with pytest.raises(AttributeError):
            seg.value = "other"  # type: ignore[misc]


class TestRoutePattern:
    def test_segments_parsed(self) -> None:
        pattern = RoutePattern("/family/:fid", builder=_builder)
        assert [s.value for s in pattern.segments] == ["family", ":fid"]
        assert pattern.param_names == ("fid",)

    def test_routes_become_tuple(self) -> None:
        child = RoutePattern("person/:pid", builder=_builder)
        pattern = RoutePattern("/family/:fid", builder=_builder, routes=[child])
        assert pattern.routes == (child,)

    def test_catch_all(self) -> None:
        pattern = RoutePattern("/files/*rest", builder=_builder)
        assert pattern.has_catch_all is True
        assert pattern.param_names == ("rest",)

    def test_equality_is_identity(self) -> None:
        a = RoutePattern("/a", builder=_builder)
        b = RoutePattern("/a", builder=_builder)
        assert a == a
        assert a != b

    def test_frozen(self) -> None:
        pattern = RoutePattern("/a", builder=_builder)
        with pytest.raises(AttributeError):
            pattern.path = "/b"  # type: ignore[misc]

    def test_walk(self) -> None:
        tree = RoutePattern(
            "/",
            builder=_builder,
            routes=[
                RoutePattern(
                    "family/:fid",
                    builder=_builder,
                    routes=[RoutePattern("person/:pid", builder=_builder)],
                ),
                RoutePattern("settings", builder=_builder),
            ],
        )
        walked = [(full_path, depth) for _, full_path, depth in tree.walk()]
        assert walked == [
            ("/", 0),
            ("/family/:fid", 1),
            ("/family/:fid/person/:pid", 2),
            ("/settings", 1),
        ]


class TestJoinPaths:
    @pytest.mark.parametrize(
        ("parent", "child", "expected"),
        [
            ("", "/", "/"),
            ("", "/users", "/users"),
            ("/", "family/:fid", "/family/:fid"),
            ("/family/:fid", "person/:pid", "/family/:fid/person/:pid"),
        ],
    )
    def test_join(self, parent: str, child: str, expected: str) -> None:
        assert join_paths(parent, child) == expected


class TestMatchStack:
    def _matched(self, path: str, **params: str) -> MatchedRoute:
        return MatchedRoute(
            pattern=RoutePattern(path, builder=_builder),
            full_path=path,
            sub_location=path,
            params=frozen_params(params),
        )

    def test_terminal_is_last(self) -> None:
        root = self._matched("/")
        leaf = self._matched("/family/:fid", fid="f1")
        stack = MatchStack.of([root, leaf])
        assert stack.terminal is leaf
        assert stack.params == {"fid": "f1"}
        assert len(stack) == 2
        assert stack[0] is root
        assert list(stack) == [root, leaf]

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValueError):
            MatchStack(())

    def test_params_read_only(self) -> None:
        matched = self._matched("/family/:fid", fid="f1")
        with pytest.raises(TypeError):
            matched.params["fid"] = "f2"  # type: ignore[index]
