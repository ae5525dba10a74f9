"""Tests for waypoint.cli — entry point, argument parsing, and commands."""

import types

import pytest

from waypoint.cli import main
from waypoint.router import Router
from waypoint.routing.route import RoutePattern


def _builder() -> str:
    return "page"


@pytest.fixture
def _fake_router_module(monkeypatch: pytest.MonkeyPatch) -> None:
    """Register a fake module holding waypoint Routers on sys.modules."""
    mod = types.ModuleType("_fake_waypoint_app")
    mod.router = Router(  # type: ignore[attr-defined]
        [
            RoutePattern(
                "/",
                redirect=lambda state: "/family/1",
                name="home",
                routes=[RoutePattern("family/:fid", builder=_builder, name="family")],
            ),
            RoutePattern("/loop", redirect=lambda state: "/loop2"),
            RoutePattern("/loop2", redirect=lambda state: "/loop"),
        ]
    )
    mod.broken = Router([RoutePattern("/", routes=[RoutePattern("dead")])])  # type: ignore[attr-defined]
    mod.invalid = Router([RoutePattern("relative", builder=_builder)])  # type: ignore[attr-defined]
    monkeypatch.setitem(__import__("sys").modules, "_fake_waypoint_app", mod)


class TestCLIHelp:
    @pytest.mark.parametrize("command", [[], ["routes"], ["resolve"], ["check"]])
    def test_help_exits_zero(self, command: list[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([*command, "--help"])
        assert exc_info.value.code == 0


class TestCLIMissingArgs:
    @pytest.mark.parametrize("command", ["routes", "resolve", "check"])
    def test_missing_router(self, command: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([command])
        assert exc_info.value.code == 2


class TestCLINoCommand:
    def test_no_command_exits_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "waypoint" in capsys.readouterr().out


@pytest.mark.usefixtures("_fake_router_module")
class TestRoutesCommand:
    def test_lists_tree(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_fake_waypoint_app:router"])
        out = capsys.readouterr().out
        assert out.splitlines()[0].split() == ["PATH", "NAME", "KIND"]
        assert "  /family/:fid" in out
        assert "family" in out
        assert "builder" in out

    def test_bad_import(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", "_fake_waypoint_app:missing"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err


@pytest.mark.usefixtures("_fake_router_module")
class TestResolveCommand:
    def test_prints_chain_and_stack(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["resolve", "_fake_waypoint_app:router", "/"])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "  / ->"
        assert lines[1] == "/family/1"
        assert "  /family/:fid  [fid=1]" in lines

    def test_defaults_to_initial_location(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["resolve", "_fake_waypoint_app:router"])
        assert "/family/1" in capsys.readouterr().out

    def test_loop_exits_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["resolve", "_fake_waypoint_app:router", "/loop"])
        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "FAILED redirect_loop_detected: /loop" in out
        assert "trace: /loop -> /loop2 -> /loop" in out

    def test_not_found_exits_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["resolve", "_fake_waypoint_app:router", "/nowhere"])
        assert exc_info.value.code == 1
        assert "FAILED not_found: /nowhere" in capsys.readouterr().out


@pytest.mark.usefixtures("_fake_router_module")
class TestCheckCommand:
    def test_clean_router(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["check", "_fake_waypoint_app:router"])
        assert "No issues found." in capsys.readouterr().out

    def test_errors_exit_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["check", "_fake_waypoint_app:broken"])
        assert exc_info.value.code == 1
        assert "[ERROR]" in capsys.readouterr().out

    def test_invalid_tree_reported_as_issue(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["check", "_fake_waypoint_app:invalid"])
        assert exc_info.value.code == 1
        assert "must start with '/'" in capsys.readouterr().out


@pytest.mark.usefixtures("_fake_router_module")
class TestInvalidTree:
    def test_resolve_reports_configuration_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["resolve", "_fake_waypoint_app:invalid", "/"])
        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert "Error:" in captured.err
        assert "must start with '/'" in captured.err
        assert captured.out == ""

    def test_routes_still_lists_tree(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "_fake_waypoint_app:invalid"])
        assert "relative" in capsys.readouterr().out
