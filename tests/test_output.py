"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- emit, print_text and print_table in each format
- Global instance management
"""

from __future__ import annotations

import json

import pytest

from apiscope import output as output_module
from apiscope.models import DependencyNode
from apiscope.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
    to_jsonable,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("apiscope.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("apiscope.output._is_tty", lambda: True)


def _plain(**kwargs) -> OutputManager:
    return OutputManager(format=OutputFormat.PLAIN, no_color=True, **kwargs)


def _json(**kwargs) -> OutputManager:
    return OutputManager(format=OutputFormat.JSON, no_color=True, **kwargs)


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.RICH

    def test_auto_with_no_color_is_plain(self, tty):
        assert OutputManager(format=OutputFormat.AUTO, no_color=True).format == OutputFormat.PLAIN

    def test_explicit_format_kept(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color()

    def test_term_dumb(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color()

    def test_default(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert not _should_disable_color()


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStreamDiscipline:
    def test_print_data_goes_to_stdout(self, capfd):
        _plain().print_data("result")
        out, err = capfd.readouterr()
        assert out == "result\n"
        assert err == ""

    @pytest.mark.parametrize(
        ("method", "expected"),
        [
            ("info", "hello"),
            ("success", "hello"),
            ("warning", "Warning: hello"),
            ("error", "Error: hello"),
        ],
    )
    def test_diagnostics_go_to_stderr(self, capfd, method, expected):
        getattr(_plain(), method)("hello")
        out, err = capfd.readouterr()
        assert out == ""
        assert err.strip() == expected

    def test_debug_only_when_verbose(self, capfd):
        _plain().debug("hidden")
        _plain(verbose=True).debug("shown")
        out, err = capfd.readouterr()
        assert "hidden" not in err
        assert "[debug] shown" in err


class TestQuietMode:
    def test_quiet_suppresses_info_and_success(self, capfd):
        manager = _plain(quiet=True)
        manager.info("a")
        manager.success("b")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_warnings_errors_and_data(self, capfd):
        manager = _plain(quiet=True)
        manager.warning("w")
        manager.error("e")
        manager.print_data("data")
        out, err = capfd.readouterr()
        assert out == "data\n"
        assert "Warning: w" in err
        assert "Error: e" in err


# ------------------------------------------------------------------ #
# emit / print_text / print_table
# ------------------------------------------------------------------ #


class TestEmit:
    def test_json_uses_aliases_and_drops_none(self, capfd):
        _json().emit(DependencyNode(name="Pet", circular=True))
        assert json.loads(capfd.readouterr().out) == {
            "name": "Pet",
            "circular": True,
            "missing": False,
        }

    def test_plain_mapping(self, capfd):
        _plain().emit({"title": "Petstore", "tags": ["a", "b"]})
        assert capfd.readouterr().out == 'title\tPetstore\ntags\t["a", "b"]\n'

    def test_plain_list(self, capfd):
        _plain().emit([{"a": 1, "b": 2}, "x"])
        assert capfd.readouterr().out == "1\t2\nx\n"

    def test_rich_highlights_json(self, capfd):
        OutputManager(format=OutputFormat.RICH, no_color=True).emit({"k": "v"})
        out = capfd.readouterr().out
        assert '"k"' in out
        assert '"v"' in out


class TestPrintText:
    def test_plain_prints_as_is(self, capfd):
        _plain().print_text("curl -X GET /pets", "bash")
        assert capfd.readouterr().out == "curl -X GET /pets\n"

    def test_json_wraps_content(self, capfd):
        _json().print_text("export type A = string;", "typescript")
        assert json.loads(capfd.readouterr().out) == {"content": "export type A = string;"}


class TestPrintTable:
    HEADERS = ["Method", "Path"]
    ROWS = [["GET", "/pets"], ["POST", None]]

    def test_plain_is_tsv(self, capfd):
        _plain().print_table(self.HEADERS, self.ROWS)
        assert capfd.readouterr().out == "Method\tPath\nGET\t/pets\nPOST\t\n"

    def test_json_is_list_of_objects(self, capfd):
        _json().print_table(self.HEADERS, self.ROWS)
        assert json.loads(capfd.readouterr().out) == [
            {"Method": "GET", "Path": "/pets"},
            {"Method": "POST", "Path": ""},
        ]

    def test_rich_renders_table(self, capfd):
        OutputManager(format=OutputFormat.RICH, no_color=True).print_table(
            self.HEADERS, self.ROWS, title="Endpoints"
        )
        out = capfd.readouterr().out
        assert "Endpoints" in out
        assert "/pets" in out


class TestToJsonable:
    def test_nested_models(self):
        data = to_jsonable({"nodes": [DependencyNode(name="A")]})
        assert data == {"nodes": [{"name": "A", "circular": False, "missing": False}]}


# ------------------------------------------------------------------ #
# Global instance management
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_creates_default(self, non_tty):
        reset_output()
        assert get_output() is get_output()

    def test_set_and_reset(self):
        manager = _json()
        set_output(manager)
        assert get_output() is manager
        reset_output()
        assert get_output() is not manager

    def test_module_functions_delegate(self, capfd):
        set_output(_plain(quiet=True))
        output_module.info("quiet")
        output_module.warning("loud")
        output_module.emit("value")
        out, err = capfd.readouterr()
        assert out == "value\n"
        assert err.strip() == "Warning: loud"
