"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- print_table in JSON and plain modes
- The log handler's level
"""

from __future__ import annotations

import json
import logging

import pytest

from apicatalog.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)
from apicatalog import output as output_module


@pytest.fixture()
def non_tty(monkeypatch):
    monkeypatch.setattr("apicatalog.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    monkeypatch.setattr("apicatalog.output._is_tty", lambda: True)


class TestOutputFormatResolution:
    def test_auto_plain_when_not_tty(self, non_tty):
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager().format == OutputFormat.RICH

    def test_no_color_flag_forces_plain(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


class TestStreams:
    def test_data_to_stdout(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_data("hello")
        captured = capfd.readouterr()
        assert captured.out == "hello\n"
        assert captured.err == ""

    def test_diagnostics_to_stderr(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.info("some info")
        mgr.warning("be careful")
        mgr.error("something broke")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err.splitlines() == [
            "some info",
            "Warning: be careful",
            "Error: something broke",
        ]

    def test_quiet_keeps_warnings_and_errors(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.info("hidden")
        mgr.warning("shown")
        mgr.error("also shown")
        err = capfd.readouterr().err
        assert "hidden" not in err
        assert "shown" in err
        assert "also shown" in err

    def test_debug_needs_verbose(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).debug("quiet")
        OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True).debug("loud")
        err = capfd.readouterr().err
        assert "quiet" not in err
        assert "[debug] loud" in err


class TestTables:
    def test_json_records(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_table(["Name", "Section"], [["Me", "MeAndMyStuff"], ["Products", "ProductCatalogs"]])
        assert json.loads(capfd.readouterr().out) == [
            {"Name": "Me", "Section": "MeAndMyStuff"},
            {"Name": "Products", "Section": "ProductCatalogs"},
        ]

    def test_plain_tsv(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_table(["Name", "Section"], [["Me", "MeAndMyStuff"]], title="ignored")
        assert capfd.readouterr().out == "Name\tSection\nMe\tMeAndMyStuff\n"

    def test_plain_dict_response(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response({"a": 1})
        assert capfd.readouterr().out == "a\t1\n"


class TestLogHandler:
    def test_level_follows_verbosity(self, non_tty):
        quiet = OutputManager(format=OutputFormat.PLAIN).log_handler()
        loud = OutputManager(format=OutputFormat.PLAIN, verbose=True).log_handler()
        assert quiet.level == logging.WARNING
        assert loud.level == logging.DEBUG


class TestGlobalInstance:
    def test_lazy_default(self, non_tty):
        reset_output()
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_output_used_by_helpers(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        output_module.error("via helper")
        assert "Error: via helper" in capfd.readouterr().err
