"""Tests for the command line interface."""

import json
import logging
import subprocess
import sys

import pytest

from kurva_pkg import cli, config
from kurva_pkg.cli import format_number, main_entry, print_result_pretty


@pytest.fixture(autouse=True)
def restore_config(monkeypatch):
    """main_entry overrides module configuration; undo it after each test."""
    monkeypatch.setattr(config, "OUTPUT_PRECISION", 6)
    monkeypatch.setattr(config, "WORKER_POOL_SIZE", config.WORKER_POOL_SIZE)
    yield
    # The handler installed by main_entry points at the captured stderr
    root = logging.getLogger("kurva")
    root.handlers.clear()
    root.propagate = True


class TestFormatNumber:
    def test_significant_digits(self):
        assert format_number(14.0) == "14"
        assert format_number(3.14159265, 3) == "3.14"
        assert format_number(0.1 + 0.2) == "0.3"

    def test_non_numeric(self):
        assert format_number("abc") == "abc"


class TestPrintResultPretty:
    def test_error(self, capsys):
        print_result_pretty({"ok": False, "error": "boom"})
        assert capsys.readouterr().out == "Error: boom\n"

    def test_json(self, capsys):
        print_result_pretty({"ok": True, "type": "value", "result": 2.0}, "json")
        assert json.loads(capsys.readouterr().out)["result"] == 2.0

    def test_analysis_without_zeros(self, capsys):
        print_result_pretty({"ok": True, "type": "analysis", "points": [], "zeros": []})
        assert "Zeros: none found" in capsys.readouterr().out


class TestMainEntry:
    def test_eval(self, capsys):
        assert main_entry(["-e", "2 + 3 * 4"]) == 0
        assert capsys.readouterr().out.strip() == "14"

    def test_eval_error_exit_code(self, capsys):
        assert main_entry(["-e", "1/0"]) == 1
        assert capsys.readouterr().out.startswith("Error: Division by zero")

    def test_eval_json(self, capsys):
        assert main_entry(["--format", "json", "-e", "2+2"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data == {"ok": True, "type": "value", "result": 4.0}

    def test_eval_json_error(self, capsys):
        assert main_entry(["--format", "json", "-e", "(1"]) == 1
        data = json.loads(capsys.readouterr().out)
        assert data["ok"] is False
        assert data["error_code"] == "UNMATCHED_PAREN"

    def test_strips_prompt(self, capsys):
        assert main_entry(["-e", ">>> 1 + 1"]) == 0
        assert capsys.readouterr().out.strip() == "2"

    def test_precision(self, capsys):
        assert main_entry(["-p", "3", "-e", "π"]) == 0
        assert capsys.readouterr().out.strip() == "3.14"

    def test_plot(self, capsys):
        assert main_entry(["--plot", "x^2", "--x-min=-1", "--x-max=1"]) == 0
        assert capsys.readouterr().out.splitlines() == ["-1\t1", "0\t0", "1\t1"]

    def test_plot_step(self, capsys):
        assert main_entry(["--plot", "2x", "--x-min=0", "--x-max=1", "--step=0.5"]) == 0
        assert capsys.readouterr().out.splitlines() == ["0\t0", "0.5\t1", "1\t2"]

    def test_plot_ascii(self, capsys):
        assert main_entry(["--plot", "x", "--ascii"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == config.ASCII_PLOT_ROWS
        assert "*" in lines[0]

    def test_plot_json(self, capsys):
        assert main_entry(["--format", "json", "--plot", "x", "--x-min=0", "--x-max=1"]) == 0
        assert json.loads(capsys.readouterr().out)["points"] == [[0.0, 0.0], [1.0, 1.0]]

    def test_plot_with_zeros(self, capsys):
        assert main_entry(["--plot", "x^2 - 1", "--x-min=-2", "--x-max=2", "--zeros"]) == 0
        assert "Zeros: -1, 1" in capsys.readouterr().out

    def test_plot_error(self, capsys):
        assert main_entry(["--plot", "1/x"]) == 1
        assert "Error:" in capsys.readouterr().out

    def test_plot_with_workers(self, capsys):
        assert main_entry(["--workers", "2", "--plot", "x", "--x-min=0", "--x-max=0"]) == 0
        assert config.WORKER_POOL_SIZE == 2

    def test_zeros_requires_plot(self):
        with pytest.raises(SystemExit):
            main_entry(["--zeros"])

    def test_version(self, capsys):
        assert main_entry(["-v"]) == 0
        assert capsys.readouterr().out.strip() == config.VERSION


class TestRepl:
    def run_repl(self, monkeypatch, lines):
        feed = iter(lines)
        monkeypatch.setattr("builtins.input", lambda prompt="": next(feed))
        cli.repl_loop()

    def test_evaluates_until_quit(self, monkeypatch, capsys):
        self.run_repl(monkeypatch, ["2+2", "", "1/0", "quit"])
        out = capsys.readouterr().out
        assert "4\n" in out
        assert "Error: Division by zero" in out
        assert out.rstrip().endswith("Goodbye.")

    def test_eof_exits(self, monkeypatch, capsys):
        def raise_eof(prompt=""):
            raise EOFError

        monkeypatch.setattr("builtins.input", raise_eof)
        cli.repl_loop()
        assert "Goodbye." in capsys.readouterr().out

    def test_plot_and_zeros_commands(self, monkeypatch, capsys):
        self.run_repl(monkeypatch, ["plot x", "zeros 2x - 4", "exit"])
        out = capsys.readouterr().out
        assert "*" in out
        assert "Zeros: 2" in out

    def test_help(self, monkeypatch, capsys):
        self.run_repl(monkeypatch, ["help", "quit"])
        assert "Commands:" in capsys.readouterr().out


def test_cli_module_subprocess():
    """Test running the CLI as a module."""
    result = subprocess.run(
        [sys.executable, "-m", "kurva_pkg", "-e", "avg(1, 2, 3)"],
        capture_output=True,
        text=True,
        timeout=30,
    )
    assert result.returncode == 0
    assert result.stdout.strip() == "2"


def test_cli_module_subprocess_error():
    result = subprocess.run(
        [sys.executable, "-m", "kurva_pkg", "-e", "sqrt(-1)"],
        capture_output=True,
        text=True,
        timeout=30,
    )
    assert result.returncode == 1
    assert result.stdout.startswith("Error:")
