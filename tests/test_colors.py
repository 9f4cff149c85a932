import io
import sys

import pytest

from flexondb.colors import (
    ANSI_GREEN,
    ANSI_RED,
    ANSI_RESET,
    auto_detect_colors,
    colors_supported,
    print_colored,
    print_colored_err,
    set_colors_enabled,
)


class TtyStream(io.StringIO):
    def isatty(self):
        return True


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("FORCE_COLOR", raising=False)
    yield
    set_colors_enabled(False)


def test_set_enabled():
    set_colors_enabled(True)
    assert colors_supported() is True
    set_colors_enabled(0)
    assert colors_supported() is False


def test_print_colored_enabled(capsys):
    set_colors_enabled(True)
    print_colored(ANSI_GREEN, "ok\n")
    assert capsys.readouterr().out == ANSI_GREEN + "ok\n" + ANSI_RESET


def test_print_colored_disabled(capsys):
    set_colors_enabled(False)
    print_colored(ANSI_GREEN, "ok\n")
    assert capsys.readouterr().out == "ok\n"


def test_empty_color_adds_no_codes(capsys):
    set_colors_enabled(True)
    print_colored("", "plain")
    assert capsys.readouterr().out == "plain"


def test_print_colored_err(capsys):
    set_colors_enabled(True)
    print_colored_err(ANSI_RED, "bad")
    captured = capsys.readouterr()
    assert captured.err == ANSI_RED + "bad" + ANSI_RESET
    assert captured.out == ""


def test_no_color_wins(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.setenv("FORCE_COLOR", "1")
    assert auto_detect_colors() is False
    assert colors_supported() is False


def test_force_color(monkeypatch):
    monkeypatch.setenv("FORCE_COLOR", "1")
    assert auto_detect_colors() is True


def test_empty_no_color_is_ignored(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "")
    monkeypatch.setenv("FORCE_COLOR", "yes")
    assert auto_detect_colors() is True


def test_non_tty_disables(monkeypatch):
    monkeypatch.setattr(sys, "stdout", io.StringIO())
    assert auto_detect_colors() is False


@pytest.mark.parametrize("term", ["xterm-256color", "screen", "tmux", "linux"])
def test_known_terminals(monkeypatch, term):
    monkeypatch.setattr(sys, "stdout", TtyStream())
    monkeypatch.setenv("TERM", term)
    assert auto_detect_colors() is True