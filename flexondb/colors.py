"""ANSI colour output with environment and terminal detection."""

from __future__ import annotations

import os
import sys

ANSI_RESET = "\033[0m"
ANSI_BOLD = "\033[1m"
ANSI_RED = "\033[31m"
ANSI_GREEN = "\033[32m"
ANSI_YELLOW = "\033[33m"
ANSI_BLUE = "\033[34m"
ANSI_MAGENTA = "\033[35m"
ANSI_CYAN = "\033[36m"
ANSI_WHITE = "\033[37m"

_COLOR_TERMS = ("color", "xterm", "screen", "tmux")
_EXACT_TERMS = ("linux", "cygwin")

_colors_enabled: bool | None = None


def _stdout_is_tty() -> bool:
    stream = sys.stdout
    try:
        return stream is not None and stream.isatty()
    except (AttributeError, ValueError):
        return False


def auto_detect_colors() -> bool:
    """Decide from the environment and stdout whether to emit colours."""
    global _colors_enabled
    if os.environ.get("NO_COLOR"):
        _colors_enabled = False
    elif os.environ.get("FORCE_COLOR"):
        _colors_enabled = True
    elif not _stdout_is_tty():
        _colors_enabled = False
    elif os.name == "nt":
        _colors_enabled = True
    else:
        term = os.environ.get("TERM")
        _colors_enabled = bool(term) and (
            any(part in term for part in _COLOR_TERMS) or term in _EXACT_TERMS
        )
    return _colors_enabled


def colors_supported() -> bool:
    """Whether colours are on, detecting on first use."""
    if _colors_enabled is None:
        return auto_detect_colors()
    return _colors_enabled


def set_colors_enabled(enabled: bool) -> None:
    global _colors_enabled
    _colors_enabled = bool(enabled)


def _write(stream, color: str, text: str) -> None:
    use_color = bool(color) and colors_supported()
    stream.write(f"{color}{text}{ANSI_RESET}" if use_color else text)
    stream.flush()


def print_colored(color: str, text: str) -> None:
    """Write text to stdout wrapped in a colour code when colours are on."""
    _write(sys.stdout, color, text)


def print_colored_err(color: str, text: str) -> None:
    """Write text to stderr wrapped in a colour code when colours are on."""
    _write(sys.stderr, color, text)