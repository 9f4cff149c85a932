"""Line input with history, and terminal capability queries."""

from __future__ import annotations

import os
import sys
from functools import lru_cache
from os import PathLike
from typing import TextIO, Union

DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24

_COLOR_TERMS = ("color", "xterm", "screen")

PathType = Union[str, "PathLike[str]"]


class LineEditor:
    """Reads prompted lines and keeps a bounded command history."""

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin = stdin
        self._stdout = stdout
        self.history_enabled = True
        self._history: list[str] = []
        self._max_history: int | None = None

    @property
    def history(self) -> tuple[str, ...]:
        return tuple(self._history)

    def _trim(self) -> None:
        if self._max_history is not None and len(self._history) > self._max_history:
            del self._history[: len(self._history) - self._max_history]

    def read_line(self, prompt: str = "") -> str | None:
        """Show the prompt and read one line; None at end of input."""
        stdout = self._stdout if self._stdout is not None else sys.stdout
        stdin = self._stdin if self._stdin is not None else sys.stdin
        stdout.write(prompt)
        stdout.flush()
        line = stdin.readline()
        if not line:
            return None
        return line[:-1] if line.endswith("\n") else line

    def add_history(self, line: str) -> None:
        """Remember a non-empty line, unless history is switched off."""
        if not self.history_enabled or not line:
            return
        self._history.append(line)
        self._trim()

    def clear_history(self) -> None:
        self._history.clear()

    def load_history(self, path: PathType) -> None:
        """Append the lines stored in a history file."""
        with open(path, encoding="utf-8") as stream:
            self._history.extend(line for line in stream.read().splitlines() if line)
        self._trim()

    def save_history(self, path: PathType) -> None:
        """Write the history to a file, one entry per line."""
        with open(path, "w", encoding="utf-8") as stream:
            stream.writelines(f"{line}\n" for line in self._history)

    def set_history_size(self, size: int) -> None:
        """Keep at most size entries, dropping the oldest."""
        self._max_history = max(int(size), 0)
        self._trim()


def _stdout_is_tty() -> bool:
    try:
        return sys.stdout is not None and sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


@lru_cache(maxsize=None)
def supports_colors() -> bool:
    """Whether stdout is a terminal known to handle ANSI colours; checked once."""
    if not _stdout_is_tty():
        return False
    if os.name == "nt":
        return True
    term = os.environ.get("TERM")
    if not term:
        return False
    return any(part in term for part in _COLOR_TERMS) or term == "linux"


def _terminal_size():
    try:
        return os.get_terminal_size(sys.stdout.fileno())
    except (AttributeError, OSError, ValueError):
        return None


def terminal_width() -> int:
    size = _terminal_size()
    return DEFAULT_WIDTH if size is None else size.columns


def terminal_height() -> int:
    size = _terminal_size()
    return DEFAULT_HEIGHT if size is None else size.lines