"""Filesystem queries, directory management and path string helpers."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from os import PathLike
from typing import Union

PathType = Union[str, "PathLike[str]"]

PATH_SEPARATOR = os.sep


@dataclass(frozen=True)
class FileInfo:
    """Type, permissions, size and modification time of a filesystem entry."""

    is_directory: bool
    is_regular_file: bool
    is_readable: bool
    is_writable: bool
    size: int
    modified_time: int


@dataclass(frozen=True)
class DirEntry:
    """One entry of a directory listing."""

    name: str
    is_directory: bool


def file_exists(path: PathType) -> bool:
    return os.access(path, os.F_OK)


def is_directory(path: PathType) -> bool:
    """Whether path is a directory; raises OSError if it cannot be examined."""
    return stat.S_ISDIR(os.stat(path).st_mode)


def is_regular_file(path: PathType) -> bool:
    """Whether path is a regular file; raises OSError if it cannot be examined."""
    return stat.S_ISREG(os.stat(path).st_mode)


def file_info(path: PathType) -> FileInfo:
    """Details of the entry at path; raises OSError if it cannot be examined."""
    st = os.stat(path)
    return FileInfo(
        is_directory=stat.S_ISDIR(st.st_mode),
        is_regular_file=stat.S_ISREG(st.st_mode),
        is_readable=os.access(path, os.R_OK),
        is_writable=os.access(path, os.W_OK),
        size=st.st_size,
        modified_time=int(st.st_mtime),
    )


def create_directory(path: PathType) -> None:
    """Create one directory; its parent must already exist."""
    os.mkdir(path, 0o755)


def create_directories(path: PathType) -> None:
    """Create a directory and any missing parents."""
    text = os.fspath(path)
    if file_exists(text):
        if not is_directory(text):
            raise FileExistsError(f"'{text}' exists and is not a directory")
        return
    parent, sep, _ = text.rpartition(PATH_SEPARATOR)
    if sep and parent:
        create_directories(parent)
    create_directory(text)


def remove_file(path: PathType) -> None:
    os.unlink(path)


def remove_directory(path: PathType) -> None:
    """Remove an empty directory."""
    os.rmdir(path)


def current_directory() -> str:
    return os.getcwd()


def set_current_directory(path: PathType) -> None:
    os.chdir(path)


def path_join(first: PathType, second: PathType) -> str:
    """Join two path strings with exactly one separator between them."""
    head = os.fspath(first)
    tail = os.fspath(second)
    if tail.startswith(PATH_SEPARATOR):
        tail = tail[1:]
    if head and not head.endswith(PATH_SEPARATOR):
        return f"{head}{PATH_SEPARATOR}{tail}"
    return head + tail


def _posix_dirname(text: str) -> str:
    sep = PATH_SEPARATOR
    if not text:
        return "."
    stripped = text.rstrip(sep)
    if not stripped:
        return sep
    if sep not in stripped:
        return "."
    parent = stripped[: stripped.rindex(sep)].rstrip(sep)
    return parent or sep


def path_dirname(path: PathType) -> str:
    """Directory part of a path, '.' when there is none."""
    text = os.fspath(path)
    if os.name == "nt":
        head, sep, _ = text.rpartition(PATH_SEPARATOR)
        return head if sep else "."
    return _posix_dirname(text)


def path_basename(path: PathType) -> str:
    """Everything after the last separator."""
    return os.fspath(path).rpartition(PATH_SEPARATOR)[2]


def path_extension(path: PathType) -> str:
    """The final '.suffix' of the last path component, or ''."""
    text = os.fspath(path)
    dot = text.rfind(".")
    sep = text.rfind(PATH_SEPARATOR)
    if dot >= 0 and dot > sep:
        return text[dot:]
    return ""


def path_normalize(path: PathType) -> str:
    """The path as a string; '.' and '..' components are left in place."""
    return os.fspath(path)


def _is_absolute(text: str) -> bool:
    if os.name == "nt":
        return len(text) >= 2 and text[1] == ":"
    return text.startswith(PATH_SEPARATOR)


def path_absolute(path: PathType) -> str:
    """The path itself if absolute, otherwise joined onto the working directory."""
    text = os.fspath(path)
    if _is_absolute(text):
        return path_normalize(text)
    return path_join(current_directory(), text)


def list_directory(path: PathType) -> list[DirEntry]:
    """Entries of a directory, without '.' and '..', in the order the system gives."""
    with os.scandir(path) as entries:
        return [
            DirEntry(entry.name, _entry_is_dir(entry))
            for entry in entries
            if entry.name not in (".", "..")
        ]


def _entry_is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False