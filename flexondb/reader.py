"""Sequential and chunk-wise reading of database files."""

from __future__ import annotations

import os
import struct
from typing import Any, BinaryIO, Iterator, Sequence

from .data_types import FieldType
from .schema import (
    FXDB_MAGIC,
    FXDB_VERSION,
    FileHeader,
    PathType,
    Schema,
    SchemaError,
    read_schema_section,
)

_INT32 = struct.Struct("<i")
_FLOAT32 = struct.Struct("<f")
_CHUNK_HEADER = struct.Struct("<II")
_CELL_RULE = "─" * 17

Row = dict[str, Any]


class ReaderError(Exception):
    """Raised when a database file cannot be read or is malformed."""


def deserialize_row(schema: Schema, buffer: bytes) -> Row:
    """Decode one stored row into a mapping from field name to value."""
    row: Row = {}
    offset = 0
    for field in schema.fields:
        if field.type is FieldType.INT32:
            width = _INT32.size
        elif field.type is FieldType.FLOAT:
            width = _FLOAT32.size
        elif field.type is FieldType.BOOL:
            width = 1
        elif field.type is FieldType.STRING:
            width = field.size
        else:
            raise ReaderError(f"unknown field type {int(field.type)}")
        chunk = buffer[offset : offset + width]
        if len(chunk) != width:
            raise ReaderError(f"row data too short for field '{field.name}'")
        if field.type is FieldType.INT32:
            row[field.name] = _INT32.unpack(chunk)[0]
        elif field.type is FieldType.FLOAT:
            row[field.name] = _FLOAT32.unpack(chunk)[0]
        elif field.type is FieldType.BOOL:
            row[field.name] = chunk[0] != 0
        else:
            text = chunk[: max(width - 1, 0)].split(b"\0", 1)[0]
            row[field.name] = text.decode("utf-8", errors="replace")
        offset += width
    return row


def _format_value(field_type: FieldType, value: Any) -> str:
    if field_type is FieldType.INT32:
        return f"{value:d}"
    if field_type is FieldType.FLOAT:
        return f"{value:.2f}"
    if field_type is FieldType.BOOL:
        return "true" if value else "false"
    if field_type is FieldType.STRING:
        return "(null)" if value is None else str(value)
    return "(unknown)"


class Reader:
    """Reads rows chunk by chunk from a database file."""

    def __init__(self, path: PathType) -> None:
        self.path = os.fspath(path)
        self._stream: BinaryIO | None = open(path, "rb")
        try:
            self.header = self._read_header(self._stream)
            self.schema = read_schema_section(self._stream, self.header)
        except SchemaError as exc:
            self._stream.close()
            self._stream = None
            raise ReaderError(f"cannot load schema from '{self.path}': {exc}") from exc
        except BaseException:
            self._stream.close()
            self._stream = None
            raise
        self.current_chunk = 0
        self.current_row = 0
        self.chunk_row_count = 0
        self.chunk_data_start = 0
        self._chunk = b""
        self._loaded = False

    @staticmethod
    def _read_header(stream: BinaryIO) -> FileHeader:
        try:
            header = FileHeader.unpack(stream.read(FileHeader.SIZE))
        except SchemaError as exc:
            raise ReaderError("cannot read file header") from exc
        if header.magic != FXDB_MAGIC:
            raise ReaderError("invalid file format (magic number mismatch)")
        if header.version != FXDB_VERSION:
            raise ReaderError(f"unsupported file version {header.version}")
        return header

    @property
    def closed(self) -> bool:
        return self._stream is None

    def _require_open(self) -> BinaryIO:
        if self._stream is None:
            raise ReaderError("reader is closed")
        return self._stream

    def _chunk_header_at(self, stream: BinaryIO, position: int) -> tuple[int, int]:
        stream.seek(position)
        data = stream.read(_CHUNK_HEADER.size)
        if len(data) != _CHUNK_HEADER.size:
            raise ReaderError(f"truncated chunk header at offset {position}")
        return _CHUNK_HEADER.unpack(data)

    def load_chunk(self, index: int) -> None:
        """Load the chunk at the given index and position at its first row."""
        stream = self._require_open()
        if not 0 <= index < self.header.chunk_count:
            raise ReaderError(
                f"chunk {index} out of range ({self.header.chunk_count} chunks)"
            )
        position = self.header.data_offset
        for _ in range(index):
            _, size = self._chunk_header_at(stream, position)
            position += _CHUNK_HEADER.size + size
        rows, size = self._chunk_header_at(stream, position)
        data = stream.read(size)
        if len(data) != size:
            raise ReaderError(f"truncated data in chunk {index}")
        self._chunk = data
        self.chunk_row_count = rows
        self.current_chunk = index
        self.current_row = 0
        self.chunk_data_start = position + _CHUNK_HEADER.size
        self._loaded = True

    def read_row(self) -> Row | None:
        """The next row, or None once every row has been read."""
        self._require_open()
        if not self._loaded:
            if self.header.chunk_count == 0:
                return None
            self.load_chunk(0)
        if self.current_row >= self.chunk_row_count:
            if self.current_chunk + 1 >= self.header.chunk_count:
                return None
            self.load_chunk(self.current_chunk + 1)
        start = self.current_row * self.schema.row_size
        row = deserialize_row(self.schema, self._chunk[start : start + self.schema.row_size])
        self.current_row += 1
        return row

    def read_rows(self, limit: int) -> list[Row]:
        """Up to limit rows from the current position."""
        rows: list[Row] = []
        while len(rows) < limit:
            row = self.read_row()
            if row is None:
                break
            rows.append(row)
        return rows

    def row_count(self) -> int:
        return self.header.total_rows

    def stats(self) -> tuple[int, int]:
        """Total rows and total chunks recorded in the file header."""
        return self.header.total_rows, self.header.chunk_count

    def seek_row(self, row_number: int) -> None:
        """Position the reader so the next row read is the given one."""
        self._require_open()
        if not 0 <= row_number < self.header.total_rows:
            raise ReaderError(
                f"row number {row_number} exceeds total rows ({self.header.total_rows})"
            )
        if self.header.chunk_size == 0:
            raise ReaderError("file header records a chunk size of 0")
        chunk_index, row_in_chunk = divmod(row_number, self.header.chunk_size)
        if not self._loaded or self.current_chunk != chunk_index:
            self.load_chunk(chunk_index)
        self.current_row = row_in_chunk

    def format_row(self, row: Row) -> str:
        """One row as 'field: value' lines followed by a blank line."""
        lines = [
            f"{field.name:<15}: {_format_value(field.type, row.get(field.name))}\n"
            for field in self.schema.fields
        ]
        return "".join(lines) + "\n"

    def format_rows(self, rows: Sequence[Row]) -> str:
        """Rows drawn as a box table with a count line."""
        if not rows:
            return "No rows to display.\n"
        fields = self.schema.fields
        parts = [
            "┌" + "┬".join(_CELL_RULE for _ in fields) + "┐\n",
            "│" + "".join(f" {field.name:<15} │" for field in fields) + "\n",
            "├" + "┼".join(_CELL_RULE for _ in fields) + "┤\n",
        ]
        for row in rows:
            cells = "".join(
                f" {_format_value(field.type, row.get(field.name)):<15} │"
                for field in fields
            )
            parts.append("│" + cells + "\n")
        parts.append("└" + "┴".join(_CELL_RULE for _ in fields) + "┘\n")
        parts.append(f"\n{len(rows)} row(s) displayed.\n")
        return "".join(parts)

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        self._chunk = b""

    def __iter__(self) -> Iterator[Row]:
        while (row := self.read_row()) is not None:
            yield row

    def __enter__(self) -> "Reader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()