"""Creating database files and appending rows to them."""

from __future__ import annotations

import logging
import math
import os
import re
import struct
from dataclasses import dataclass
from enum import IntFlag
from typing import Any, BinaryIO, Mapping

from .data_types import FieldType
from .schema import FileHeader, PathType, Schema, SchemaError, load_schema

DEFAULT_CHUNK_SIZE = 1000
FXDB_EXTENSION = ".fxdb"

_LOG = logging.getLogger(__name__)
_TRIM = " \t\n\r"
_INT32 = struct.Struct("<i")
_FLOAT32 = struct.Struct("<f")
_CHUNK_HEADER = struct.Struct("<II")
_INT_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?(?:inf|infinity|nan)",
    re.IGNORECASE,
)
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class WriterError(Exception):
    """Raised when a row cannot be written or a file cannot be opened for writing."""


@dataclass(frozen=True)
class WriterConfig:
    chunk_size: int = DEFAULT_CHUNK_SIZE
    use_compression: bool = False
    build_index: bool = False


class OpenMode(IntFlag):
    READ = 1
    WRITE = 2
    APPEND = 4
    CREATE = 8
    EXCLUSIVE = 16


def _strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return text[1:-1]
    return text


def _to_float32(value: float) -> float:
    try:
        return _FLOAT32.unpack(_FLOAT32.pack(value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _default_value(field_type: FieldType) -> Any:
    return {
        FieldType.STRING: "",
        FieldType.INT32: 0,
        FieldType.FLOAT: 0.0,
        FieldType.BOOL: False,
    }.get(field_type)


def serialize_row(schema: Schema, values: Mapping[str, Any]) -> bytes:
    """Encode one row, taking each field's value from the mapping by name."""
    parts = []
    for field in schema.fields:
        if field.name not in values:
            raise WriterError(f"missing value for field '{field.name}'")
        value = values[field.name]
        if field.type is FieldType.INT32:
            try:
                parts.append(_INT32.pack(value))
            except struct.error as exc:
                raise WriterError(f"invalid int32 value for '{field.name}': {value!r}") from exc
        elif field.type is FieldType.FLOAT:
            try:
                parts.append(_FLOAT32.pack(_to_float32(float(value))))
            except (TypeError, ValueError) as exc:
                raise WriterError(f"invalid float value for '{field.name}': {value!r}") from exc
        elif field.type is FieldType.BOOL:
            parts.append(b"\x01" if value else b"\x00")
        elif field.type is FieldType.STRING:
            data = b"" if value is None else str(value).encode("utf-8")
            data = data[: field.size - 1]
            parts.append(data.ljust(field.size, b"\0"))
        else:
            raise WriterError(f"unknown field type {int(field.type)}")
    return b"".join(parts)


def parse_json_value(text: str, field_type: FieldType) -> Any:
    """Convert the text of a JSON value to the Python value for a field type."""
    trimmed = text.strip(_TRIM)
    if field_type is FieldType.STRING:
        return _strip_quotes(trimmed)
    if field_type is FieldType.INT32:
        if not trimmed:
            return 0
        if not _INT_RE.fullmatch(trimmed):
            raise WriterError(f"invalid integer '{trimmed}'")
        number = int(trimmed)
        if not _INT32_MIN <= number <= _INT32_MAX:
            raise WriterError(f"integer '{trimmed}' out of range")
        return number
    if field_type is FieldType.FLOAT:
        if not trimmed:
            return 0.0
        if not _FLOAT_RE.fullmatch(trimmed):
            raise WriterError(f"invalid float '{trimmed}'")
        return _to_float32(float(trimmed))
    if field_type is FieldType.BOOL:
        if trimmed in ("true", "1"):
            return True
        if trimmed in ("false", "0"):
            return False
        raise WriterError(f"invalid bool '{trimmed}'")
    raise WriterError(f"unknown field type {int(field_type)}")


class Writer:
    """Buffers rows into chunks and appends them to a database file."""

    def __init__(
        self,
        stream: BinaryIO,
        schema: Schema,
        header: FileHeader,
        config: WriterConfig,
    ) -> None:
        if config.chunk_size < 1:
            raise WriterError("chunk size must be at least 1")
        self.schema = schema
        self.header = header
        self.config = config
        self.total_rows = header.total_rows
        self.current_chunk = header.chunk_count
        self._stream: BinaryIO | None = stream
        self._buffer: list[bytes] = []

    @classmethod
    def create(
        cls, path: PathType, schema: Schema, config: WriterConfig | None = None
    ) -> "Writer":
        """Create a new database file with the given schema."""
        config = config or WriterConfig()
        if config.chunk_size < 1:
            raise WriterError("chunk size must be at least 1")
        section = schema.encode()
        header = FileHeader(
            chunk_size=config.chunk_size,
            schema_offset=FileHeader.SIZE,
            schema_size=len(section),
            data_offset=FileHeader.SIZE + len(section),
        )
        stream = open(path, "wb")
        try:
            stream.write(header.pack())
            stream.write(section)
        except BaseException:
            stream.close()
            raise
        return cls(stream, schema, header, config)

    @classmethod
    def open(cls, path: PathType) -> "Writer":
        """Open an existing database file to append rows to it."""
        with open(path, "rb") as stream:
            try:
                header = FileHeader.unpack(stream.read(FileHeader.SIZE))
            except SchemaError as exc:
                raise WriterError(f"cannot read header from '{path}'") from exc
        if header.magic != FileHeader().magic:
            raise WriterError("invalid file format - not a FlexonDB file")
        try:
            schema = load_schema(path)
        except SchemaError as exc:
            raise WriterError(f"schema mismatch in '{path}': {exc}") from exc
        stream = open(path, "r+b")
        stream.seek(0, os.SEEK_END)
        return cls(stream, schema, header, WriterConfig())

    @property
    def closed(self) -> bool:
        return self._stream is None

    def _require_open(self) -> BinaryIO:
        if self._stream is None:
            raise WriterError("writer is closed")
        return self._stream

    def insert_row(self, values: Mapping[str, Any]) -> None:
        """Add one row given as a mapping from field name to value."""
        self._require_open()
        self._buffer.append(serialize_row(self.schema, values))
        self.total_rows += 1
        if len(self._buffer) >= self.config.chunk_size:
            self.flush_chunk()

    def insert_json(self, text: str) -> None:
        """Add one row given as a flat JSON object of scalar values."""
        body = text.strip(_TRIM)
        if not (body.startswith("{") and body.endswith("}") and len(body) >= 2):
            raise WriterError("invalid JSON format - must be an object {...}")
        values = {f.name: _default_value(f.type) for f in self.schema.fields}
        for pair in filter(None, body[1:-1].split(",")):
            key, sep, raw = pair.partition(":")
            if not sep:
                raise WriterError("invalid JSON pair format")
            key = _strip_quotes(key.strip(_TRIM))
            value = raw.strip(_TRIM)
            index = self.schema.field_index(key)
            if index is None:
                _LOG.warning("field '%s' not found in schema, ignoring", key)
                continue
            try:
                values[key] = parse_json_value(value, self.schema.fields[index].type)
            except WriterError as exc:
                raise WriterError(f"invalid value '{value}' for field '{key}'") from exc
        self.insert_row(values)

    def flush_chunk(self) -> None:
        """Write buffered rows to the file as one chunk."""
        stream = self._require_open()
        if not self._buffer:
            return
        data = b"".join(self._buffer)
        stream.write(_CHUNK_HEADER.pack(len(self._buffer), len(data)))
        stream.write(data)
        self.header.chunk_count += 1
        self.header.data_size += _CHUNK_HEADER.size + len(data)
        self._buffer.clear()
        self.current_chunk += 1

    def stats(self) -> tuple[int, int]:
        """Rows inserted so far and chunks written so far."""
        return self.total_rows, self.header.chunk_count

    def close(self) -> None:
        """Flush remaining rows, write the final header and close the file."""
        if self._stream is None:
            return
        self.flush_chunk()
        self.header.total_rows = self.total_rows
        stream = self._stream
        stream.seek(0)
        stream.write(self.header.pack())
        stream.close()
        self._stream = None

    def _abort(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        self._buffer.clear()

    def __enter__(self) -> "Writer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self._abort()


def normalize_filename(name: PathType) -> str:
    """Give a file name the database extension, replacing a '.db' suffix."""
    text = os.fspath(name)
    if not text:
        raise WriterError("empty filename")
    if text.endswith(FXDB_EXTENSION):
        return text
    if text.endswith(".db"):
        return text[: -len(".db")] + FXDB_EXTENSION
    return text + FXDB_EXTENSION


def database_exists(path: PathType) -> bool:
    return os.path.isfile(path)


def create_database(
    path: PathType, schema: Schema, config: WriterConfig | None = None
) -> str:
    """Create an empty database file and return its normalized path."""
    normalized = normalize_filename(path)
    if database_exists(normalized):
        raise FileExistsError(f"database '{normalized}' already exists")
    Writer.create(normalized, schema, config).close()
    return normalized


def open_writer(path: PathType, mode: OpenMode = OpenMode.APPEND) -> Writer:
    """Open a database for appending, honouring the create and exclusive flags."""
    normalized = normalize_filename(path)
    exists = database_exists(normalized)
    if OpenMode.CREATE in mode and OpenMode.EXCLUSIVE in mode and exists:
        raise FileExistsError(f"database '{normalized}' already exists")
    if OpenMode.CREATE not in mode and not exists:
        raise FileNotFoundError(f"database '{normalized}' does not exist")
    return Writer.open(normalized)