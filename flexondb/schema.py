"""Schema parsing and the on-disk header and schema sections."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from itertools import islice
from os import PathLike
from typing import BinaryIO, ClassVar, Iterable, Union

from .data_types import FieldType, field_type_name, parse_type, to_field_type, type_size

MAX_FIELD_NAME_LEN = 32
MAX_SCHEMA_FIELDS = 64
FXDB_MAGIC = 0x46584442
FXDB_VERSION = 1

_WHITESPACE = " \t\n\r\v\f"
_DEFAULT_SIZES = {
    FieldType.INT32: 4,
    FieldType.FLOAT: 4,
    FieldType.STRING: 256,
    FieldType.BOOL: 1,
}
_PREFIX = struct.Struct("<III")
_FIELD = struct.Struct(f"<{MAX_FIELD_NAME_LEN}siI")

PathType = Union[str, "PathLike[str]"]


class SchemaError(ValueError):
    """Raised for an invalid schema or a malformed schema section."""


@dataclass(frozen=True)
class Field:
    name: str
    type: FieldType
    size: int


@dataclass(frozen=True)
class Schema:
    """An ordered set of fields together with the text it was parsed from."""

    fields: tuple[Field, ...]
    raw: str = ""
    row_size: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        if self.row_size is None:
            object.__setattr__(self, "row_size", calculate_row_size(self.fields))

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self):
        return iter(self.fields)

    def field_index(self, name: str) -> int | None:
        """Position of the named field, or None if it is not in the schema."""
        for index, field in enumerate(self.fields):
            if field.name == name:
                return index
        return None

    def describe(self) -> str:
        """A table listing every field with its type and size."""
        lines = [
            f"Schema ({len(self.fields)} fields, {self.row_size} bytes per row):",
            "┌─────────────────────────────────┬──────────┬───────────┐",
            "│ Field Name                      │ Type     │ Size (B)  │",
            "├─────────────────────────────────┼──────────┼───────────┤",
        ]
        lines.extend(
            f"│ {f.name:<31} │ {field_type_name(f.type):<8} │ {f.size:<9} │"
            for f in self.fields
        )
        lines.append("└─────────────────────────────────┴──────────┴───────────┘")
        if self.raw:
            lines.append(f"Raw schema: {self.raw}")
        return "\n".join(lines)

    def encode(self) -> bytes:
        """The schema section as stored in a database file."""
        raw = self.raw.encode("utf-8")
        parts = [_PREFIX.pack(len(self.fields), self.row_size, len(raw)), raw]
        parts.extend(
            _FIELD.pack(f.name.encode("utf-8"), int(f.type), f.size) for f in self.fields
        )
        return b"".join(parts)


@dataclass
class FileHeader:
    """Fixed-size header at the start of every database file."""

    magic: int = FXDB_MAGIC
    version: int = FXDB_VERSION
    chunk_size: int = 0
    total_rows: int = 0
    chunk_count: int = 0
    schema_offset: int = 0
    schema_size: int = 0
    data_offset: int = 0
    data_size: int = 0
    index_offset: int = 0
    index_size: int = 0

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<IIIIIQQQQQQ")
    SIZE: ClassVar[int] = _STRUCT.size

    def pack(self) -> bytes:
        return self._STRUCT.pack(
            self.magic,
            self.version,
            self.chunk_size,
            self.total_rows,
            self.chunk_count,
            self.schema_offset,
            self.schema_size,
            self.data_offset,
            self.data_size,
            self.index_offset,
            self.index_size,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "FileHeader":
        if len(data) < cls.SIZE:
            raise SchemaError("truncated file header")
        return cls(*cls._STRUCT.unpack(data[: cls.SIZE]))


def parse_field_type(text: str) -> tuple[FieldType, int]:
    """Storage type and byte size for a type name."""
    data_type = parse_type(text)
    return to_field_type(data_type), type_size(data_type)


def calculate_row_size(fields: Iterable[Field]) -> int:
    return sum(field.size for field in fields)


def validate_schema(schema: Schema) -> None:
    """Raise SchemaError if the schema has no fields or repeats a name."""
    if not schema.fields:
        raise SchemaError("schema has no fields")
    seen: set[str] = set()
    for field in schema.fields:
        if field.name in seen:
            raise SchemaError(f"duplicate field name '{field.name}'")
        seen.add(field.name)


def _parse_field(token: str) -> Field:
    token = token.strip(_WHITESPACE)
    head, sep, tail = token.rpartition(" ")
    if not sep:
        raise SchemaError(f"invalid field definition '{token}'")
    name = head.strip(_WHITESPACE)
    type_text = tail.strip(_WHITESPACE)
    if len(name.encode("utf-8")) >= MAX_FIELD_NAME_LEN:
        raise SchemaError(f"field name '{name}' too long")
    field_type, size = parse_field_type(type_text)
    if field_type is FieldType.UNKNOWN:
        raise SchemaError(f"unknown field type '{type_text}'")
    return Field(name, field_type, size or _DEFAULT_SIZES[field_type])


def parse_schema(text: str) -> Schema:
    """Parse a definition such as "name string, age int32, salary float"."""
    if not text:
        raise SchemaError("empty schema string")
    tokens = (token for token in text.split(",") if token)
    fields = tuple(_parse_field(token) for token in islice(tokens, MAX_SCHEMA_FIELDS))
    if not fields:
        raise SchemaError("no valid fields found in schema")
    schema = Schema(fields, text)
    validate_schema(schema)
    return schema


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise SchemaError(f"cannot read {what}")
    return data


def _read_prefix(stream: BinaryIO) -> tuple[int, int, str]:
    count, row_size, raw_len = _PREFIX.unpack(
        _read_exact(stream, _PREFIX.size, "schema metadata")
    )
    raw = _read_exact(stream, raw_len, "schema string").decode("utf-8", errors="replace")
    return count, row_size, raw


def _read_header(stream: BinaryIO) -> FileHeader:
    header = FileHeader.unpack(stream.read(FileHeader.SIZE))
    if header.magic != FXDB_MAGIC:
        raise SchemaError("invalid file format - not a FlexonDB file")
    return header


def read_schema_section(stream: BinaryIO, header: FileHeader) -> Schema:
    """Read the schema section, taking field definitions as stored."""
    stream.seek(header.schema_offset)
    count, row_size, raw = _read_prefix(stream)
    fields = []
    for _ in range(count):
        name, code, size = _FIELD.unpack(_read_exact(stream, _FIELD.size, "field definition"))
        try:
            field_type = FieldType(code)
        except ValueError:
            raise SchemaError(f"unknown field type code {code}") from None
        name_text = name.split(b"\0", 1)[0].decode("utf-8", errors="replace")
        fields.append(Field(name_text, field_type, size))
    return Schema(tuple(fields), raw, row_size)


def load_schema(path: PathType) -> Schema:
    """Load a database file's schema by re-parsing its stored definition."""
    with open(path, "rb") as stream:
        header = _read_header(stream)
        stream.seek(header.schema_offset)
        count, row_size, raw = _read_prefix(stream)
    schema = parse_schema(raw)
    if len(schema.fields) != count or schema.row_size != row_size:
        raise SchemaError(f"schema validation failed for '{path}'")
    return schema


def save_schema(path: PathType, schema: Schema) -> None:
    """Overwrite the schema section of an existing database file."""
    with open(path, "r+b") as stream:
        header = _read_header(stream)
        stream.seek(header.schema_offset)
        stream.write(schema.encode())