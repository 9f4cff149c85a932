"""Extended column type system and its mapping onto stored field types."""

from __future__ import annotations

from enum import IntEnum


class DataType(IntEnum):
    """Every column type the schema language understands."""

    STRING16 = 0
    STRING32 = 1
    STRING64 = 2
    STRING128 = 3
    STRING256 = 4
    STRING512 = 5
    TEXT = 6
    INT8 = 7
    INT16 = 8
    INT32 = 9
    INT64 = 10
    UINT8 = 11
    UINT16 = 12
    UINT32 = 13
    UINT64 = 14
    FLOAT32 = 15
    FLOAT64 = 16
    DECIMAL = 17
    BOOL = 18
    TIMESTAMP = 19
    DATE = 20
    UUID = 21
    JSON = 22
    BLOB = 23
    UNKNOWN = 255


class FieldType(IntEnum):
    """The storage type recorded for each field in a database file."""

    INT32 = 0
    FLOAT = 1
    STRING = 2
    BOOL = 3
    UNKNOWN = 4


_SIZES = {
    DataType.STRING16: 16,
    DataType.STRING32: 32,
    DataType.STRING64: 64,
    DataType.STRING128: 128,
    DataType.STRING256: 256,
    DataType.STRING512: 512,
    DataType.TEXT: 1024,
    DataType.INT8: 1,
    DataType.INT16: 2,
    DataType.INT32: 4,
    DataType.INT64: 8,
    DataType.UINT8: 1,
    DataType.UINT16: 2,
    DataType.UINT32: 4,
    DataType.UINT64: 8,
    DataType.FLOAT32: 4,
    DataType.FLOAT64: 8,
    DataType.DECIMAL: 16,
    DataType.BOOL: 1,
    DataType.TIMESTAMP: 8,
    DataType.DATE: 4,
    DataType.UUID: 36,
    DataType.JSON: 1024,
    DataType.BLOB: 1024,
}

_NAMES = {
    DataType.STRING16: "string16",
    DataType.STRING32: "string32",
    DataType.STRING64: "string64",
    DataType.STRING128: "string128",
    DataType.STRING256: "string256",
    DataType.STRING512: "string512",
    DataType.TEXT: "text",
    DataType.INT8: "int8",
    DataType.INT16: "int16",
    DataType.INT32: "int32",
    DataType.INT64: "int64",
    DataType.UINT8: "uint8",
    DataType.UINT16: "uint16",
    DataType.UINT32: "uint32",
    DataType.UINT64: "uint64",
    DataType.FLOAT32: "float32",
    DataType.FLOAT64: "float64",
    DataType.DECIMAL: "decimal",
    DataType.BOOL: "bool",
    DataType.TIMESTAMP: "timestamp",
    DataType.DATE: "date",
    DataType.UUID: "uuid",
    DataType.JSON: "json",
    DataType.BLOB: "blob",
}

_PARSE = {name: data_type for data_type, name in _NAMES.items()}
_PARSE.update(
    {
        "string": DataType.STRING256,
        "int": DataType.INT32,
        "float": DataType.FLOAT32,
        "double": DataType.FLOAT64,
        "num": DataType.FLOAT32,
        "bignum": DataType.FLOAT64,
    }
)

_FIELD_TYPE_NAMES = {
    FieldType.INT32: "int32",
    FieldType.FLOAT: "float",
    FieldType.STRING: "string",
    FieldType.BOOL: "bool",
}


def type_size(data_type: DataType) -> int:
    """Storage size in bytes of a column type; 0 for unknown types."""
    return _SIZES.get(data_type, 0)


def type_name(data_type: DataType) -> str:
    """Display name of a column type."""
    return _NAMES.get(data_type, "unknown")


def parse_type(text: str | None) -> DataType:
    """Parse a type name, accepting the short aliases; UNKNOWN if unrecognised."""
    if text is None:
        return DataType.UNKNOWN
    return _PARSE.get(text, DataType.UNKNOWN)


def is_string_type(data_type: DataType) -> bool:
    return DataType.STRING16 <= data_type <= DataType.TEXT


def is_integer_type(data_type: DataType) -> bool:
    return DataType.INT8 <= data_type <= DataType.UINT64


def is_float_type(data_type: DataType) -> bool:
    return DataType.FLOAT32 <= data_type <= DataType.DECIMAL


def string_type_length(data_type: DataType) -> int:
    """Maximum length of a string type, or 0 for non-string types."""
    if not is_string_type(data_type):
        return 0
    return _SIZES.get(data_type, 256)


def to_field_type(data_type: DataType) -> FieldType:
    """Map a column type onto the storage type used in database files."""
    if is_string_type(data_type) or data_type in (
        DataType.UUID,
        DataType.JSON,
        DataType.BLOB,
    ):
        return FieldType.STRING
    if is_integer_type(data_type) or data_type in (DataType.TIMESTAMP, DataType.DATE):
        return FieldType.INT32
    if is_float_type(data_type):
        return FieldType.FLOAT
    if data_type == DataType.BOOL:
        return FieldType.BOOL
    return FieldType.UNKNOWN


def field_type_name(field_type: FieldType) -> str:
    """Display name of a storage type."""
    return _FIELD_TYPE_NAMES.get(field_type, "unknown")