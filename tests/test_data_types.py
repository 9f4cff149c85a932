import pytest

from flexondb.data_types import (
    DataType,
    FieldType,
    field_type_name,
    is_float_type,
    is_integer_type,
    is_string_type,
    parse_type,
    string_type_length,
    to_field_type,
    type_name,
    type_size,
)

KNOWN = [t for t in DataType if t is not DataType.UNKNOWN]


@pytest.mark.parametrize(
    "data_type, size",
    [
        (DataType.STRING16, 16),
        (DataType.STRING256, 256),
        (DataType.TEXT, 1024),
        (DataType.UUID, 36),
        (DataType.DECIMAL, 16),
        (DataType.BOOL, 1),
    ],
)
def test_type_size_matches_table(data_type, size):
    assert type_size(data_type) == size


def test_unknown_type_has_no_size_and_name():
    assert type_size(DataType.UNKNOWN) == 0
    assert type_name(DataType.UNKNOWN) == "unknown"


@pytest.mark.parametrize("data_type", KNOWN)
def test_name_round_trips_through_parser(data_type):
    assert parse_type(type_name(data_type)) is data_type


@pytest.mark.parametrize(
    "alias, expected",
    [
        ("string", DataType.STRING256),
        ("int", DataType.INT32),
        ("float", DataType.FLOAT32),
        ("double", DataType.FLOAT64),
        ("num", DataType.FLOAT32),
        ("bignum", DataType.FLOAT64),
    ],
)
def test_aliases(alias, expected):
    assert parse_type(alias) is expected


@pytest.mark.parametrize("text", [None, "", "varchar", "INT32", " int"])
def test_unrecognised_types(text):
    assert parse_type(text) is DataType.UNKNOWN


@pytest.mark.parametrize("data_type", KNOWN)
def test_categories_are_exclusive(data_type):
    flags = [is_string_type(data_type), is_integer_type(data_type), is_float_type(data_type)]
    assert sum(flags) <= 1


def test_category_membership():
    assert is_string_type(DataType.TEXT)
    assert is_integer_type(DataType.UINT64)
    assert is_float_type(DataType.DECIMAL)
    assert not is_string_type(DataType.UUID)
    assert not is_integer_type(DataType.BOOL)


@pytest.mark.parametrize("data_type", KNOWN)
def test_string_length(data_type):
    if is_string_type(data_type):
        assert string_type_length(data_type) == type_size(data_type)
    else:
        assert string_type_length(data_type) == 0


def test_storage_mapping():
    assert to_field_type(DataType.STRING32) is FieldType.STRING
    assert to_field_type(DataType.INT8) is FieldType.INT32
    assert to_field_type(DataType.FLOAT64) is FieldType.FLOAT
    assert to_field_type(DataType.BOOL) is FieldType.BOOL
    assert to_field_type(DataType.UNKNOWN) is FieldType.UNKNOWN


def test_field_type_names():
    assert field_type_name(FieldType.INT32) == "int32"
    assert field_type_name(FieldType.FLOAT) == "float"
    assert field_type_name(FieldType.STRING) == "string"
    assert field_type_name(FieldType.BOOL) == "bool"
    assert field_type_name(FieldType.UNKNOWN) == "unknown"