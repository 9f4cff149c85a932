import io
import struct

import pytest

from flexondb.data_types import FieldType
from flexondb.schema import (
    FXDB_MAGIC,
    MAX_FIELD_NAME_LEN,
    MAX_SCHEMA_FIELDS,
    Field,
    FileHeader,
    Schema,
    SchemaError,
    calculate_row_size,
    load_schema,
    parse_field_type,
    parse_schema,
    read_schema_section,
    save_schema,
    validate_schema,
)


def write_db(path, schema):
    header = FileHeader(schema_offset=FileHeader.SIZE)
    path.write_bytes(header.pack() + schema.encode())


def test_parse_basic_schema():
    schema = parse_schema("name string, age int32, salary float")
    assert [f.name for f in schema.fields] == ["name", "age", "salary"]
    assert [f.type for f in schema.fields] == [FieldType.STRING, FieldType.INT32, FieldType.FLOAT]
    assert schema.fields[0].size == 256
    assert schema.fields[1].size == 4
    assert schema.row_size == calculate_row_size(schema.fields)
    assert schema.raw == "name string, age int32, salary float"


def test_name_may_contain_spaces():
    schema = parse_schema("first name string")
    assert schema.fields[0].name == "first name"


def test_empty_tokens_are_skipped():
    schema = parse_schema("a int,,b bool,")
    assert [f.name for f in schema.fields] == ["a", "b"]


def test_field_limit_drops_extras():
    text = ", ".join(f"f{i} int" for i in range(MAX_SCHEMA_FIELDS + 5))
    assert len(parse_schema(text)) == MAX_SCHEMA_FIELDS


@pytest.mark.parametrize(
    "text",
    ["", "   ", "name", "name varchar", "a int, a bool", "x" * MAX_FIELD_NAME_LEN + " int"],
)
def test_invalid_schemas(text):
    with pytest.raises(SchemaError):
        parse_schema(text)


def test_parse_field_type():
    assert parse_field_type("string64") == (FieldType.STRING, 64)
    assert parse_field_type("bool") == (FieldType.BOOL, 1)
    assert parse_field_type("nope")[0] is FieldType.UNKNOWN


def test_validate_rejects_empty_and_duplicates():
    with pytest.raises(SchemaError):
        validate_schema(Schema(()))
    dup = Schema((Field("a", FieldType.BOOL, 1), Field("a", FieldType.BOOL, 1)))
    with pytest.raises(SchemaError):
        validate_schema(dup)


def test_field_index():
    schema = parse_schema("name string, age int32")
    assert schema.field_index("age") == 1
    assert schema.field_index("missing") is None


def test_describe_lists_fields():
    schema = parse_schema("name string, age int32")
    text = schema.describe()
    assert text.splitlines()[0] == f"Schema (2 fields, {schema.row_size} bytes per row):"
    assert "│ age" in text
    assert text.endswith("Raw schema: name string, age int32")


def test_header_round_trip():
    header = FileHeader(chunk_size=100, total_rows=7, chunk_count=1, schema_offset=FileHeader.SIZE)
    data = header.pack()
    assert len(data) == FileHeader.SIZE
    assert FileHeader.unpack(data) == header
    assert struct.unpack_from("<I", data)[0] == FXDB_MAGIC


def test_header_truncated():
    with pytest.raises(SchemaError):
        FileHeader.unpack(b"\x00" * 4)


def test_schema_section_round_trip():
    schema = parse_schema("name string, age int32, active bool")
    header = FileHeader(schema_offset=FileHeader.SIZE)
    stream = io.BytesIO(header.pack() + schema.encode())
    assert read_schema_section(stream, header) == schema


def test_schema_section_bad_type_code():
    header = FileHeader(schema_offset=0)
    data = struct.pack("<III", 1, 4, 0) + struct.pack("<32siI", b"a", 99, 4)
    with pytest.raises(SchemaError):
        read_schema_section(io.BytesIO(data), header)


def test_schema_section_truncated():
    header = FileHeader(schema_offset=0)
    with pytest.raises(SchemaError):
        read_schema_section(io.BytesIO(b"\x01\x00"), header)


def test_load_schema_round_trip(tmp_path):
    schema = parse_schema("name string, age int32")
    path = tmp_path / "db.fxdb"
    write_db(path, schema)
    assert load_schema(path) == schema


def test_load_schema_metadata_mismatch(tmp_path):
    schema = parse_schema("a int32")
    bad = Schema(schema.fields, schema.raw, row_size=schema.row_size + 1)
    path = tmp_path / "db.fxdb"
    write_db(path, bad)
    with pytest.raises(SchemaError):
        load_schema(path)


def test_load_schema_bad_magic(tmp_path):
    path = tmp_path / "db.fxdb"
    path.write_bytes(FileHeader(magic=0).pack())
    with pytest.raises(SchemaError):
        load_schema(path)


def test_load_schema_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_schema(tmp_path / "missing.fxdb")


def test_save_schema_replaces_section(tmp_path):
    path = tmp_path / "db.fxdb"
    write_db(path, parse_schema("a int32"))
    replacement = parse_schema("b int32")
    save_schema(path, replacement)
    assert load_schema(path) == replacement


def test_save_schema_rejects_foreign_file(tmp_path):
    path = tmp_path / "other.bin"
    path.write_bytes(b"\x00" * FileHeader.SIZE)
    with pytest.raises(SchemaError):
        save_schema(path, parse_schema("a int32"))