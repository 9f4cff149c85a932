# flexondb

`flexondb` stores rows of typed records in a compact binary file with the
`.fxdb` extension. Each file starts with a fixed header, followed by a schema
section and then the data, written in chunks of fixed-size rows.

The package needs nothing beyond the Python standard library.

## Schemas

A schema is a comma-separated list of `name type` pairs:

```python
from flexondb.schema import parse_schema

schema = parse_schema("name string, age int32, salary float, active bool")
print(schema.describe())
```

Type names are defined in `flexondb.data_types`: sized strings (`string16` …
`string512`, `text`, with `string` meaning `string256`), integers (`int8` …
`uint64`, `int` meaning `int32`), floats (`float32`, `float64`, `decimal` and
the aliases `float`, `double`, `num`, `bignum`) and `bool`, `timestamp`,
`date`, `uuid`, `json`, `blob`. `parse_type`, `type_name` and `type_size` map
between names, `DataType` members and their sizes. On disk every column is
stored as one of four `FieldType`s — `INT32`, `FLOAT` (32-bit), `STRING`
(fixed width) or `BOOL` — chosen by `to_field_type`.

`parse_schema` raises `SchemaError` for an empty schema, a field without a
type, an unknown type, a field name of 32 bytes or more, or a duplicate name.
At most 64 fields are read. `load_schema` reads the schema of an existing
file and `save_schema` rewrites a file's schema section.

## Writing

```python
from flexondb.schema import parse_schema
from flexondb.writer import Writer, WriterConfig

schema = parse_schema("name string, age int32, department string")

with Writer.create("people.fxdb", schema, WriterConfig()) as writer:
    writer.insert_json('{"name": "Alice", "age": 30, "department": "Engineering"}')
    writer.insert_row({"name": "Bob", "age": 25, "department": "Marketing"})
```

`insert_row` takes a mapping with a value for every field. `insert_json`
accepts a flat object of scalar values; fields it does not mention get a
default (empty string, `0`, `0.0`, `False`) and unknown keys are logged and
ignored. It splits on commas, so string values must not contain commas.

Rows are buffered and written one chunk at a time (`WriterConfig.chunk_size`,
1000 by default). Closing the writer — or leaving the `with` block without an
exception — flushes the last chunk and rewrites the header with the final row
and chunk counts. `stats()` returns the rows inserted and chunks written.

To add rows to an existing file, open it for appending:

```python
with Writer.open("people.fxdb") as writer:
    writer.insert_json('{"name": "Carol", "age": 35, "department": "Sales"}')
```

`normalize_filename` gives every name the `.fxdb` extension (`"test"` and
`"test.db"` both become `"test.fxdb"`), and `database_exists` checks for a
file on disk. `create_database` creates an empty database under the
normalized name, returns that name, and raises `FileExistsError` if it
already exists. `open_writer` opens a database for appending and honours the
`OpenMode.CREATE` and `OpenMode.EXCLUSIVE` flags as checks: it raises
`FileExistsError` for an exclusive open of an existing file and
`FileNotFoundError` when the file is missing and `CREATE` is not given.

## Reading

```python
from flexondb.reader import Reader

with Reader("people.fxdb") as reader:
    rows = reader.read_rows(10)
    print(reader.format_rows(rows))
```

A `Reader` walks the file chunk by chunk and returns each row as a dict from
field name to value. Iterate over it to get every row, use `read_row` for one
at a time, or `seek_row` to jump to a row number. `row_count()` and `stats()`
report the totals recorded in the header, and `format_row` prints a single
row as `field: value` lines.

`flexondb.fast_reader.FastReader` reads the same files by row position. It
normalizes the file name first, and reads through a memory map when
`use_mmap` is true and mapping succeeds, otherwise through ordinary file
reads; its `use_mmap` property tells which.

## Terminal and file-system helpers

- `flexondb.colors` decides whether coloured output should be used, honouring
  the `NO_COLOR` and `FORCE_COLOR` environment variables and the terminal
  type, and writes text wrapped in ANSI colour codes with `print_colored` and
  `print_colored_err`.
- `flexondb.terminal` provides `LineEditor`, a prompt-and-read-line helper
  with an in-memory, optionally bounded history that can be saved to and
  loaded from a file, plus `supports_colors()`, `terminal_width()` and
  `terminal_height()` (80 × 24 when the size cannot be found).
- `flexondb.filesystem` offers file queries (`file_exists`, `file_info`,
  `list_directory`), directory management (`create_directories`,
  `remove_directory`) and path string helpers (`path_join`, `path_dirname`,
  `path_basename`, `path_extension`, `path_absolute`).

## Errors

Problems are reported as exceptions: `SchemaError` for schemas and schema
sections, `WriterError` for writing and `ReaderError` for reading, including
files that are not `.fxdb` databases or, for `Reader`, were written with
another format version. Missing files raise the usual `FileNotFoundError`.

## What it does not do

There is no command-line program and no interactive shell: the package is a
library, and `LineEditor` is only a building block for a prompt. There is no
query language, filtering, updating or deleting of rows. The
`use_compression` and `build_index` settings of `WriterConfig` are accepted
but data is never compressed and no index is built.