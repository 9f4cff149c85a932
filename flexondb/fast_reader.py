"""Random-access row reading with optional memory mapping."""

from __future__ import annotations

import bisect
import mmap
import struct
from typing import BinaryIO, Iterator

from .reader import ReaderError, Row, deserialize_row
from .schema import FXDB_MAGIC, FileHeader, PathType, SchemaError, read_schema_section
from .writer import normalize_filename

_CHUNK_HEADER = struct.Struct("<II")


class FastReader:
    """Reads rows by position, from a memory map when one can be made."""

    def __init__(self, path: PathType, use_mmap: bool = True) -> None:
        self.path = normalize_filename(path)
        self._file: BinaryIO | None = open(self.path, "rb")
        self._map: mmap.mmap | None = None
        try:
            if use_mmap:
                try:
                    self._map = mmap.mmap(self._file.fileno(), 0, access=mmap.ACCESS_READ)
                except (ValueError, OSError):
                    self._map = None
            self.header = self._load_header()
            self.schema = read_schema_section(self._source(), self.header)
            self._first_rows: list[int] = []
            self._chunks: list[tuple[int, int]] = []
            self._index_chunks()
        except SchemaError as exc:
            self.close()
            raise ReaderError(f"cannot load schema from '{self.path}': {exc}") from exc
        except BaseException:
            self.close()
            raise
        self.total_rows = self.header.total_rows
        self.current_row = 0

    @property
    def use_mmap(self) -> bool:
        """Whether rows are read from a memory map rather than by file reads."""
        return self._map is not None

    @property
    def closed(self) -> bool:
        return self._file is None

    def _source(self):
        if self._map is not None:
            return self._map
        if self._file is None:
            raise ReaderError("reader is closed")
        return self._file

    def _read_at(self, offset: int, size: int) -> bytes:
        if self._file is None:
            raise ReaderError("reader is closed")
        if self._map is not None:
            return self._map[offset : offset + size]
        self._file.seek(offset)
        return self._file.read(size)

    def _load_header(self) -> FileHeader:
        data = self._read_at(0, FileHeader.SIZE)
        if len(data) < FileHeader.SIZE:
            raise ReaderError("cannot read file header")
        header = FileHeader.unpack(data)
        if header.magic != FXDB_MAGIC:
            raise ReaderError("invalid file format (magic number mismatch)")
        return header

    def _index_chunks(self) -> None:
        position = self.header.data_offset
        first = 0
        for index in range(self.header.chunk_count):
            data = self._read_at(position, _CHUNK_HEADER.size)
            if len(data) != _CHUNK_HEADER.size:
                raise ReaderError(f"truncated header of chunk {index}")
            rows, size = _CHUNK_HEADER.unpack(data)
            self._first_rows.append(first)
            self._chunks.append((position + _CHUNK_HEADER.size, rows))
            first += rows
            position += _CHUNK_HEADER.size + size

    def _row_offset(self, row_number: int) -> int:
        index = bisect.bisect_right(self._first_rows, row_number) - 1
        if index < 0:
            raise ReaderError(f"row {row_number} is not stored in any chunk")
        data_start, rows = self._chunks[index]
        in_chunk = row_number - self._first_rows[index]
        if in_chunk >= rows:
            raise ReaderError(f"row {row_number} is not stored in any chunk")
        return data_start + in_chunk * self.schema.row_size

    def read_row(self) -> Row | None:
        """The next row, or None once every row has been read."""
        if self.closed:
            raise ReaderError("reader is closed")
        if self.current_row >= self.total_rows:
            return None
        offset = self._row_offset(self.current_row)
        row = deserialize_row(self.schema, self._read_at(offset, self.schema.row_size))
        self.current_row += 1
        return row

    def seek_row(self, row_number: int) -> None:
        """Position the reader so the next row read is the given one."""
        if self.closed:
            raise ReaderError("reader is closed")
        if not 0 <= row_number < self.total_rows:
            raise ReaderError(
                f"row number {row_number} exceeds total rows ({self.total_rows})"
            )
        self.current_row = row_number

    def close(self) -> None:
        if self._map is not None:
            self._map.close()
            self._map = None
        if self._file is not None:
            self._file.close()
            self._file = None

    def __iter__(self) -> Iterator[Row]:
        while (row := self.read_row()) is not None:
            yield row

    def __enter__(self) -> "FastReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()