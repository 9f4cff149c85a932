"""Schema-based chunked binary database files (.fxdb): schemas, writing, reading and terminal helpers."""

__version__ = "1.0.0"