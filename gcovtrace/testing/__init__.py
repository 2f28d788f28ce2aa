"""Synthetic notes/data file builders for tests and bug reports."""

from .builders import (
    NotesBuilder,
    DataBuilder,
    encode_string,
    encode_record,
    encode_u32,
)

__all__ = [
    'NotesBuilder',
    'DataBuilder',
    'encode_string',
    'encode_record',
    'encode_u32',
]
