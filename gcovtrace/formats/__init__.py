"""Binary framing shared by gcov notes and data files."""

from .tags import Tag, ArcFlag, NOTES_MAGIC, DATA_MAGIC
from .file_header import FileHeader, HEADER_SIZE
from .records import Record, RecordReader, PayloadCursor, decode_string

__all__ = [
    'Tag',
    'ArcFlag',
    'NOTES_MAGIC',
    'DATA_MAGIC',
    'FileHeader',
    'HEADER_SIZE',
    'Record',
    'RecordReader',
    'PayloadCursor',
    'decode_string',
]
