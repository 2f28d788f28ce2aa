"""
Decoders for gcov notes and data files.

Both decoders are folds over RecordReader output and share no state, so
the two files can be decoded independently.
"""

from .base import RecordDecoder
from .notes import NotesDecoder, NotesState, decode_notes
from .data import DataDecoder, DataState, decode_data

__all__ = [
    'RecordDecoder',
    'NotesDecoder',
    'NotesState',
    'decode_notes',
    'DataDecoder',
    'DataState',
    'decode_data',
]
