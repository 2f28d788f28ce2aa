"""
gcovtrace - line and function coverage from gcov notes/data files.

This package provides:
- formats: File header, record tags and tagged-record framing
- decoders: Notes (.gcno) and data (.gcda) decoders
- core: Graph/count models, flow resolution and tracefile rendering
- config: YAML configuration with environment variable support
- pipeline: File-level capture and tracefile writing
- cli: Command-line interface
"""

__version__ = "1.0.0"

from .core import (
    GcovTraceError,
    NotesModel,
    DataModel,
    CoverageModel,
    FlowResolver,
    TracefileWriter,
    resolve,
    render,
)
from .formats import FileHeader, HEADER_SIZE, NOTES_MAGIC, DATA_MAGIC, Tag, RecordReader
from .decoders import NotesDecoder, DataDecoder, decode_notes, decode_data
from .config import GcovTraceConfig, load_config
from .pipeline import capture, write_tracefile

__all__ = [
    # Version
    '__version__',
    # Formats
    'FileHeader',
    'HEADER_SIZE',
    'NOTES_MAGIC',
    'DATA_MAGIC',
    'Tag',
    'RecordReader',
    # Decoders
    'NotesDecoder',
    'DataDecoder',
    'decode_notes',
    'decode_data',
    # Core
    'GcovTraceError',
    'NotesModel',
    'DataModel',
    'CoverageModel',
    'FlowResolver',
    'TracefileWriter',
    'resolve',
    'render',
    # Config
    'GcovTraceConfig',
    'load_config',
    # Pipeline
    'capture',
    'write_tracefile',
]
