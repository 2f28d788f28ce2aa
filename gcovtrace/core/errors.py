"""
Error codes and exceptions for gcovtrace.

Every error is fatal to the run: coverage reports are expected to be exact,
so no partial tracefile is produced once one is raised.

Format: E{category}{number}
- E1xxx: Decode errors (notes/data file structure)
- E2xxx: Resolution errors (joining notes and data, flow solving)
- E3xxx: Configuration and input errors
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Structured error codes."""

    # E1xxx: Decode errors
    E1001_MAGIC_MISMATCH = "E1001"
    E1002_MALFORMED_STRING = "E1002"
    E1003_RECORD_LENGTH_MISMATCH = "E1003"
    E1004_MISSING_FUNCTION_CONTEXT = "E1004"
    E1005_DUPLICATE_FUNCTION = "E1005"
    E1006_INVALID_BLOCK_INDEX = "E1006"

    # E2xxx: Resolution errors
    E2001_CHECKSUM_MISMATCH = "E2001"
    E2002_COUNT_ARITY_MISMATCH = "E2002"
    E2003_UNRESOLVABLE_FLOW_GRAPH = "E2003"

    # E3xxx: Configuration and input errors
    E3001_INVALID_CONFIG = "E3001"
    E3002_INPUT_NOT_FOUND = "E3002"


ERROR_METADATA = {
    ErrorCode.E1001_MAGIC_MISMATCH: {
        'message': 'Invalid file magic number',
        'exit_status': 2,
    },
    ErrorCode.E1002_MALFORMED_STRING: {
        'message': 'Malformed length-prefixed string',
        'exit_status': 3,
    },
    ErrorCode.E1003_RECORD_LENGTH_MISMATCH: {
        'message': 'Record length does not match decoded content',
        'exit_status': 4,
    },
    ErrorCode.E1004_MISSING_FUNCTION_CONTEXT: {
        'message': 'Record appears before any function record',
        'exit_status': 5,
    },
    ErrorCode.E1005_DUPLICATE_FUNCTION: {
        'message': 'Function identifier declared twice',
        'exit_status': 9,
    },
    ErrorCode.E1006_INVALID_BLOCK_INDEX: {
        'message': 'Block index out of range',
        'exit_status': 10,
    },
    ErrorCode.E2001_CHECKSUM_MISMATCH: {
        'message': 'Data file does not match notes file',
        'exit_status': 6,
    },
    ErrorCode.E2002_COUNT_ARITY_MISMATCH: {
        'message': 'Raw count length differs from instrumented arc count',
        'exit_status': 7,
    },
    ErrorCode.E2003_UNRESOLVABLE_FLOW_GRAPH: {
        'message': 'Arc counts cannot be resolved from flow conservation',
        'exit_status': 8,
    },
    ErrorCode.E3001_INVALID_CONFIG: {
        'message': 'Invalid configuration',
        'exit_status': 1,
    },
    ErrorCode.E3002_INPUT_NOT_FOUND: {
        'message': 'Input file not found',
        'exit_status': 1,
    },
}


class GcovTraceError(Exception):
    """
    Base class for all gcovtrace errors.

    Attributes:
        detail: Human-readable description of this occurrence
        source: File (or buffer label) the error was found in
        tag: Record tag being decoded, if any
        offset: Byte offset of the offending record, if known

    Example:
        raise RecordLengthMismatch(
            "decoder consumed 12 bytes, record declares 16",
            source="foo.gcno", tag=0x01000000, offset=12,
        )
    """

    code = ErrorCode.E3001_INVALID_CONFIG

    def __init__(
        self,
        detail: str,
        source: Optional[str] = None,
        tag: Optional[int] = None,
        offset: Optional[int] = None,
    ):
        self.detail = detail
        self.source = source
        self.tag = tag
        self.offset = offset
        super().__init__(detail)

    def __str__(self) -> str:
        return self.message

    def locate(self, source: Optional[str] = None, tag: Optional[int] = None,
               offset: Optional[int] = None) -> 'GcovTraceError':
        """Fill in whichever location fields are still unknown."""
        if self.source is None:
            self.source = source
        if self.tag is None:
            self.tag = tag
        if self.offset is None:
            self.offset = offset
        return self

    @property
    def exit_status(self) -> int:
        return ERROR_METADATA.get(self.code, {}).get('exit_status', 1)

    @property
    def message(self) -> str:
        base_msg = ERROR_METADATA.get(self.code, {}).get('message', 'Unknown error')
        where = []
        if self.source:
            where.append(self.source)
        if self.tag is not None:
            where.append(f"tag 0x{self.tag:08x}")
        if self.offset is not None:
            where.append(f"offset {self.offset}")
        prefix = f"[{', '.join(where)}] " if where else ""
        return f"{prefix}{base_msg}: {self.detail}"

    def to_dict(self) -> dict:
        return {
            'code': self.code.value,
            'message': self.message,
            'exit_status': self.exit_status,
            'source': self.source,
            'tag': self.tag,
            'offset': self.offset,
        }


class MagicMismatch(GcovTraceError):
    """Wrong file type or non-matching byte order."""
    code = ErrorCode.E1001_MAGIC_MISMATCH


class MalformedString(GcovTraceError):
    """Invalid UTF-8 or truncated length-prefixed field."""
    code = ErrorCode.E1002_MALFORMED_STRING


class RecordLengthMismatch(GcovTraceError):
    """Decoder consumed a different byte count than the record declares."""
    code = ErrorCode.E1003_RECORD_LENGTH_MISMATCH


class MissingFunctionContext(GcovTraceError):
    """Blocks/Arcs/Lines/Counts record seen before any function record."""
    code = ErrorCode.E1004_MISSING_FUNCTION_CONTEXT


class DuplicateFunction(GcovTraceError):
    code = ErrorCode.E1005_DUPLICATE_FUNCTION


class InvalidBlockIndex(GcovTraceError):
    code = ErrorCode.E1006_INVALID_BLOCK_INDEX


class ChecksumMismatch(GcovTraceError):
    """Data file does not correspond to the given notes file."""
    code = ErrorCode.E2001_CHECKSUM_MISMATCH


class CountArityMismatch(GcovTraceError):
    """Raw-count sequence length differs from the instrumented-arc count."""
    code = ErrorCode.E2002_COUNT_ARITY_MISMATCH


class UnresolvableFlowGraph(GcovTraceError):
    """Conservation fixed point fails to resolve every arc."""
    code = ErrorCode.E2003_UNRESOLVABLE_FLOW_GRAPH


class ConfigError(GcovTraceError):
    code = ErrorCode.E3001_INVALID_CONFIG


class InputNotFound(GcovTraceError):
    code = ErrorCode.E3002_INPUT_NOT_FOUND
