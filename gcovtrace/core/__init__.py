"""Core model, flow resolution and tracefile rendering."""

from .errors import (
    ErrorCode,
    ERROR_METADATA,
    GcovTraceError,
    MagicMismatch,
    MalformedString,
    RecordLengthMismatch,
    MissingFunctionContext,
    DuplicateFunction,
    InvalidBlockIndex,
    ChecksumMismatch,
    CountArityMismatch,
    UnresolvableFlowGraph,
    ConfigError,
    InputNotFound,
)
from .counts import FunctionCounts, DataModel
from .coverage import LineHit, FunctionHit, FileCoverage, CoverageModel
from .graph import SourceLine, Arc, Block, FunctionGraph, NotesModel
from .resolver import (
    ResolvedFunction,
    FlowResolver,
    assign_counts,
    solve_flow,
    resolve_function,
    resolve,
)
from .report import TracefileWriter, render

__all__ = [
    # Errors
    'ErrorCode',
    'ERROR_METADATA',
    'GcovTraceError',
    'MagicMismatch',
    'MalformedString',
    'RecordLengthMismatch',
    'MissingFunctionContext',
    'DuplicateFunction',
    'InvalidBlockIndex',
    'ChecksumMismatch',
    'CountArityMismatch',
    'UnresolvableFlowGraph',
    'ConfigError',
    'InputNotFound',
    # Model
    'FunctionCounts',
    'DataModel',
    'LineHit',
    'FunctionHit',
    'FileCoverage',
    'CoverageModel',
    'SourceLine',
    'Arc',
    'Block',
    'FunctionGraph',
    'NotesModel',
    # Resolution
    'ResolvedFunction',
    'FlowResolver',
    'assign_counts',
    'solve_flow',
    'resolve_function',
    'resolve',
    # Report
    'TracefileWriter',
    'render',
]
