"""
Data (.gcda) file decoder.

Record grammar after the header:

    (FUNCTION | COUNTS | other)* END_OF_FILE

FUNCTION references a function of the companion notes file by id and makes
it current; COUNTS carries the arc counters of the current function as
little-endian u64 values. Only single-run arc counters are decoded; summary
records, other counter kinds and multi-run merge records are skipped.

A FUNCTION record with an empty payload is written for functions that
were not emitted; it clears the current function.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Optional

from .base import RecordDecoder
from ..core.counts import DataModel, FunctionCounts
from ..core.errors import DuplicateFunction, MissingFunctionContext
from ..formats.file_header import FileHeader
from ..formats.records import Handler, Record
from ..formats.tags import DATA_MAGIC, Tag


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DataState:
    """Fold accumulator for the data decoder."""
    model: DataModel
    current: Optional[FunctionCounts] = None


class DataDecoder(RecordDecoder[DataState, DataModel]):
    """Decodes a data file into a DataModel."""

    MAGIC = DATA_MAGIC
    DEFAULT_SOURCE = '<data>'

    def initial_state(self, header: FileHeader) -> DataState:
        return DataState(model=DataModel(
            source=self.source, version=header.version, stamp=header.stamp,
        ))

    def handlers(self) -> Dict[int, Handler]:
        return {
            Tag.FUNCTION: self._on_function,
            Tag.COUNTS: self._on_counts,
        }

    def finish(self, state: DataState) -> DataModel:
        logger.debug(f"{self.source}: counters for {len(state.model)} functions")
        return state.model

    def _on_function(self, state: DataState, record: Record):
        if record.length == 0:
            return 0, replace(state, current=None)

        cursor = record.cursor(self.source)
        reference = FunctionCounts(
            identifier=cursor.read_u32(),
            line_checksum=cursor.read_u32(),
            config_checksum=cursor.read_u32(),
        )
        if reference.identifier in state.model.functions:
            raise DuplicateFunction(
                f"identifier {reference.identifier} referenced twice",
                tag=record.tag, offset=record.offset,
            )
        state.model.functions[reference.identifier] = reference
        return cursor.consumed, replace(state, current=reference)

    def _on_counts(self, state: DataState, record: Record):
        if state.current is None:
            raise MissingFunctionContext(
                "COUNTS record before any FUNCTION record",
                tag=record.tag, offset=record.offset,
            )
        cursor = record.cursor(self.source)
        while not cursor.at_end:
            state.current.counts.append(cursor.read_u64())
        return cursor.consumed, state


def decode_data(buffer: bytes, source: Optional[str] = None) -> DataModel:
    """
    Decode a data file held in memory.

    Args:
        buffer: Complete file contents
        source: File name used in error messages

    Returns:
        DataModel mapping function id to its raw counters

    Raises:
        GcovTraceError: On any structural problem in the file
    """
    return DataDecoder(source).decode(buffer)
