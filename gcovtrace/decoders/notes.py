"""
Notes (.gcno) file decoder.

Record grammar after the header:

    (FUNCTION | BLOCKS | ARCS | LINES | other)* END_OF_FILE

FUNCTION opens a new function and makes it current; BLOCKS, ARCS and
LINES always describe the current function.

Payload layouts (u32 words unless noted):

    FUNCTION: ident, line_checksum, cfg_checksum, name (string),
              source (string), start_line
    BLOCKS:   one flags word per block (only the count is kept)
    ARCS:     source_block, then (destination_block, flags) pairs
    LINES:    block, then entries: a nonzero word is a line number; a zero
              word is followed by a filename string that applies to the
              lines after it, and a filename of length zero ends the record
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Optional

from .base import RecordDecoder
from ..core.errors import MissingFunctionContext
from ..core.graph import FunctionGraph, NotesModel, SourceLine
from ..formats.file_header import FileHeader
from ..formats.records import Handler, Record
from ..formats.tags import NOTES_MAGIC, Tag


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotesState:
    """
    Fold accumulator for the notes decoder.

    Attributes:
        model: Functions decoded so far
        current: Function that BLOCKS/ARCS/LINES records attach to
    """
    model: NotesModel
    current: Optional[FunctionGraph] = None

    def require_current(self, record: Record) -> FunctionGraph:
        if self.current is None:
            raise MissingFunctionContext(
                f"{Tag.name(record.tag)} record before any FUNCTION record",
                tag=record.tag, offset=record.offset,
            )
        return self.current


class NotesDecoder(RecordDecoder[NotesState, NotesModel]):
    """Decodes a notes file into a NotesModel."""

    MAGIC = NOTES_MAGIC
    DEFAULT_SOURCE = '<notes>'

    def initial_state(self, header: FileHeader) -> NotesState:
        return NotesState(model=NotesModel(
            source=self.source, version=header.version, stamp=header.stamp,
        ))

    def handlers(self) -> Dict[int, Handler]:
        return {
            Tag.FUNCTION: self._on_function,
            Tag.BLOCKS: self._on_blocks,
            Tag.ARCS: self._on_arcs,
            Tag.LINES: self._on_lines,
        }

    def finish(self, state: NotesState) -> NotesModel:
        logger.debug(
            f"{self.source}: {len(state.model)} functions, "
            f"{len(state.model.source_paths)} source files"
        )
        return state.model

    def _on_function(self, state: NotesState, record: Record):
        cursor = record.cursor(self.source)
        function = FunctionGraph(
            identifier=cursor.read_u32(),
            line_checksum=cursor.read_u32(),
            config_checksum=cursor.read_u32(),
            name=cursor.read_string(),
            source_path=cursor.read_string(),
            start_line=cursor.read_u32(),
        )
        state.model.add_function(function)
        return cursor.consumed, replace(state, current=function)

    def _on_blocks(self, state: NotesState, record: Record):
        function = state.require_current(record)
        cursor = record.cursor(self.source)
        count = 0
        while not cursor.at_end:
            cursor.read_u32()  # block flags, unused
            count += 1
        function.add_blocks(count)
        return cursor.consumed, state

    def _on_arcs(self, state: NotesState, record: Record):
        function = state.require_current(record)
        cursor = record.cursor(self.source)
        source_block = cursor.read_u32()
        while not cursor.at_end:
            destination_block = cursor.read_u32()
            flags = cursor.read_u32()
            function.add_arc(source_block, destination_block, flags)
        return cursor.consumed, state

    def _on_lines(self, state: NotesState, record: Record):
        function = state.require_current(record)
        cursor = record.cursor(self.source)
        block = function.block(cursor.read_u32())

        path = function.source_path
        while not cursor.at_end:
            line = cursor.read_u32()
            if line != 0:
                block.lines.append(SourceLine(path, line))
                continue
            # zero-length filename ends the table
            if cursor.peek_u32() == 0:
                cursor.read_u32()
                break
            path = cursor.read_string()
        return cursor.consumed, state


def decode_notes(buffer: bytes, source: Optional[str] = None) -> NotesModel:
    """
    Decode a notes file held in memory.

    Args:
        buffer: Complete file contents
        source: File name used in error messages

    Returns:
        NotesModel with one FunctionGraph per FUNCTION record

    Raises:
        GcovTraceError: On any structural problem in the file
    """
    return NotesDecoder(source).decode(buffer)
