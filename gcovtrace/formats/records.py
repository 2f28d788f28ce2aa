"""
Tagged-record framing for gcov notes and data files.

After the file header, both files are a flat sequence of records:

    Bytes 0-3:   tag      Record tag (see Tag)
    Bytes 4-7:   length   Payload length in 32-bit words
    Bytes 8-:    payload  length * 4 bytes

RecordReader walks that sequence and hands each payload to a per-tag
handler. A handler returns how many payload bytes it actually decoded;
anything other than the declared length means the file is corrupt (or the
decoder is wrong) and the run stops with RecordLengthMismatch.

Payloads are exposed as memoryview slices of the input buffer, so nothing
is copied except decoded strings and count lists.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional, Tuple, TypeVar

from .file_header import HEADER_SIZE
from .tags import Tag
from ..core.errors import GcovTraceError, MalformedString, RecordLengthMismatch


logger = logging.getLogger(__name__)

# Record header: I=tag, I=length in words
RECORD_HEADER_FORMAT = '<II'
RECORD_HEADER_SIZE = 8
WORD_SIZE = 4

State = TypeVar('State')
Handler = Callable[[State, 'Record'], Tuple[int, State]]


def decode_string(buffer, offset: int = 0) -> Tuple[str, int]:
    """
    Decode a length-prefixed string field.

    The field is a u32 word count n followed by 4n bytes of UTF-8 text,
    right-padded with NULs to the word boundary. All trailing NULs are
    stripped before decoding.

    Returns:
        (text, bytes consumed including the length word)

    Raises:
        MalformedString: If the field runs past the buffer or the text is
            not valid UTF-8.

    Examples:
        [n=2]['a','b',0,0,0,0,0,0] -> ("ab", 12)
        [n=0]                      -> ("", 4)
    """
    if offset + WORD_SIZE > len(buffer):
        raise MalformedString(
            f"length word at {offset} runs past end of {len(buffer)}-byte field"
        )
    (words,) = struct.unpack_from('<I', buffer, offset)
    start = offset + WORD_SIZE
    end = start + words * WORD_SIZE
    if end > len(buffer):
        raise MalformedString(
            f"string of {words} words at {offset} runs past end of "
            f"{len(buffer)}-byte field"
        )

    raw = bytes(buffer[start:end]).rstrip(b'\x00')
    try:
        text = raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise MalformedString(f"invalid UTF-8 at {offset}: {e}") from e

    return text, end - offset


@dataclass
class Record:
    """
    One framed record.

    Attributes:
        tag: Record tag
        length: Declared payload length in 32-bit words
        payload: View of the payload bytes
        offset: Byte offset of the record header in the file
    """
    tag: int
    length: int
    payload: memoryview
    offset: int

    @property
    def payload_size(self) -> int:
        return self.length * WORD_SIZE

    @property
    def size(self) -> int:
        """Bytes the reader advances past this record."""
        return RECORD_HEADER_SIZE + self.payload_size

    def check_consumed(self, consumed: int, source: Optional[str] = None):
        """Raise if a handler decoded a different byte count than declared."""
        if consumed != self.payload_size:
            raise RecordLengthMismatch(
                f"{Tag.name(self.tag)} decoder consumed {consumed} bytes, "
                f"record declares {self.payload_size}",
                source=source, tag=self.tag, offset=self.offset,
            )

    def cursor(self, source: Optional[str] = None) -> 'PayloadCursor':
        return PayloadCursor(self, source)

    def __repr__(self) -> str:
        return (
            f"Record({Tag.name(self.tag)}, "
            f"words={self.length}, "
            f"offset={self.offset})"
        )


class PayloadCursor:
    """
    Sequential reader over one record payload.

    Reads past the payload end raise RecordLengthMismatch (integers) or
    MalformedString (strings), tagged with the record's tag and offset.
    """

    def __init__(self, record: Record, source: Optional[str] = None):
        self.record = record
        self.source = source
        self.position = 0

    @property
    def remaining(self) -> int:
        return len(self.record.payload) - self.position

    @property
    def at_end(self) -> bool:
        return self.remaining <= 0

    @property
    def consumed(self) -> int:
        return self.position

    def _take(self, fmt: str) -> int:
        size = struct.calcsize(fmt)
        if size > self.remaining:
            raise RecordLengthMismatch(
                f"{Tag.name(self.record.tag)} needs {size} more bytes at "
                f"payload offset {self.position}, only {self.remaining} left",
                source=self.source, tag=self.record.tag,
                offset=self.record.offset,
            )
        (value,) = struct.unpack_from(fmt, self.record.payload, self.position)
        self.position += size
        return value

    def read_u32(self) -> int:
        return self._take('<I')

    def peek_u32(self) -> int:
        """Next u32 without advancing."""
        value = self._take('<I')
        self.position -= WORD_SIZE
        return value

    def read_u64(self) -> int:
        return self._take('<Q')

    def read_string(self) -> str:
        try:
            text, size = decode_string(self.record.payload, self.position)
        except MalformedString as e:
            e.locate(self.source, self.record.tag, self.record.offset)
            raise
        self.position += size
        return text


class RecordReader:
    """
    Iterates the records of a notes or data file buffer.

    Usage:
        reader = RecordReader(buffer, source="foo.gcno")
        for record in reader:
            ...

        # Or dispatch to per-tag handlers, threading a state value through:
        state = reader.fold({Tag.FUNCTION: on_function}, initial_state)

    Iteration stops at the end of the buffer or at a record whose tag is
    zero, whichever comes first. A lone trailing zero word is accepted as
    the end marker.
    """

    def __init__(self, buffer: bytes, source: Optional[str] = None,
                 offset: int = HEADER_SIZE):
        self.view = memoryview(buffer)
        self.source = source
        self.start = offset

    def __iter__(self) -> Iterator[Record]:
        offset = self.start
        end = len(self.view)

        while offset < end:
            remaining = end - offset

            if remaining >= WORD_SIZE:
                (tag,) = struct.unpack_from('<I', self.view, offset)
                if tag == Tag.END_OF_FILE:
                    logger.debug(f"{self.source}: end of file at offset {offset}")
                    return

            if remaining < RECORD_HEADER_SIZE:
                raise RecordLengthMismatch(
                    f"truncated record header: {remaining} bytes left",
                    source=self.source, offset=offset,
                )

            tag, length = struct.unpack_from(RECORD_HEADER_FORMAT, self.view, offset)
            payload_start = offset + RECORD_HEADER_SIZE
            payload_end = payload_start + length * WORD_SIZE

            if payload_end > end:
                raise RecordLengthMismatch(
                    f"record declares {length * WORD_SIZE} payload bytes, "
                    f"only {end - payload_start} left in file",
                    source=self.source, tag=tag, offset=offset,
                )

            record = Record(
                tag=tag,
                length=length,
                payload=self.view[payload_start:payload_end],
                offset=offset,
            )
            yield record
            offset += record.size

    def fold(self, handlers: Dict[int, Handler], state: State) -> State:
        """
        Feed every record to the handler registered for its tag.

        Each handler receives the current state and the record and returns
        (payload bytes consumed, new state). Records without a handler are
        skipped by their declared length.

        Returns:
            The state after the last record.
        """
        for record in self:
            handler = handlers.get(record.tag)
            if handler is None:
                logger.debug(f"{self.source}: skipping {record!r}")
                continue
            try:
                consumed, state = handler(state, record)
            except GcovTraceError as e:
                e.locate(self.source, record.tag, record.offset)
                raise
            record.check_consumed(consumed, self.source)
        return state
