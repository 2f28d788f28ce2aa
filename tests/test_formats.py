"""
Tests for file framing.

These tests verify:
1. File header decode and magic checks
2. Length-prefixed string decoding
3. Record framing, end-of-file handling and skipping of unknown tags
4. Consumed-length checks in RecordReader.fold
"""

import struct

import pytest

from gcovtrace.core.errors import MagicMismatch, MalformedString, RecordLengthMismatch
from gcovtrace.formats.file_header import FileHeader, HEADER_SIZE
from gcovtrace.formats.records import (
    PayloadCursor,
    Record,
    RecordReader,
    decode_string,
)
from gcovtrace.formats.tags import DATA_MAGIC, NOTES_MAGIC, Tag
from gcovtrace.testing import NotesBuilder, encode_record, encode_string, encode_u32


UNKNOWN_TAG = 0x01a30000


class TestFileHeader:
    """Test file header functionality."""

    def test_header_size(self):
        """Header is exactly 12 bytes."""
        assert HEADER_SIZE == 12
        assert struct.calcsize(FileHeader.FORMAT) == 12

    def test_header_fields(self):
        """Version and stamp are read after the magic."""
        raw = struct.pack('<III', NOTES_MAGIC, 0x4231322a, 0xdeadbeef)

        header = FileHeader.decode(raw, NOTES_MAGIC)

        assert header.version == 0x4231322a
        assert header.stamp == 0xdeadbeef
        assert header.encode() == raw

    def test_version_string(self):
        """Version word reads most-significant byte first."""
        assert FileHeader(version=0x4231322a).version_string == "B12*"

    def test_magic_bytes_on_disk(self):
        """Magics are the ASCII names read as little-endian words."""
        assert FileHeader(magic=NOTES_MAGIC).encode()[:4] == b'oncg'
        assert FileHeader(magic=DATA_MAGIC).encode()[:4] == b'adcg'

    def test_wrong_file_type(self):
        """A data header where a notes header is expected is rejected."""
        raw = FileHeader(magic=DATA_MAGIC).encode()

        with pytest.raises(MagicMismatch) as exc_info:
            FileHeader.decode(raw, NOTES_MAGIC, source="x.gcno")

        assert exc_info.value.offset == 0
        assert "x.gcno" in str(exc_info.value)

    def test_big_endian_file(self):
        """A byte-swapped magic is reported as a byte order problem."""
        raw = struct.pack('>III', NOTES_MAGIC, 0, 0)

        with pytest.raises(MagicMismatch, match="big-endian"):
            FileHeader.decode(raw, NOTES_MAGIC)

    def test_short_buffer(self):
        """Buffers shorter than a header are rejected."""
        with pytest.raises(MagicMismatch, match="too small"):
            FileHeader.decode(b'oncg', NOTES_MAGIC)


class TestDecodeString:
    """Test length-prefixed string decoding."""

    def test_padded_string(self):
        """[n=2]['a','b',0,0,0,0,0,0] decodes to "ab" using 12 bytes."""
        raw = encode_u32(2) + b'ab' + b'\x00' * 6

        assert decode_string(raw) == ("ab", 12)

    def test_empty_string(self):
        """A zero word count is the empty string."""
        assert decode_string(encode_u32(0)) == ("", 4)

    def test_offset(self):
        """Decoding starts at the given offset."""
        raw = encode_u32(7) + encode_string("main.c")

        text, consumed = decode_string(raw, 4)

        assert text == "main.c"
        assert consumed == 12

    def test_exact_word_fill(self):
        """A string filling its words exactly needs no NUL."""
        raw = encode_u32(1) + b'abcd'

        assert decode_string(raw) == ("abcd", 8)

    def test_utf8(self):
        """Non-ASCII paths survive decoding."""
        assert decode_string(encode_string("src/été.c"))[0] == "src/été.c"

    def test_invalid_utf8(self):
        """Invalid UTF-8 raises MalformedString."""
        raw = encode_u32(1) + b'\xff\xfe\x00\x00'

        with pytest.raises(MalformedString):
            decode_string(raw)

    def test_length_past_end(self):
        """A word count running past the buffer raises MalformedString."""
        raw = encode_u32(4) + b'ab\x00\x00'

        with pytest.raises(MalformedString, match="runs past end"):
            decode_string(raw)

    def test_missing_length_word(self):
        """No room for the length word raises MalformedString."""
        with pytest.raises(MalformedString):
            decode_string(b'\x01\x00')


class TestRecordReader:
    """Test record framing."""

    def _file(self, *records: bytes, tail: bytes = b'') -> bytes:
        return FileHeader(magic=NOTES_MAGIC).encode() + b''.join(records) + tail

    def test_records_cover_file(self):
        """Record sizes add up to the file length minus the header."""
        buffer = self._file(
            encode_record(Tag.FUNCTION, encode_u32(1) * 3),
            encode_record(UNKNOWN_TAG, b''),
            encode_record(Tag.BLOCKS, encode_u32(0) * 5),
        )

        records = list(RecordReader(buffer))

        assert [r.tag for r in records] == [Tag.FUNCTION, UNKNOWN_TAG, Tag.BLOCKS]
        assert [r.length for r in records] == [3, 0, 5]
        assert sum(r.size for r in records) == len(buffer) - HEADER_SIZE
        assert records[0].offset == HEADER_SIZE

    def test_zero_tag_ends_stream(self):
        """Bytes after a zero tag are ignored."""
        buffer = self._file(
            encode_record(Tag.BLOCKS, encode_u32(0)),
            tail=encode_u32(0) + b'garbage!',
        )

        records = list(RecordReader(buffer))

        assert len(records) == 1

    def test_lone_trailing_zero_word(self):
        """A single zero word after the last record is the end marker."""
        buffer = NotesBuilder().blocks(2).build()

        assert len(list(RecordReader(buffer))) == 1

    def test_no_end_marker(self):
        """The stream may also simply end after a record."""
        buffer = NotesBuilder().blocks(2).build(terminate=False)

        assert len(list(RecordReader(buffer))) == 1

    def test_length_past_end_of_file(self):
        """A declared length running past the file raises RecordLengthMismatch."""
        buffer = self._file(struct.pack('<II', Tag.BLOCKS, 10) + encode_u32(0))

        with pytest.raises(RecordLengthMismatch) as exc_info:
            list(RecordReader(buffer, source="x.gcno"))

        assert exc_info.value.tag == Tag.BLOCKS
        assert exc_info.value.offset == HEADER_SIZE

    def test_truncated_record_header(self):
        """A partial record header raises RecordLengthMismatch."""
        buffer = self._file(encode_u32(Tag.BLOCKS) + b'\x01')

        with pytest.raises(RecordLengthMismatch, match="truncated"):
            list(RecordReader(buffer))

    def test_record_repr(self):
        """Records print their tag name."""
        record = Record(tag=Tag.ARCS, length=3, payload=memoryview(b''), offset=40)

        assert repr(record) == "Record(ARCS, words=3, offset=40)"
        assert Tag.name(UNKNOWN_TAG) == "UNKNOWN(0x01a30000)"


class TestFold:
    """Test handler dispatch."""

    def test_unknown_tags_skipped(self):
        """Records without a handler are skipped by their declared length."""
        buffer = (
            NotesBuilder()
            .record(UNKNOWN_TAG, encode_u32(9) * 4)
            .blocks(3)
            .record(UNKNOWN_TAG, b'')
            .blocks(1)
            .build()
        )

        def on_blocks(state, record):
            return record.payload_size, state + [record.length]

        state = RecordReader(buffer).fold({Tag.BLOCKS: on_blocks}, [])

        assert state == [3, 1]

    def test_consumed_mismatch(self):
        """A handler decoding less than declared raises RecordLengthMismatch."""
        buffer = NotesBuilder().blocks(2).build()

        def short_handler(state, record):
            return 4, state

        with pytest.raises(RecordLengthMismatch) as exc_info:
            RecordReader(buffer, source="x.gcno").fold({Tag.BLOCKS: short_handler}, None)

        error = exc_info.value
        assert error.source == "x.gcno"
        assert error.tag == Tag.BLOCKS
        assert error.offset == HEADER_SIZE
        assert "consumed 4 bytes, record declares 8" in str(error)

    def test_handler_error_located(self):
        """Errors raised by handlers get the record location filled in."""
        buffer = NotesBuilder().blocks(1).blocks(1).build()

        def failing(state, record):
            if state:
                raise MalformedString("bad name")
            return record.payload_size, True

        with pytest.raises(MalformedString) as exc_info:
            RecordReader(buffer, source="x.gcno").fold({Tag.BLOCKS: failing}, False)

        assert exc_info.value.offset == HEADER_SIZE + 12
        assert exc_info.value.tag == Tag.BLOCKS


class TestPayloadCursor:
    """Test sequential payload reads."""

    def _record(self, payload: bytes) -> Record:
        return Record(Tag.COUNTS, len(payload) // 4, memoryview(payload), 12)

    def test_reads(self):
        """Integers and strings are read in order."""
        cursor = PayloadCursor(self._record(
            encode_u32(5) + struct.pack('<Q', 2 ** 40) + encode_string("f")
        ))

        assert cursor.read_u32() == 5
        assert cursor.read_u64() == 2 ** 40
        assert cursor.read_string() == "f"
        assert cursor.at_end
        assert cursor.consumed == 20

    def test_read_past_end(self):
        """Reading past the payload raises RecordLengthMismatch."""
        cursor = PayloadCursor(self._record(encode_u32(1)))

        with pytest.raises(RecordLengthMismatch) as exc_info:
            cursor.read_u64()

        assert exc_info.value.tag == Tag.COUNTS
        assert exc_info.value.offset == 12
