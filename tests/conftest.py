"""Pytest fixtures: synthetic notes/data pairs."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from gcovtrace.formats.tags import ArcFlag
from gcovtrace.testing import DataBuilder, NotesBuilder


TREE = ArcFlag.ON_TREE

MAIN_ID = 1
UNUSED_ID = 2


def build_sample_notes() -> NotesBuilder:
    """
    Two functions in main.c.

    main (if/else, 6 blocks, counters on 1->2 and 3->4):

        0 -> 1 -> 2 -> 4 -> 5
             1 -> 3 -> 4

        block 1: line 3, block 2: line 4 and util.h:12,
        block 3: line 6, block 4: line 7

    unused (straight line, counter on 0->1, never called):

        0 -> 1 -> 2, block 1: line 11
    """
    return (
        NotesBuilder()
        .function(MAIN_ID, "main", "main.c", start_line=2,
                  line_checksum=0x1111, config_checksum=0x2222)
        .blocks(6)
        .arcs(0, [(1, TREE)])
        .arcs(1, [(2, 0), (3, TREE)])
        .arcs(2, [(4, TREE)])
        .arcs(3, [(4, 0)])
        .arcs(4, [(5, TREE)])
        .lines(1, [3])
        .lines(2, [4, "util.h", 12])
        .lines(3, [6])
        .lines(4, [7])
        .function(UNUSED_ID, "unused", "main.c", start_line=10,
                  line_checksum=0x3333, config_checksum=0x4444)
        .blocks(3)
        .arcs(0, [(1, 0)])
        .arcs(1, [(2, TREE)])
        .lines(1, [11])
    )


def build_sample_data() -> DataBuilder:
    """main called 10 times, then-branch taken 4 times; unused absent."""
    return (
        DataBuilder()
        .function(MAIN_ID, line_checksum=0x1111, config_checksum=0x2222)
        .counts([4, 6])
    )


SAMPLE_TRACEFILE = """\
TN:
SF:main.c
FN:2,main
FN:10,unused
FNDA:10,main
FNDA:0,unused
FNF:2
FNH:1
DA:3,10
DA:4,4
DA:6,6
DA:7,10
DA:11,0
LF:5
LH:4
end_of_record
TN:
SF:util.h
FNF:0
FNH:0
DA:12,4
LF:1
LH:1
end_of_record
"""


@pytest.fixture
def notes_bytes() -> bytes:
    return build_sample_notes().build()


@pytest.fixture
def data_bytes() -> bytes:
    return build_sample_data().build()


@pytest.fixture
def sample_files(tmp_path: Path, notes_bytes: bytes, data_bytes: bytes):
    """Write the sample pair to disk, return (notes_path, data_path)."""
    notes_path = tmp_path / "main.gcno"
    data_path = tmp_path / "main.gcda"
    notes_path.write_bytes(notes_bytes)
    data_path.write_bytes(data_bytes)
    return notes_path, data_path


@pytest.fixture
def expected_tracefile() -> str:
    return SAMPLE_TRACEFILE
