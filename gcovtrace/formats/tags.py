"""
Record tag and flag constants for gcov notes (.gcno) and data (.gcda) files.

Tags are hierarchical: top-level records use only the top octet, records
that belong to a function use the next octet as well. Only the tags below
are decoded; everything else is skipped by its declared length.
"""


# File magics, read as little-endian u32
NOTES_MAGIC = 0x67636e6f   # "gcno"
DATA_MAGIC = 0x67636461    # "gcda"


class Tag:
    """Record tag constants."""

    # Termination sentinel, ends the stream even if bytes remain
    END_OF_FILE = 0x00000000

    # Function record (notes) / function reference (data)
    FUNCTION = 0x01000000

    # Notes-only records
    BLOCKS = 0x01410000
    ARCS = 0x01430000
    LINES = 0x01450000

    # Data-only: arc execution counters for a single run
    COUNTS = 0x01a10000

    @classmethod
    def name(cls, tag: int) -> str:
        """Get human-readable name for a record tag."""
        names = {
            cls.END_OF_FILE: 'END_OF_FILE',
            cls.FUNCTION: 'FUNCTION',
            cls.BLOCKS: 'BLOCKS',
            cls.ARCS: 'ARCS',
            cls.LINES: 'LINES',
            cls.COUNTS: 'COUNTS',
        }
        return names.get(tag, f'UNKNOWN(0x{tag:08x})')


class ArcFlag:
    """Arc flag bits from the notes file."""

    # Arc carries no counter; its count is inferred
    ON_TREE = 1 << 0

    # Arc added for non-local control flow (calls that may not return)
    FAKE = 1 << 1
