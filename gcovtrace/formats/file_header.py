"""
File header shared by gcov notes and data files.

Layout (12 bytes, little-endian):
    Bytes 0-3:   magic    "gcno" (0x67636e6f) or "gcda" (0x67636461)
    Bytes 4-7:   version  Compiler version tag, e.g. "B12*" for GCC 11.2
    Bytes 8-11:  stamp    Compilation stamp, identical in both companion files
"""

import struct
from dataclasses import dataclass
from typing import Optional

from .tags import NOTES_MAGIC
from ..core.errors import MagicMismatch


# Header size in bytes
HEADER_SIZE = 12


def _byteswap32(value: int) -> int:
    return struct.unpack('<I', struct.pack('>I', value))[0]


@dataclass
class FileHeader:
    """Header of a notes or data file."""

    magic: int = NOTES_MAGIC
    version: int = 0
    stamp: int = 0

    # I=magic, I=version, I=stamp
    FORMAT = '<III'

    @property
    def version_string(self) -> str:
        """
        Version as the compiler spells it.

        The four characters are packed most-significant byte first, so
        0x4231322a reads "B12*".
        """
        return ''.join(
            chr((self.version >> shift) & 0xff) for shift in (24, 16, 8, 0)
        )

    def encode(self) -> bytes:
        """Encode header to bytes."""
        return struct.pack(self.FORMAT, self.magic, self.version, self.stamp)

    @classmethod
    def decode(
        cls,
        data: bytes,
        expected_magic: int,
        source: Optional[str] = None,
    ) -> 'FileHeader':
        """
        Decode header from bytes and check its magic.

        Raises:
            MagicMismatch: If the buffer is too small, the magic belongs to
                another file type, or the file was written in the other
                byte order.
        """
        if len(data) < HEADER_SIZE:
            raise MagicMismatch(
                f"header too small: {len(data)} < {HEADER_SIZE}",
                source=source, offset=0,
            )

        magic, version, stamp = struct.unpack(cls.FORMAT, data[:HEADER_SIZE])

        if magic != expected_magic:
            if magic == _byteswap32(expected_magic):
                detail = (
                    f"0x{magic:08x} is the byte-swapped form of "
                    f"0x{expected_magic:08x}; file was written big-endian"
                )
            else:
                detail = f"0x{magic:08x} (expected 0x{expected_magic:08x})"
            raise MagicMismatch(detail, source=source, offset=0)

        return cls(magic=magic, version=version, stamp=stamp)


# Verify struct size at module load
_computed_size = struct.calcsize(FileHeader.FORMAT)
assert _computed_size == HEADER_SIZE, \
    f"FileHeader format size mismatch: {_computed_size} != {HEADER_SIZE}"
