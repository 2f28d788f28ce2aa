"""
Base class for notes/data file decoders.

A decoder is a fold over the file's records: it builds an initial state
from the file header, registers one handler per tag it understands, and
lets RecordReader thread the state through every record. Handlers return
a new state rather than mutating a shared "current function" variable, so
a record can only attach to the function the state says is current.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Generic, Optional, TypeVar

from ..formats.file_header import FileHeader
from ..formats.records import Handler, RecordReader


logger = logging.getLogger(__name__)

State = TypeVar('State')
Model = TypeVar('Model')


class RecordDecoder(ABC, Generic[State, Model]):
    """
    Abstract decoder for one gcov file type.

    Subclasses provide the magic, the per-tag handlers and the conversion
    of the final state into the decoded model.
    """

    #: Expected magic for this file type
    MAGIC: int = 0

    #: Label used in error messages when the caller gives none
    DEFAULT_SOURCE = '<buffer>'

    def __init__(self, source: Optional[str] = None):
        self.source = source or self.DEFAULT_SOURCE

    @abstractmethod
    def initial_state(self, header: FileHeader) -> State:
        """State before the first record."""
        pass

    @abstractmethod
    def handlers(self) -> Dict[int, Handler]:
        """Map of tag to handler(state, record) -> (consumed, state)."""
        pass

    @abstractmethod
    def finish(self, state: State) -> Model:
        """Turn the state after the last record into the decoded model."""
        pass

    def decode(self, buffer: bytes) -> Model:
        """
        Decode a complete file held in memory.

        Raises:
            GcovTraceError: On any structural problem; nothing is returned
                for a partially decoded file.
        """
        header = FileHeader.decode(buffer, self.MAGIC, source=self.source)
        logger.debug(
            f"{self.source}: version {header.version_string!r}, "
            f"stamp 0x{header.stamp:08x}"
        )

        reader = RecordReader(buffer, source=self.source)
        state = reader.fold(self.handlers(), self.initial_state(header))
        return self.finish(state)
