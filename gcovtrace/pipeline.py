"""
File-level entry points: read a notes/data pair from disk, resolve it and
write the tracefile.

Both files are read fully into memory before decoding starts.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO, Union

from .config import GcovTraceConfig
from .core.counts import DataModel
from .core.coverage import CoverageModel
from .core.errors import InputNotFound
from .core.graph import NotesModel
from .core.report import TracefileWriter
from .core.resolver import FlowResolver
from .decoders import decode_data, decode_notes


logger = logging.getLogger(__name__)


@dataclass
class CaptureResult:
    """Decoded inputs and the coverage resolved from them."""
    notes: NotesModel
    data: DataModel
    coverage: CoverageModel


def _read(path: Path) -> bytes:
    path = Path(path)
    if not path.is_file():
        raise InputNotFound(str(path), source=str(path))
    return path.read_bytes()


def capture(
    notes_path: Union[Path, str],
    data_path: Union[Path, str],
    config: Optional[GcovTraceConfig] = None,
) -> CaptureResult:
    """
    Decode a notes/data pair and resolve line and function hits.

    Raises:
        InputNotFound: If either file does not exist
        GcovTraceError: On any decode or consistency error
    """
    cfg = config or GcovTraceConfig()

    logger.info(f"Reading notes file {notes_path}")
    notes = decode_notes(_read(notes_path), source=str(notes_path))

    logger.info(f"Reading data file {data_path}")
    data = decode_data(_read(data_path), source=str(data_path))

    resolver = FlowResolver(
        verify_checksums=cfg.checks.verify_checksums,
        strict_conservation=cfg.checks.strict_conservation,
    )
    coverage = resolver.resolve(notes, data)
    logger.info(
        f"Resolved {len(notes)} functions across {len(coverage)} source files"
    )
    return CaptureResult(notes=notes, data=data, coverage=coverage)


def write_tracefile(
    coverage: CoverageModel,
    out: Union[Path, str, TextIO],
    config: Optional[GcovTraceConfig] = None,
):
    """Write coverage as a tracefile using the report settings of config."""
    cfg = config or GcovTraceConfig()
    writer = TracefileWriter(
        test_name=cfg.report.test_name,
        function_coverage=cfg.report.function_coverage,
    )
    writer.write(coverage, out)
