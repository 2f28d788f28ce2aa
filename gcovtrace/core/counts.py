"""Raw execution counts decoded from a data file."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional


@dataclass
class FunctionCounts:
    """
    Raw counters for one function.

    Attributes:
        identifier: Function id, joins with FunctionGraph.identifier
        line_checksum: Checksum copied from the function reference record
        config_checksum: Checksum copied from the function reference record
        counts: One u64 per instrumented arc, in notes-declaration order
    """
    identifier: int
    line_checksum: int
    config_checksum: int
    counts: List[int] = field(default_factory=list)

    def __repr__(self) -> str:
        return (
            f"FunctionCounts(id={self.identifier}, "
            f"counts={len(self.counts)})"
        )


@dataclass
class DataModel:
    """Everything decoded from one data file, keyed by function id."""

    source: Optional[str] = None
    version: int = 0
    stamp: int = 0
    functions: Dict[int, FunctionCounts] = field(default_factory=dict)

    def get(self, identifier: int) -> Optional[FunctionCounts]:
        return self.functions.get(identifier)

    def __iter__(self) -> Iterator[FunctionCounts]:
        return iter(self.functions.values())

    def __len__(self) -> int:
        return len(self.functions)
