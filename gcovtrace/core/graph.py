"""
Control-flow graph model decoded from a notes file.

Blocks and arcs are stored arena-style: each FunctionGraph owns a flat
list of blocks and a flat list of arcs, and blocks refer to their arcs by
index into the function's arc list. Arc order is the order the arcs were
declared in the notes file, which is also the order their counters appear
in the data file.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, NamedTuple, Optional, Set

from ..formats.tags import ArcFlag
from .errors import DuplicateFunction, InvalidBlockIndex


class SourceLine(NamedTuple):
    """A source line attributed to a block."""
    path: str
    line: int


@dataclass
class Arc:
    """
    Directed edge between two blocks of the same function.

    Attributes:
        source_block: Index of the block the arc leaves
        destination_block: Index of the block the arc enters
        flags: Raw flag word from the notes file
    """
    source_block: int
    destination_block: int
    flags: int = 0

    @property
    def on_spanning_tree(self) -> bool:
        """True if the arc has no counter and must be inferred."""
        return bool(self.flags & ArcFlag.ON_TREE)

    @property
    def is_fake(self) -> bool:
        return bool(self.flags & ArcFlag.FAKE)

    def __repr__(self) -> str:
        tree = ", tree" if self.on_spanning_tree else ""
        return f"Arc({self.source_block}->{self.destination_block}{tree})"


@dataclass
class Block:
    """
    Basic block inside a function.

    Attributes:
        index: Position in the function's block list
        lines: Source lines whose first instruction lies in this block
            (empty for compiler-synthesized blocks)
        out_arcs: Indices of outgoing arcs in FunctionGraph.arcs
        in_arcs: Indices of incoming arcs in FunctionGraph.arcs
    """
    index: int
    lines: List[SourceLine] = field(default_factory=list)
    out_arcs: List[int] = field(default_factory=list)
    in_arcs: List[int] = field(default_factory=list)


@dataclass
class FunctionGraph:
    """
    One function from the notes file.

    Attributes:
        identifier: Function id, unique within one notes file only
        line_checksum: Opaque checksum, compared against the data file
        config_checksum: Opaque checksum, compared against the data file
        name: Function name (mangled, as the compiler wrote it)
        source_path: File the function is defined in
        start_line: Line of the function's definition
        blocks: Blocks in index order, block 0 is the entry block
        arcs: All arcs in declaration order
    """
    identifier: int
    line_checksum: int
    config_checksum: int
    name: str
    source_path: str
    start_line: int
    blocks: List[Block] = field(default_factory=list)
    arcs: List[Arc] = field(default_factory=list)

    ENTRY_BLOCK = 0

    def add_blocks(self, count: int):
        base = len(self.blocks)
        self.blocks.extend(Block(index=base + i) for i in range(count))

    def block(self, index: int) -> Block:
        """Return block by index, raising InvalidBlockIndex if out of range."""
        if not 0 <= index < len(self.blocks):
            raise InvalidBlockIndex(
                f"block {index} in function {self.name!r} "
                f"which has {len(self.blocks)} blocks"
            )
        return self.blocks[index]

    def add_arc(self, source: int, destination: int, flags: int) -> Arc:
        src = self.block(source)
        dst = self.block(destination)
        arc = Arc(source_block=source, destination_block=destination, flags=flags)
        self.arcs.append(arc)
        arc_index = len(self.arcs) - 1
        src.out_arcs.append(arc_index)
        dst.in_arcs.append(arc_index)
        return arc

    @property
    def instrumented_arcs(self) -> List[int]:
        """Indices of arcs with an explicit counter, in declaration order."""
        return [i for i, arc in enumerate(self.arcs) if not arc.on_spanning_tree]

    @property
    def source_paths(self) -> Set[str]:
        """Every path referenced by this function's line table."""
        return {ref.path for block in self.blocks for ref in block.lines}

    def __repr__(self) -> str:
        return (
            f"FunctionGraph(id={self.identifier}, "
            f"name={self.name!r}, "
            f"blocks={len(self.blocks)}, "
            f"arcs={len(self.arcs)})"
        )


@dataclass
class NotesModel:
    """Everything decoded from one notes file."""

    source: Optional[str] = None
    version: int = 0
    stamp: int = 0
    functions: List[FunctionGraph] = field(default_factory=list)

    def __post_init__(self):
        self._by_id: Dict[int, FunctionGraph] = {}
        for function in self.functions:
            self._index(function)

    def _index(self, function: FunctionGraph):
        if function.identifier in self._by_id:
            raise DuplicateFunction(
                f"identifier {function.identifier} "
                f"({self._by_id[function.identifier].name!r} and {function.name!r})"
            )
        self._by_id[function.identifier] = function

    def add_function(self, function: FunctionGraph):
        self._index(function)
        self.functions.append(function)

    def function(self, identifier: int) -> Optional[FunctionGraph]:
        return self._by_id.get(identifier)

    def __iter__(self) -> Iterator[FunctionGraph]:
        return iter(self.functions)

    def __len__(self) -> int:
        return len(self.functions)

    @property
    def source_paths(self) -> List[str]:
        """Sorted distinct source paths referenced by any line table."""
        paths = set()
        for function in self.functions:
            paths |= function.source_paths
        return sorted(paths)
