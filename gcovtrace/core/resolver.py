"""
Flow resolver: reconstructs every arc's execution count from the partial
counters in the data file, then aggregates block counts into line and
function hits.

Only arcs off the instrumentation spanning tree carry a counter. The rest
follow from flow conservation: for every block other than the entry block,
what flows in equals what flows out. The entry block has no inflow
constraint (its outflow is the invocation count) and a block without
successors (the exit block) is constrained by its inflow alone.

Each block contributes up to two equations, one per side:

    block_count = sum(counts of incoming arcs)   (not for the entry block)
    block_count = sum(counts of outgoing arcs)

A block count becomes known as soon as every arc on one side is known, and
once it is known any side with exactly one unknown arc solves that arc.
Scanning all blocks until nothing changes reaches the fixed point; for a
valid spanning-tree instrumentation every arc is known by then.

Example (3 blocks, invocation count 7):

    0 -> 1  counted   = 5
    0 -> 2  tree      = 7 - 5 = 2      (entry outflow)
    1 -> 2  tree      = 5              (block 1: in == out)
    block 2 count     = 5 + 2 = 7
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .counts import DataModel, FunctionCounts
from .coverage import CoverageModel
from .errors import (
    ChecksumMismatch,
    CountArityMismatch,
    UnresolvableFlowGraph,
)
from .graph import Block, FunctionGraph, NotesModel


logger = logging.getLogger(__name__)


@dataclass
class ResolvedFunction:
    """
    Resolution result for one function.

    Attributes:
        function: The graph that was resolved
        arc_counts: Execution count per arc, parallel to function.arcs
        block_counts: Execution count per block, parallel to function.blocks
    """
    function: FunctionGraph
    arc_counts: List[int]
    block_counts: List[int]

    @property
    def invocations(self) -> int:
        """Times the function was entered (entry block count)."""
        return self.block_counts[FunctionGraph.ENTRY_BLOCK]

    def inflow(self, block: Block) -> int:
        return sum(self.arc_counts[a] for a in block.in_arcs)

    def outflow(self, block: Block) -> int:
        return sum(self.arc_counts[a] for a in block.out_arcs)

    def unbalanced_blocks(self) -> List[int]:
        """
        Blocks that violate conservation.

        Only blocks with both predecessors and successors are checked; the
        entry and exit blocks are open by construction.
        """
        return [
            block.index
            for block in self.function.blocks
            if block.index != FunctionGraph.ENTRY_BLOCK
            and block.in_arcs and block.out_arcs
            and self.inflow(block) != self.outflow(block)
        ]


def assign_counts(function: FunctionGraph, raw: List[int]) -> List[Optional[int]]:
    """
    Place raw counters on the instrumented arcs, in declaration order.

    Returns:
        Per-arc counts with None for spanning-tree arcs

    Raises:
        CountArityMismatch: If raw has a different length than the number
            of instrumented arcs
    """
    instrumented = function.instrumented_arcs
    if len(raw) != len(instrumented):
        raise CountArityMismatch(
            f"function {function.name!r} has {len(instrumented)} "
            f"instrumented arcs but {len(raw)} raw counts"
        )

    counts: List[Optional[int]] = [None] * len(function.arcs)
    for arc_index, value in zip(instrumented, raw):
        counts[arc_index] = value
    return counts


def _sides(block: Block) -> List[List[int]]:
    """Arc lists that each equal the block count."""
    sides = []
    if block.index != FunctionGraph.ENTRY_BLOCK and block.in_arcs:
        sides.append(block.in_arcs)
    if block.out_arcs:
        sides.append(block.out_arcs)
    return sides


def solve_flow(
    function: FunctionGraph,
    counts: List[Optional[int]],
    invocations: Optional[int] = None,
) -> ResolvedFunction:
    """
    Solve spanning-tree arc counts by flow conservation.

    Args:
        function: Graph to solve
        counts: Per-arc counts from assign_counts(), None where unknown.
            Not modified.
        invocations: Entry block count, if known from elsewhere

    Raises:
        UnresolvableFlowGraph: If an arc is still unknown at the fixed
            point, or an equation forces a negative count
    """
    if not function.blocks:
        raise UnresolvableFlowGraph(f"function {function.name!r} has no blocks")

    arc_counts = list(counts)
    block_counts: List[Optional[int]] = [None] * len(function.blocks)
    if invocations is not None:
        block_counts[FunctionGraph.ENTRY_BLOCK] = invocations

    changed = True
    while changed:
        changed = False
        for block in function.blocks:
            sides = _sides(block)

            if block_counts[block.index] is None:
                for side in sides:
                    if all(arc_counts[a] is not None for a in side):
                        block_counts[block.index] = sum(arc_counts[a] for a in side)
                        changed = True
                        break

            total = block_counts[block.index]
            if total is None:
                continue

            for side in sides:
                unknown = [a for a in side if arc_counts[a] is None]
                if len(unknown) != 1:
                    continue
                arc_index = unknown[0]
                value = total - sum(arc_counts[a] for a in side if a != arc_index)
                if value < 0:
                    arc = function.arcs[arc_index]
                    raise UnresolvableFlowGraph(
                        f"function {function.name!r}: arc "
                        f"{arc.source_block}->{arc.destination_block} "
                        f"would need count {value}"
                    )
                arc_counts[arc_index] = value
                changed = True

    unresolved = [function.arcs[i] for i, c in enumerate(arc_counts) if c is None]
    if unresolved:
        raise UnresolvableFlowGraph(
            f"function {function.name!r}: {len(unresolved)} arcs unresolved "
            f"({', '.join(repr(a) for a in unresolved[:5])})"
        )

    resolved = ResolvedFunction(
        function=function,
        arc_counts=arc_counts,
        block_counts=[0] * len(function.blocks),
    )
    entry = function.blocks[FunctionGraph.ENTRY_BLOCK]
    if invocations is not None and entry.out_arcs \
            and resolved.outflow(entry) != invocations:
        raise UnresolvableFlowGraph(
            f"function {function.name!r}: invocation count {invocations} "
            f"differs from entry outflow {resolved.outflow(entry)}"
        )
    for block in function.blocks:
        if block_counts[block.index] is not None:
            count = block_counts[block.index]
        elif block.index == FunctionGraph.ENTRY_BLOCK:
            count = resolved.outflow(block)
        else:
            count = resolved.inflow(block)
        resolved.block_counts[block.index] = count
    return resolved


def resolve_function(
    function: FunctionGraph,
    raw: List[int],
    invocations: Optional[int] = None,
) -> ResolvedFunction:
    """Assign raw counters to one function and solve the rest."""
    return solve_flow(function, assign_counts(function, raw), invocations)


class FlowResolver:
    """
    Joins a NotesModel with a DataModel and produces a CoverageModel.

    Usage:
        resolver = FlowResolver(verify_checksums=True)
        coverage = resolver.resolve(notes, data)

    Functions are resolved independently in notes declaration order. A
    function the data file has no counters for was never executed and
    resolves with every counter at zero.
    """

    def __init__(self, verify_checksums: bool = True,
                 strict_conservation: bool = False):
        self.verify_checksums = verify_checksums
        self.strict_conservation = strict_conservation

    def _check_reference(self, function: FunctionGraph, counts: FunctionCounts,
                         data: DataModel):
        if (function.line_checksum, function.config_checksum) == \
                (counts.line_checksum, counts.config_checksum):
            return
        detail = (
            f"function {function.name!r} (id {function.identifier}): notes "
            f"checksums 0x{function.line_checksum:08x}/0x{function.config_checksum:08x}, "
            f"data 0x{counts.line_checksum:08x}/0x{counts.config_checksum:08x}"
        )
        if self.verify_checksums:
            raise ChecksumMismatch(detail, source=data.source)
        logger.warning(f"Checksum mismatch ignored: {detail}")

    def _check_unknown_functions(self, notes: NotesModel, data: DataModel):
        unknown = [c.identifier for c in data if notes.function(c.identifier) is None]
        if not unknown:
            return
        detail = f"counters for function ids not in notes file: {unknown[:10]}"
        if self.verify_checksums:
            raise ChecksumMismatch(detail, source=data.source)
        logger.warning(f"{data.source}: {detail}")

    def resolve_one(self, function: FunctionGraph, data: DataModel,
                    invocations: Optional[int] = None) -> ResolvedFunction:
        counts = data.get(function.identifier)
        if counts is None:
            logger.debug(f"{function.name}: no counters, never executed")
            raw = [0] * len(function.instrumented_arcs)
        else:
            self._check_reference(function, counts, data)
            raw = counts.counts

        try:
            resolved = resolve_function(function, raw, invocations)
        except (CountArityMismatch, UnresolvableFlowGraph) as e:
            e.locate(source=data.source)
            raise

        unbalanced = resolved.unbalanced_blocks()
        if unbalanced:
            detail = (
                f"function {function.name!r}: inflow != outflow "
                f"at blocks {unbalanced[:10]}"
            )
            if self.strict_conservation:
                raise UnresolvableFlowGraph(detail, source=data.source)
            logger.warning(f"Inconsistent counters: {detail}")

        logger.debug(
            f"{function.name}: {len(function.arcs)} arcs resolved, "
            f"invoked {resolved.invocations} times"
        )
        return resolved

    def resolve(self, notes: NotesModel, data: DataModel,
                invocations: Optional[Dict[int, int]] = None) -> CoverageModel:
        """
        Resolve every function of the notes file.

        Args:
            notes: Decoded notes file
            data: Decoded data file
            invocations: Optional known entry counts by function id

        Returns:
            CoverageModel with line and function hits per source path

        Raises:
            ChecksumMismatch: If the data file belongs to another compilation
            CountArityMismatch: If a function's counter count is wrong
            UnresolvableFlowGraph: If a function's arcs cannot be solved
        """
        if notes.stamp != data.stamp:
            logger.warning(
                f"Stamp mismatch: {notes.source} 0x{notes.stamp:08x}, "
                f"{data.source} 0x{data.stamp:08x}"
            )
        self._check_unknown_functions(notes, data)

        invocations = invocations or {}
        coverage = CoverageModel()
        for function in notes:
            resolved = self.resolve_one(
                function, data, invocations.get(function.identifier)
            )
            for block in function.blocks:
                count = resolved.block_counts[block.index]
                for ref in dict.fromkeys(block.lines):
                    coverage.file(ref.path).add_line(ref.line, count)
            coverage.file(function.source_path).add_function(
                function.name, function.start_line, resolved.invocations
            )
        return coverage


def resolve(
    notes: NotesModel,
    data: DataModel,
    verify_checksums: bool = True,
    strict_conservation: bool = False,
    invocations: Optional[Dict[int, int]] = None,
) -> CoverageModel:
    """Convenience wrapper around FlowResolver.resolve()."""
    resolver = FlowResolver(
        verify_checksums=verify_checksums,
        strict_conservation=strict_conservation,
    )
    return resolver.resolve(notes, data, invocations)
