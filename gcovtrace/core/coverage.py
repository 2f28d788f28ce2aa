"""
Resolved coverage: per-line and per-function execution counts grouped by
source file. This is what the Flow Resolver produces and the Report
Emitter consumes; it holds no reference to the decoded graphs.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple


@dataclass(frozen=True)
class LineHit:
    """Execution count of one source line."""
    source_path: str
    line_number: int
    count: int


@dataclass
class FunctionHit:
    """Execution count of one function (its entry block count)."""
    source_path: str
    name: str
    start_line: int
    count: int = 0


@dataclass
class FileCoverage:
    """
    Coverage for one source file.

    Attributes:
        path: Source path as recorded in the notes file
        functions: Functions defined in this file, in declaration order
        lines: Line number -> summed execution count
    """
    path: str
    functions: List[FunctionHit] = field(default_factory=list)
    lines: Dict[int, int] = field(default_factory=dict)

    def add_line(self, line_number: int, count: int):
        self.lines[line_number] = self.lines.get(line_number, 0) + count

    def add_function(self, name: str, start_line: int, count: int) -> FunctionHit:
        """Record a function hit, summing into an existing entry of the same name."""
        for hit in self.functions:
            if hit.name == name:
                hit.count += count
                return hit
        hit = FunctionHit(self.path, name, start_line, count)
        self.functions.append(hit)
        return hit

    def line_hits(self) -> List[LineHit]:
        """Line hits in ascending line order."""
        return [
            LineHit(self.path, line, self.lines[line])
            for line in sorted(self.lines)
        ]

    @property
    def lines_found(self) -> int:
        return len(self.lines)

    @property
    def lines_hit(self) -> int:
        return sum(1 for count in self.lines.values() if count > 0)

    @property
    def functions_found(self) -> int:
        return len(self.functions)

    @property
    def functions_hit(self) -> int:
        return sum(1 for hit in self.functions if hit.count > 0)


@dataclass
class CoverageModel:
    """Coverage for every source file referenced by one notes/data pair."""

    files: Dict[str, FileCoverage] = field(default_factory=dict)

    def file(self, path: str) -> FileCoverage:
        """Get coverage for path, creating an empty entry if needed."""
        if path not in self.files:
            self.files[path] = FileCoverage(path)
        return self.files[path]

    @property
    def paths(self) -> List[str]:
        """Source paths in lexicographic order."""
        return sorted(self.files)

    def __iter__(self) -> Iterator[FileCoverage]:
        for path in self.paths:
            yield self.files[path]

    def __len__(self) -> int:
        return len(self.files)

    @property
    def line_hits(self) -> Dict[Tuple[str, int], int]:
        return {
            (path, line): count
            for path, cov in self.files.items()
            for line, count in cov.lines.items()
        }

    @property
    def function_hits(self) -> Dict[Tuple[str, str], int]:
        return {
            (path, hit.name): hit.count
            for path, cov in self.files.items()
            for hit in cov.functions
        }

    def summary(self) -> dict:
        """Found/hit totals across all files."""
        return {
            'files': len(self.files),
            'lines_found': sum(f.lines_found for f in self.files.values()),
            'lines_hit': sum(f.lines_hit for f in self.files.values()),
            'functions_found': sum(f.functions_found for f in self.files.values()),
            'functions_hit': sum(f.functions_hit for f in self.files.values()),
        }
