"""
Tracefile (lcov .info) rendering.

One record per source path, paths in lexicographic order:

    TN:<test name>
    SF:<path>
    FN:<start line>,<function name>     declaration order
    FNDA:<count>,<function name>        declaration order
    FNF:<functions found>
    FNH:<functions hit>
    DA:<line>,<count>                   ascending line
    LF:<lines found>
    LH:<lines hit>
    end_of_record
"""

from pathlib import Path
from typing import Iterator, List, TextIO, Union

from .coverage import CoverageModel, FileCoverage


END_OF_RECORD = 'end_of_record'


class TracefileWriter:
    """
    Renders a CoverageModel as tracefile text.

    Attributes:
        test_name: Value of the TN: line (empty by default)
        function_coverage: Emit FN/FNDA/FNF/FNH lines
    """

    def __init__(self, test_name: str = '', function_coverage: bool = True):
        self.test_name = test_name
        self.function_coverage = function_coverage

    def record_lines(self, cov: FileCoverage) -> List[str]:
        """Tracefile lines for one source file."""
        lines = [f"TN:{self.test_name}", f"SF:{cov.path}"]

        if self.function_coverage:
            lines.extend(f"FN:{fn.start_line},{fn.name}" for fn in cov.functions)
            lines.extend(f"FNDA:{fn.count},{fn.name}" for fn in cov.functions)
            lines.append(f"FNF:{cov.functions_found}")
            lines.append(f"FNH:{cov.functions_hit}")

        lines.extend(f"DA:{hit.line_number},{hit.count}" for hit in cov.line_hits())
        lines.append(f"LF:{cov.lines_found}")
        lines.append(f"LH:{cov.lines_hit}")
        lines.append(END_OF_RECORD)
        return lines

    def iter_lines(self, coverage: CoverageModel) -> Iterator[str]:
        for cov in coverage:
            yield from self.record_lines(cov)

    def render(self, coverage: CoverageModel) -> str:
        return ''.join(f"{line}\n" for line in self.iter_lines(coverage))

    def write(self, coverage: CoverageModel, out: Union[Path, str, TextIO]):
        """Write to a path or an open text stream."""
        if isinstance(out, (str, Path)):
            Path(out).write_text(self.render(coverage))
            return
        for line in self.iter_lines(coverage):
            out.write(f"{line}\n")


def render(coverage: CoverageModel, test_name: str = '',
           function_coverage: bool = True) -> str:
    """Render coverage as tracefile text."""
    return TracefileWriter(test_name, function_coverage).render(coverage)
