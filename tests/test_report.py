"""
Tests for tracefile rendering.
"""

import io

from gcovtrace.core.coverage import CoverageModel
from gcovtrace.core.report import TracefileWriter, render
from gcovtrace.core.resolver import resolve
from gcovtrace.decoders import decode_data, decode_notes


def _coverage() -> CoverageModel:
    coverage = CoverageModel()
    b = coverage.file("src/b.c")
    b.add_line(20, 0)
    b.add_line(4, 2)
    b.add_function("helper", 3, 2)
    a = coverage.file("src/a.c")
    a.add_line(9, 1)
    a.add_function("zeta", 8, 1)
    a.add_function("alpha", 1, 0)
    return coverage


class TestTracefileLayout:
    """Test record layout and ordering."""

    def test_sample_tracefile(self, notes_bytes, data_bytes, expected_tracefile):
        """The sample pair renders to the expected tracefile."""
        coverage = resolve(decode_notes(notes_bytes), decode_data(data_bytes))

        assert render(coverage) == expected_tracefile

    def test_paths_sorted(self):
        """Records are emitted in lexicographic path order."""
        text = render(_coverage())

        sf_lines = [line for line in text.splitlines() if line.startswith("SF:")]
        assert sf_lines == ["SF:src/a.c", "SF:src/b.c"]

    def test_lines_ascending(self):
        """DA lines are sorted by line number regardless of insertion order."""
        text = render(_coverage())

        b_record = text.split("end_of_record\n")[1]
        assert b_record.index("DA:4,2") < b_record.index("DA:20,0")

    def test_functions_in_declaration_order(self):
        """FN and FNDA lines keep declaration order."""
        writer = TracefileWriter()

        lines = writer.record_lines(_coverage().file("src/a.c"))

        assert lines == [
            "TN:",
            "SF:src/a.c",
            "FN:8,zeta",
            "FN:1,alpha",
            "FNDA:1,zeta",
            "FNDA:0,alpha",
            "FNF:2",
            "FNH:1",
            "DA:9,1",
            "LF:1",
            "LH:1",
            "end_of_record",
        ]

    def test_found_and_hit(self):
        """Lines with a zero count are found but not hit."""
        lines = TracefileWriter().record_lines(_coverage().file("src/b.c"))

        assert "LF:2" in lines
        assert "LH:1" in lines

    def test_every_record_terminated(self):
        """Each record ends with end_of_record."""
        text = render(_coverage())

        assert text.count("end_of_record\n") == 2
        assert text.endswith("end_of_record\n")

    def test_empty_coverage(self):
        """No source files, no output."""
        assert render(CoverageModel()) == ""


class TestWriterOptions:
    """Test test name and function coverage settings."""

    def test_test_name(self):
        """TN carries the configured test name."""
        text = render(_coverage(), test_name="unit")

        assert text.startswith("TN:unit\n")
        assert text.count("TN:unit\n") == 2

    def test_function_coverage_disabled(self):
        """Without function coverage only line data is written."""
        text = render(_coverage(), function_coverage=False)

        for prefix in ("FN:", "FNDA:", "FNF:", "FNH:"):
            assert prefix not in text
        assert "DA:9,1" in text

    def test_write_to_stream(self):
        """Writing to a stream matches render()."""
        stream = io.StringIO()

        TracefileWriter(test_name="t").write(_coverage(), stream)

        assert stream.getvalue() == render(_coverage(), test_name="t")

    def test_write_to_path(self, tmp_path):
        """Writing to a path creates the file."""
        out = tmp_path / "coverage.info"

        TracefileWriter().write(_coverage(), out)

        assert out.read_text() == render(_coverage())


class TestCoverageModel:
    """Test aggregation helpers."""

    def test_function_hits_summed_by_name(self):
        """Two functions with the same name in one file merge."""
        coverage = CoverageModel()
        cov = coverage.file("x.c")
        cov.add_function("f", 1, 2)
        cov.add_function("f", 1, 3)

        assert coverage.function_hits == {("x.c", "f"): 5}
        assert cov.functions_found == 1

    def test_summary(self):
        """Summary totals span every file."""
        assert _coverage().summary() == {
            'files': 2,
            'lines_found': 3,
            'lines_hit': 2,
            'functions_found': 3,
            'functions_hit': 2,
        }
