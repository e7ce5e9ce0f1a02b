"""Tests for the per-stream pipelines."""

from __future__ import annotations

from gotest_report.execution.pipeline import DiagnosticPipeline, StructuredPipeline
from gotest_report.results.tree import FAILED, PASSED

STREAM = (
    b"# example.com/mod/broken\n"
    b'{"Action":"run","Package":"p","Test":"TestA"}\n'
    b'{"Action":"output","Package":"p","Test":"TestA","Output":"=== RUN   TestA\\n"}\n'
    b'{"Action":"pass","Package":"p","Test":"TestA","Elapsed":0}\n'
    b'{"Action":"run","Package":"p","Test":"TestB"}\n'
    b'{"Action":"output","Package":"p","Test":"TestB","Output":"bad\\n"}\n'
    b'{"Action":"fail","Package":"p","Test":"TestB","Elapsed":0.1}'
)


def _run_structured(chunks: list[bytes]) -> tuple[StructuredPipeline, list[str]]:
    written: list[str] = []
    pipeline = StructuredPipeline(write=written.append)
    for chunk in chunks:
        pipeline.feed(chunk)
    pipeline.close()
    return pipeline, written


class TestStructuredPipeline:
    """Tests for the stdout pipeline."""

    def test_builds_tree(self):
        """Events are applied to the tree."""
        pipeline, _ = _run_structured([STREAM])
        assert pipeline.tree.lookup("p", "TestA").status == PASSED
        assert pipeline.tree.lookup("p", "TestB").status == FAILED

    def test_unterminated_final_event_applied(self):
        """The last event without a newline is applied on close."""
        pipeline = StructuredPipeline()
        pipeline.feed(STREAM)
        assert pipeline.tree.lookup("p", "TestB").status != FAILED
        pipeline.close()
        assert pipeline.tree.lookup("p", "TestB").status == FAILED

    def test_passthrough_is_incremental(self):
        """Passthrough text is written as each line completes."""
        written: list[str] = []
        pipeline = StructuredPipeline(write=written.append)
        pipeline.feed(b'{"Action":"output","Test":"T","Output":"first\\n"}\n{"Act')
        assert written == ["first\n"]
        pipeline.feed(b'ion":"output","Test":"T","Output":"second\\n"}\n')
        assert written == ["first\n", "second\n"]

    def test_passthrough_content(self):
        """Raw lines and output fragments are passed through in order."""
        _, written = _run_structured([STREAM])
        assert written == [
            "# example.com/mod/broken\n",
            "=== RUN   TestA\n",
            "bad\n",
        ]

    def test_byte_at_a_time_matches(self):
        """Feeding one byte at a time gives the same tree and passthrough."""
        whole, whole_written = _run_structured([STREAM])
        single, single_written = _run_structured(
            [STREAM[i:i + 1] for i in range(len(STREAM))]
        )
        assert single_written == whole_written
        assert single.transcript.text() == whole.transcript.text()
        assert single.tree.event_count == whole.tree.event_count

    def test_transcript_keeps_raw_lines(self):
        """Raw lines are kept for the unattributed diagnostics section."""
        pipeline, _ = _run_structured([STREAM])
        assert pipeline.transcript.raw_lines == ["# example.com/mod/broken"]

    def test_build_events_not_in_tree(self):
        """Build events pass through but add no package node."""
        pipeline, written = _run_structured([
            b'{"ImportPath":"p [p.test]","Action":"build-output","Output":"p.go:1: bad\\n"}\n'
            b'{"ImportPath":"p [p.test]","Action":"build-fail"}\n'
        ])
        assert written == ["p.go:1: bad\n"]
        assert pipeline.tree.packages() == []
        assert pipeline.transcript.unattributed_text() == "p.go:1: bad\n"


class TestDiagnosticPipeline:
    """Tests for the stderr pipeline."""

    def test_collects_lines(self):
        """stderr text is collected line by line across chunks."""
        written: list[str] = []
        pipeline = DiagnosticPipeline(write=written.append)
        pipeline.feed(b"warning: one\nwarn")
        pipeline.feed(b"ing: two")
        pipeline.close()
        assert pipeline.text() == "warning: one\nwarning: two\n"
        assert written == ["warning: one\n", "warning: two\n"]

    def test_empty(self):
        """No input yields empty text."""
        pipeline = DiagnosticPipeline()
        pipeline.close()
        assert pipeline.text() == ""
