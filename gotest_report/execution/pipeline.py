"""Per-stream processing pipelines.

Each pipeline owns its own ``LineSplitter``, so the stdout and stderr
streams never share a pending buffer.  ``StructuredPipeline`` is the only
writer to the ``ResultTree``; ``DiagnosticPipeline`` only collects text, so
the two can be fed from different threads.
"""

from __future__ import annotations

from typing import Callable

from gotest_report.reporting.renderer import passthrough_text
from gotest_report.results.tree import ResultTree
from gotest_report.stream.event_decoder import EventDecoder, TestEvent, Transcript
from gotest_report.stream.line_splitter import LineSplitter

Writer = Callable[[str], object]


class StructuredPipeline:
    """stdout of ``go test -json``: lines -> events -> result tree.

    Args:
        tree: Tree to build.  Created if not given.
        transcript: Transcript to record into.  Created if not given.
        write: Called with console passthrough text as each line is
            classified.  None disables passthrough.
    """

    def __init__(
        self,
        tree: ResultTree | None = None,
        transcript: Transcript | None = None,
        write: Writer | None = None,
    ) -> None:
        self.tree = tree if tree is not None else ResultTree()
        self.decoder = EventDecoder(transcript)
        self.splitter = LineSplitter()
        self.write = write

    @property
    def transcript(self) -> Transcript:
        return self.decoder.transcript

    def feed(self, chunk: bytes) -> None:
        self._handle(self.splitter.accept(chunk))

    def close(self) -> None:
        self._handle(self.splitter.finish())

    def _handle(self, lines: list[str]) -> None:
        for line in lines:
            item = self.decoder.decode(line)
            if item is None:
                continue
            if isinstance(item, TestEvent):
                self.tree.apply(item)
            if self.write is not None:
                text = passthrough_text(item)
                if text:
                    self.write(text)


class DiagnosticPipeline:
    """stderr of the test process: lines collected and passed through."""

    def __init__(self, write: Writer | None = None) -> None:
        self.splitter = LineSplitter()
        self.write = write
        self._lines: list[str] = []

    def feed(self, chunk: bytes) -> None:
        self._handle(self.splitter.accept(chunk))

    def close(self) -> None:
        self._handle(self.splitter.finish())

    def text(self) -> str:
        return "".join(line + "\n" for line in self._lines)

    def _handle(self, lines: list[str]) -> None:
        for line in lines:
            self._lines.append(line)
            if self.write is not None:
                self.write(line + "\n")
