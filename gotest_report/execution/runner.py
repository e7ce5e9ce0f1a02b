"""Runs ``go test -json`` and streams its output through the pipelines.

The two output streams are pumped concurrently in worker threads (the
same ``run_in_executor`` approach used for blocking subprocess work
elsewhere), each feeding its own pipeline.  The result is returned only
after the process exited and both streams were drained and closed.
"""

from __future__ import annotations

import asyncio
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import IO, TextIO

from gotest_report.execution.pipeline import (
    DiagnosticPipeline,
    StructuredPipeline,
    Writer,
)
from gotest_report.results.tree import ResultTree
from gotest_report.stream.event_decoder import Transcript

# Exit code reported when the go binary cannot be started, matching the
# shell's "command not found".
EXIT_NOT_FOUND = 127

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class RunResult:
    """Everything the renderer needs from one test run."""

    exit_code: int
    tree: ResultTree
    transcript: Transcript
    stderr: str = ""


def _stream_writer(stream: TextIO | None) -> Writer | None:
    if stream is None:
        return None

    def write(text: str) -> None:
        stream.write(text)
        stream.flush()

    return write


class GoTestRunner:
    """Executes ``go test -json`` with the configured arguments.

    Args:
        module_directory: Working directory for the go command.
        test_arguments: Arguments passed after ``go test -json``.
        stdout: Stream receiving the live passthrough of test output.
        stderr: Stream receiving the live passthrough of stderr.
        go_binary: Name or path of the go executable.
        chunk_size: Maximum bytes read from a pipe at once.
    """

    def __init__(
        self,
        module_directory: Path,
        test_arguments: list[str],
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        go_binary: str = "go",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.module_directory = Path(module_directory)
        self.test_arguments = list(test_arguments)
        self.stdout = stdout
        self.stderr = stderr
        self.go_binary = go_binary
        self.chunk_size = chunk_size

    @property
    def command(self) -> list[str]:
        return [self.go_binary, "test", "-json", *self.test_arguments]

    def run(self) -> RunResult:
        """Run the tests and return the finished results."""
        return asyncio.run(self._run_async())

    async def _run_async(self) -> RunResult:
        structured = StructuredPipeline(write=_stream_writer(self.stdout))
        diagnostic = DiagnosticPipeline(write=_stream_writer(self.stderr))

        try:
            proc = subprocess.Popen(
                self.command,
                cwd=self.module_directory,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError:
            message = f"Executable not found: {self.go_binary}"
            print(f"Error: {message}", file=sys.stderr)
            return RunResult(
                exit_code=EXIT_NOT_FOUND,
                tree=structured.tree,
                transcript=structured.transcript,
                stderr=message + "\n",
            )
        except OSError as e:
            message = f"OS error running {self.go_binary}: {e}"
            print(f"Error: {message}", file=sys.stderr)
            return RunResult(
                exit_code=EXIT_NOT_FOUND,
                tree=structured.tree,
                transcript=structured.transcript,
                stderr=message + "\n",
            )

        assert proc.stdout is not None and proc.stderr is not None
        loop = asyncio.get_running_loop()
        try:
            await asyncio.gather(
                loop.run_in_executor(None, self._pump, proc.stdout, structured),
                loop.run_in_executor(None, self._pump, proc.stderr, diagnostic),
            )
        except BaseException:
            # A failed pump leaves the child unread; stop it before raising.
            if proc.poll() is None:
                proc.kill()
            proc.wait()
            raise
        exit_code = await loop.run_in_executor(None, proc.wait)

        return RunResult(
            exit_code=exit_code,
            tree=structured.tree,
            transcript=structured.transcript,
            stderr=diagnostic.text(),
        )

    def _pump(
        self,
        pipe: IO[bytes],
        pipeline: StructuredPipeline | DiagnosticPipeline,
    ) -> None:
        """Feed one pipe to its pipeline until EOF, then flush it."""
        try:
            while True:
                chunk = pipe.read1(self.chunk_size)  # type: ignore[attr-defined]
                if not chunk:
                    break
                pipeline.feed(chunk)
        finally:
            pipe.close()
        pipeline.close()


def replay_json_file(path: Path, stdout: TextIO | None = None) -> RunResult:
    """Build results from a saved ``go test -json`` output file.

    Args:
        path: File holding the event stream.
        stdout: Optional stream for passthrough of the replayed output.

    Raises:
        OSError: If the file cannot be read.
    """
    structured = StructuredPipeline(write=_stream_writer(stdout))
    with open(path, "rb") as f:
        while True:
            chunk = f.read(DEFAULT_CHUNK_SIZE)
            if not chunk:
                break
            structured.feed(chunk)
    structured.close()
    return RunResult(
        exit_code=0,
        tree=structured.tree,
        transcript=structured.transcript,
    )
