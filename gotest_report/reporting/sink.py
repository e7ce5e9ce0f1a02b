"""Destinations for the rendered summary document.

The summary is appended in one scoped operation: either the whole
document lands in the sink or a ``SummaryWriteError`` is raised and the
file is restored to its previous length.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import TextIO


class SummaryWriteError(OSError):
    """The summary document could not be written."""


class FileSummarySink:
    """Appends documents to a file such as ``$GITHUB_STEP_SUMMARY``."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def append(self, document: str) -> None:
        """Append ``document`` to the file.

        Raises:
            SummaryWriteError: If the file cannot be opened or written.
                Any partially written bytes are truncated away first.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            original_size = self.path.stat().st_size if self.path.exists() else 0
        except OSError as e:
            raise SummaryWriteError(
                f"Unable to access summary file {self.path}: {e}"
            ) from e

        data = document.encode("utf-8")
        try:
            with open(self.path, "ab") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            self._rollback(original_size)
            raise SummaryWriteError(
                f"Unable to write summary file {self.path}: {e}"
            ) from e

    def _rollback(self, size: int) -> None:
        try:
            with open(self.path, "r+b") as f:
                f.truncate(size)
        except OSError as e:
            print(
                f"Warning: could not restore {self.path} after failed write: {e}",
                file=sys.stderr,
            )


class StreamSummarySink:
    """Writes documents to a text stream, stdout by default."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream

    def append(self, document: str) -> None:
        stream = self.stream if self.stream is not None else sys.stdout
        try:
            stream.write(document)
            stream.flush()
        except (OSError, ValueError) as e:
            raise SummaryWriteError(f"Unable to write summary: {e}") from e
