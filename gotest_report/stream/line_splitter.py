"""Incremental line splitting over a byte chunk stream.

A test process writes to its pipes in whatever sizes the OS hands back, so
a single JSON record may be split across any number of reads.  The
``LineSplitter`` owns a pending buffer and only emits a line once its
terminator (or the end of the stream) has been seen.

Lines are decoded as UTF-8 after assembly, so a multi-byte character that
straddles a chunk boundary is never mangled.
"""

from __future__ import annotations

from typing import Iterable, Iterator

# Line terminator emitted by go test and by most tools on all platforms.
# A preceding "\r" is left in the line so no byte is dropped.
TERMINATOR = b"\n"


class StreamClosedError(RuntimeError):
    """Raised when a chunk arrives after the stream was finished."""


class LineSplitter:
    """Turns an ordered sequence of byte chunks into complete text lines.

    Usage::

        splitter = LineSplitter()
        for chunk in chunks:
            for line in splitter.accept(chunk):
                handle(line)
        for line in splitter.finish():
            handle(line)

    Emitted lines do not include the ``\\n`` terminator.  Blank lines are
    emitted as ``""``.  Joining every emitted line with ``"\\n"`` reproduces
    the decoded input exactly, except that a trailing terminator on the
    final line is implied.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self._pending = bytearray()
        self._finished = False

    @property
    def pending(self) -> bytes:
        """Bytes received but not yet emitted as part of a line."""
        return bytes(self._pending)

    @property
    def finished(self) -> bool:
        return self._finished

    def accept(self, chunk: bytes) -> list[str]:
        """Append a chunk and return every line it completed.

        Args:
            chunk: Next bytes of the stream, in delivery order.

        Returns:
            Lines completed by this chunk, possibly empty.

        Raises:
            StreamClosedError: If ``finish()`` was already called.
        """
        if self._finished:
            raise StreamClosedError("chunk received after end of stream")
        if not chunk:
            return []

        self._pending.extend(chunk)
        lines: list[str] = []
        start = 0
        while True:
            end = self._pending.find(TERMINATOR, start)
            if end < 0:
                break
            lines.append(self._decode(self._pending[start:end]))
            start = end + len(TERMINATOR)
        if start:
            del self._pending[:start]
        return lines

    def finish(self) -> list[str]:
        """Signal end of stream and flush an unterminated final line.

        Safe to call more than once; later calls return an empty list.
        """
        if self._finished:
            return []
        self._finished = True
        if not self._pending:
            return []
        line = self._decode(self._pending)
        self._pending.clear()
        return [line]

    def _decode(self, data: bytes | bytearray) -> str:
        return bytes(data).decode(self.encoding, errors="replace")


def split_chunks(chunks: Iterable[bytes], encoding: str = "utf-8") -> Iterator[str]:
    """Yield lines from an iterable of chunks as soon as each completes."""
    splitter = LineSplitter(encoding=encoding)
    for chunk in chunks:
        yield from splitter.accept(chunk)
    yield from splitter.finish()
