"""Tests for incremental line splitting."""

from __future__ import annotations

import pytest

from gotest_report.stream.line_splitter import (
    LineSplitter,
    StreamClosedError,
    split_chunks,
)

SAMPLE = (
    '{"Action":"run","Test":"TestX"}\n'
    '{"Action":"output","Test":"TestX","Output":"want 1 got 2\\n"}\n'
    "\n"
    "# example.com/mod [build failed] éè\n"
    '{"Action":"fail","Test":"TestX","Elapsed":0.01}'
).encode("utf-8")


def _feed(chunks: list[bytes]) -> list[str]:
    splitter = LineSplitter()
    lines: list[str] = []
    for chunk in chunks:
        lines.extend(splitter.accept(chunk))
    lines.extend(splitter.finish())
    return lines


class TestSingleChunk:
    """Tests for a stream delivered in one chunk."""

    def test_splits_on_newline(self):
        """Each newline-terminated span becomes one line."""
        assert _feed([b"a\nb\nc\n"]) == ["a", "b", "c"]

    def test_blank_lines_preserved(self):
        """Empty lines between terminators are forwarded as ''."""
        assert _feed([b"a\n\n\nb\n"]) == ["a", "", "", "b"]

    def test_trailing_partial_line(self):
        """An unterminated final line is emitted on finish."""
        assert _feed([b"a\nlast"]) == ["a", "last"]

    def test_empty_stream(self):
        """No chunks means no lines."""
        assert _feed([]) == []

    def test_carriage_return_kept(self):
        """A CRLF line keeps its carriage return."""
        assert _feed([b"a\r\nb\n"]) == ["a\r", "b"]


class TestChunkBoundaries:
    """Tests for lines spanning chunk boundaries."""

    def test_line_split_across_two_chunks(self):
        """A line is emitted once both halves arrived."""
        splitter = LineSplitter()
        assert splitter.accept(b"hel") == []
        assert splitter.accept(b"lo\nwor") == ["hello"]
        assert splitter.pending == b"wor"
        assert splitter.finish() == ["wor"]

    def test_line_split_across_many_chunks(self):
        """A line spread over more than two chunks is assembled once."""
        chunks = [b"{", b'"Action"', b":", b'"run"', b"}", b"\n"]
        assert _feed(chunks) == ['{"Action":"run"}']

    def test_terminator_alone_in_chunk(self):
        """A chunk holding only the terminator completes the pending line."""
        assert _feed([b"abc", b"\n", b"def"]) == ["abc", "def"]

    def test_multibyte_character_split(self):
        """A UTF-8 character split across chunks decodes intact."""
        data = "café\n".encode("utf-8")
        assert _feed([data[:4], data[4:]]) == ["café"]

    @pytest.mark.parametrize("size", [1, 2, 3, 7, 16, 64])
    def test_fixed_size_chunking_matches_single_chunk(self, size):
        """Re-chunking at any size yields the same lines."""
        chunks = [SAMPLE[i:i + size] for i in range(0, len(SAMPLE), size)]
        assert _feed(chunks) == _feed([SAMPLE])

    def test_every_two_way_split_matches(self):
        """Every single split point yields the same lines."""
        expected = _feed([SAMPLE])
        for i in range(len(SAMPLE) + 1):
            assert _feed([SAMPLE[:i], SAMPLE[i:]]) == expected

    def test_no_byte_loss(self):
        """Joining the lines with terminators reproduces the input."""
        chunks = [SAMPLE[i:i + 5] for i in range(0, len(SAMPLE), 5)]
        lines = _feed(chunks)
        assert "\n".join(lines).encode("utf-8") == SAMPLE

    def test_no_byte_loss_with_trailing_terminator(self):
        """A trailing newline is the last terminator, not an extra line."""
        data = SAMPLE + b"\n"
        lines = _feed([data[:10], data[10:]])
        assert "".join(line + "\n" for line in lines).encode("utf-8") == data


class TestFinish:
    """Tests for end-of-stream handling."""

    def test_finish_is_idempotent(self):
        """A second finish emits nothing."""
        splitter = LineSplitter()
        splitter.accept(b"tail")
        assert splitter.finish() == ["tail"]
        assert splitter.finish() == []
        assert splitter.finished

    def test_accept_after_finish_raises(self):
        """Chunks after end of stream are rejected."""
        splitter = LineSplitter()
        splitter.finish()
        with pytest.raises(StreamClosedError):
            splitter.accept(b"late\n")

    def test_empty_chunk_is_noop(self):
        """An empty chunk emits nothing and keeps pending bytes."""
        splitter = LineSplitter()
        splitter.accept(b"ab")
        assert splitter.accept(b"") == []
        assert splitter.pending == b"ab"

    def test_instances_do_not_share_buffers(self):
        """Two splitters keep independent pending buffers."""
        out = LineSplitter()
        err = LineSplitter()
        out.accept(b"stdout part")
        err.accept(b"stderr part")
        assert out.finish() == ["stdout part"]
        assert err.finish() == ["stderr part"]


class TestSplitChunks:
    """Tests for the generator wrapper."""

    def test_yields_lines_lazily(self):
        """Lines are yielded before later chunks are consumed."""
        consumed: list[int] = []

        def chunks():
            for i, chunk in enumerate([b"one\n", b"two\n", b"three"]):
                consumed.append(i)
                yield chunk

        gen = split_chunks(chunks())
        assert next(gen) == "one"
        assert consumed == [0]
        assert list(gen) == ["two", "three"]
