"""Byte stream decoding: line splitting and test event classification."""

from gotest_report.stream.event_decoder import (
    DecodedLine,
    EventDecoder,
    RawLine,
    TestEvent,
    Transcript,
    decode_line,
    parse_test_events,
)
from gotest_report.stream.line_splitter import LineSplitter, StreamClosedError, split_chunks

__all__ = [
    "DecodedLine",
    "EventDecoder",
    "LineSplitter",
    "RawLine",
    "StreamClosedError",
    "TestEvent",
    "Transcript",
    "decode_line",
    "parse_test_events",
    "split_chunks",
]
