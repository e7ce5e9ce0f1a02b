"""Decoder for ``go test -json`` event lines.

Each line from the structured stream is either a JSON test event or
free-form text (build errors, panics before tests registered, output from
tools that don't speak the event format).  ``decode_line`` classifies a
line into a ``TestEvent`` or a ``RawLine`` without ever raising, so one
bad line can never abort the rest of the stream.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

# Actions that end a test.  Other actions (start, run, pause, cont, bench,
# output, or anything newer) decode as events but never end a test.
TERMINAL_ACTIONS = frozenset({"pass", "fail", "skip"})

# Go 1.24+ reports compiler output as build-output and build-fail events.
# They name an ImportPath instead of a Package and belong to no test.
BUILD_ACTION_PREFIX = "build-"


@dataclass(frozen=True)
class TestEvent:
    """One decoded test2json record."""

    action: str
    package: str = ""
    test: str | None = None
    elapsed: float | None = None
    output: str | None = None
    time: str | None = None
    import_path: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.action in TERMINAL_ACTIONS

    @property
    def is_build(self) -> bool:
        return self.action.startswith(BUILD_ACTION_PREFIX)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TestEvent:
        """Build an event from a decoded JSON object.

        Fields of the wrong type are dropped rather than rejected; only
        ``Action`` is mandatory and is validated by the caller.
        """
        elapsed = data.get("Elapsed")
        if isinstance(elapsed, bool) or not isinstance(elapsed, (int, float)):
            elapsed = None
        test = data.get("Test")
        output = data.get("Output")
        package = data.get("Package")
        time = data.get("Time")
        import_path = data.get("ImportPath")
        return cls(
            action=data["Action"],
            package=package if isinstance(package, str) else "",
            test=test if isinstance(test, str) and test else None,
            elapsed=float(elapsed) if elapsed is not None else None,
            output=output if isinstance(output, str) else None,
            time=time if isinstance(time, str) else None,
            import_path=import_path if isinstance(import_path, str) else None,
        )


@dataclass(frozen=True)
class RawLine:
    """A line that is not a test event, carried verbatim."""

    text: str


DecodedLine = Union[TestEvent, RawLine]


def decode_line(line: str) -> DecodedLine:
    """Classify a single line as a test event or raw text.

    Blank lines, invalid JSON, JSON values that are not objects, and objects
    without a string ``Action`` field all come back as ``RawLine`` carrying
    the original text unchanged.

    Args:
        line: One line without its terminator.

    Returns:
        A ``TestEvent`` or a ``RawLine``.
    """
    stripped = line.strip()
    if not stripped or not stripped.startswith("{"):
        return RawLine(text=line)

    try:
        data = json.loads(stripped)
    except (json.JSONDecodeError, RecursionError):
        return RawLine(text=line)

    if not isinstance(data, dict) or not isinstance(data.get("Action"), str):
        return RawLine(text=line)

    return TestEvent.from_dict(data)


class Transcript:
    """Verbatim record of everything the structured stream carried.

    Raw lines are stored with their newline restored; event output
    fragments are stored exactly as emitted (test2json fragments already
    carry their own newlines).  Text that belongs to no test is also kept
    separately: raw lines, and the output of build events.
    """

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._raw: list[str] = []
        self._unattributed: list[str] = []

    def record(self, item: DecodedLine) -> None:
        """Append a classified line to the transcript."""
        if isinstance(item, RawLine):
            text = item.text + "\n"
            self._parts.append(text)
            self._raw.append(text)
            self._unattributed.append(text)
        elif item.output:
            self._parts.append(item.output)
            if item.is_build:
                self._unattributed.append(item.output)

    def text(self) -> str:
        """The full transcript in arrival order."""
        return "".join(self._parts)

    def raw_text(self) -> str:
        """Only the lines that could not be decoded as events."""
        return "".join(self._raw)

    def unattributed_text(self) -> str:
        """Raw lines and build output, in arrival order."""
        return "".join(self._unattributed)

    @property
    def raw_lines(self) -> list[str]:
        return [r.rstrip("\n") for r in self._raw]


class EventDecoder:
    """Classifies lines and records them in a transcript.

    Blank lines are suppressed: ``decode`` returns ``None`` for them and
    they are not recorded.
    """

    def __init__(self, transcript: Transcript | None = None) -> None:
        self.transcript = transcript if transcript is not None else Transcript()
        self.raw_count = 0

    def decode(self, line: str) -> DecodedLine | None:
        if not line.strip():
            return None
        item = decode_line(line)
        if isinstance(item, RawLine):
            self.raw_count += 1
        self.transcript.record(item)
        return item


def parse_test_events(
    text: str, transcript: Transcript | None = None,
) -> list[DecodedLine]:
    """Decode a complete ``go test -json`` buffer.

    Used when replaying a saved event file instead of running tests.

    Args:
        text: Entire file contents.
        transcript: Optional transcript to record into.

    Returns:
        Classified lines in order, blank lines omitted.
    """
    decoder = EventDecoder(transcript)
    items: list[DecodedLine] = []
    for line in text.split("\n"):
        item = decoder.decode(line)
        if item is not None:
            items.append(item)
    return items
