"""Detail filter for the rendered summary.

Controls which non-failing entries appear in the detail listing.  Failed
entries and interrupted (still running) entries are always listed, and the
aggregate counts never depend on the filter.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from gotest_report.results.tree import FAILED, PASSED, RUNNING, SKIPPED

# Named presets accepted by ``DetailFilter.parse``.
PRESETS: dict[str, frozenset[str]] = {
    "show-all": frozenset(),
    "omit-passed": frozenset({"passed"}),
    "omit-skipped": frozenset({"skipped"}),
    "omit-both": frozenset({"passed", "skipped"}),
}

# Individual tokens for the comma-separated form.  ``successful`` is an
# alias for ``passed``; ``untested`` hides packages without test files.
_TOKENS: dict[str, str] = {
    "passed": "passed",
    "successful": "passed",
    "skipped": "skipped",
    "untested": "untested",
}


@dataclass(frozen=True)
class DetailFilter:
    """Which entries to omit from the detail listing."""

    omit_passed: bool = False
    omit_skipped: bool = False
    omit_untested: bool = False

    @classmethod
    def parse(cls, value: str | None) -> DetailFilter:
        """Parse a preset name or a comma-separated list of omit tokens.

        Args:
            value: ``show-all``, ``omit-passed``, ``omit-skipped``,
                ``omit-both``, or tokens such as ``"passed,untested"``.
                ``None`` and the empty string mean show-all.

        Raises:
            ValueError: If the value contains an unknown token.
        """
        if value is None or not value.strip():
            return cls()

        key = value.strip().lower()
        if key in PRESETS:
            omitted = PRESETS[key]
        else:
            omitted_set: set[str] = set()
            for token in re.split(r"[,\s]+", key):
                if not token:
                    continue
                if token not in _TOKENS:
                    valid = sorted(set(PRESETS) | set(_TOKENS))
                    raise ValueError(
                        f"Unknown omit value {token!r} "
                        f"(expected one of: {', '.join(valid)})"
                    )
                omitted_set.add(_TOKENS[token])
            omitted = frozenset(omitted_set)

        return cls(
            omit_passed="passed" in omitted,
            omit_skipped="skipped" in omitted,
            omit_untested="untested" in omitted,
        )

    @property
    def name(self) -> str:
        """Canonical name, used in report metadata."""
        if self.omit_untested:
            parts = [
                token
                for token, flag in (
                    ("passed", self.omit_passed),
                    ("skipped", self.omit_skipped),
                    ("untested", self.omit_untested),
                )
                if flag
            ]
            return ",".join(parts)
        if self.omit_passed and self.omit_skipped:
            return "omit-both"
        if self.omit_passed:
            return "omit-passed"
        if self.omit_skipped:
            return "omit-skipped"
        return "show-all"

    def shows(self, status: str) -> bool:
        """Whether an entry with this effective status is listed."""
        if status in (FAILED, RUNNING):
            return True
        if status == PASSED:
            return not self.omit_passed
        if status == SKIPPED:
            return not self.omit_skipped
        return True
