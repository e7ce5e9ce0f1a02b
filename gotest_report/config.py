"""Action input configuration.

Inputs come from, in decreasing precedence: explicit overrides (command-line
flags), ``INPUT_*`` environment variables set by the GitHub Actions runner,
an optional JSON config file, and ``DEFAULT_CONFIG``.
"""

from __future__ import annotations

import json
import os
import shlex
from pathlib import Path
from typing import Any, Mapping

from gotest_report.reporting.detail_filter import DetailFilter

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "module_directory": ".",
    "test_arguments": ["./..."],
    "omit": "show-all",
    "from_json_file": None,
    "summary_file": None,
    "yaml_report": None,
}

# Config key -> environment variable
ENV_VARS: dict[str, str] = {
    "module_directory": "INPUT_MODULEDIRECTORY",
    "test_arguments": "INPUT_TESTARGUMENTS",
    "omit": "INPUT_OMIT",
    "from_json_file": "INPUT_FROMJSONFILE",
    "summary_file": "GITHUB_STEP_SUMMARY",
}


class ActionInputs:
    """Resolved inputs for one invocation."""

    def __init__(
        self,
        env: Mapping[str, str] | None = None,
        path: Path | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> None:
        self.path = path
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        if path is not None and path.exists():
            self._load()
        self._apply_env(os.environ if env is None else env)
        for key, value in (overrides or {}).items():
            if key in DEFAULT_CONFIG and value is not None:
                self._data[key] = value

    def _load(self) -> None:
        """Load config from the file."""
        assert self.path is not None
        try:
            text = self.path.read_text()
            data = json.loads(text)
            if isinstance(data, dict):
                self._data = {
                    **DEFAULT_CONFIG,
                    **{k: v for k, v in data.items() if k in DEFAULT_CONFIG},
                }
        except (json.JSONDecodeError, OSError):
            self._data = dict(DEFAULT_CONFIG)

    def _apply_env(self, env: Mapping[str, str]) -> None:
        for key, var in ENV_VARS.items():
            value = env.get(var, "").strip()
            if value:
                self._data[key] = value

    @property
    def config(self) -> dict[str, Any]:
        """Get the full configuration dict."""
        return dict(self._data)

    @property
    def module_directory(self) -> Path:
        return Path(self._data["module_directory"] or ".")

    @property
    def test_arguments(self) -> list[str]:
        """Arguments passed to ``go test -json``.

        A string value is split with shell quoting rules.

        Raises:
            ValueError: If the value cannot be split or is not a string or
                a list.
        """
        value = self._data["test_arguments"]
        if isinstance(value, str):
            try:
                return shlex.split(value)
            except ValueError as e:
                raise ValueError(f"Invalid test arguments {value!r}: {e}") from e
        if not isinstance(value, list):
            raise ValueError(
                f"Invalid test arguments {value!r}: expected a string or a list"
            )
        return [str(v) for v in value]

    @property
    def omit(self) -> DetailFilter:
        """The parsed detail filter.

        Raises:
            ValueError: If the configured omit value is not recognized.
        """
        return DetailFilter.parse(self._data["omit"])

    @property
    def from_json_file(self) -> Path | None:
        val = self._data["from_json_file"]
        return Path(val) if val else None

    @property
    def summary_file(self) -> Path | None:
        val = self._data["summary_file"]
        return Path(val) if val else None

    @property
    def yaml_report(self) -> Path | None:
        val = self._data["yaml_report"]
        return Path(val) if val else None
