"""Go module name resolution from ``go.mod``."""

from __future__ import annotations

import re
import sys
from pathlib import Path

_MODULE_RE = re.compile(r"^\s*module\s+(\S+)")


def parse_module_name(contents: str) -> str | None:
    """Return the module path declared in ``go.mod`` contents, if any."""
    for line in contents.splitlines():
        line = line.split("//", 1)[0]
        match = _MODULE_RE.match(line)
        if match:
            return match.group(1).strip('"`')
    return None


def find_module_name(module_directory: Path) -> str | None:
    """Deduce the Go module name from ``go.mod`` in a directory.

    Args:
        module_directory: Directory expected to hold ``go.mod``.

    Returns:
        The module path, or None if the file is missing or has no
        ``module`` directive.
    """
    path = Path(module_directory).resolve() / "go.mod"
    try:
        contents = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        print(f"module name: unable to read {path}: {e}", file=sys.stderr)
        return None

    name = parse_module_name(contents)
    if name is None:
        print(f"module name: no module directive found in {path}", file=sys.stderr)
    return name
