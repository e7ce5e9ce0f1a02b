"""Machine-readable YAML dump of the rendered results."""

from __future__ import annotations

import datetime
from pathlib import Path
from typing import Any

import yaml

from gotest_report.reporting.renderer import Renderer


def generate_yaml_report(renderer: Renderer) -> dict[str, Any]:
    """Build the YAML report structure.

    Returns:
        ``{"report": {...}}`` with module, generation time, counts, and the
        package/test/subtest tree.
    """
    now = datetime.datetime.now(tz=datetime.timezone.utc).isoformat()
    data = renderer.to_dict()
    report: dict[str, Any] = {
        "generated_at": now,
        "module": data["module"],
        "omit": data["omit"],
        "summary": data["summary"],
        "packages": data["packages"],
    }
    interrupted = [n.name for n in renderer.tree.interrupted()]
    if interrupted:
        report["interrupted"] = interrupted
    return {"report": report}


def write_yaml_report(path: Path, renderer: Renderer) -> None:
    """Write the results as a YAML file.

    Args:
        path: File path to write the YAML report to.
        renderer: Renderer holding the finished tree.
    """
    report = generate_yaml_report(renderer)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(
            report,
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
