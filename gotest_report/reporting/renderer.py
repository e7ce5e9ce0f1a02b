"""Markdown summary rendering for ``go test`` results.

Renders a finished ``ResultTree`` into a job summary document:

* a title naming the Go module (or ``unknown module``);
* aggregate counts over leaf tests;
* a per-package table with roll-up statuses;
* a detail listing filtered by a ``DetailFilter``, where failed and
  interrupted entries always carry their captured output;
* a notice for tests that never finished;
* diagnostic text not attributable to any test (stderr, raw stdout lines,
  compiler output from build events).

Also provides the console passthrough used while the stream is live.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from gotest_report.reporting.detail_filter import DetailFilter
from gotest_report.results.tree import (
    FAILED,
    PASSED,
    RUNNING,
    SKIPPED,
    ResultNode,
    ResultTree,
)
from gotest_report.stream.event_decoder import DecodedLine, RawLine, Transcript

UNKNOWN_MODULE = "unknown module"

STATUS_ICONS: dict[str, str] = {
    PASSED: "✅",
    FAILED: "❌",
    SKIPPED: "⏭️",
    RUNNING: "⚠️",
}

STATUS_LABELS: dict[str, str] = {
    PASSED: "passed",
    FAILED: "failed",
    SKIPPED: "skipped",
    RUNNING: "interrupted",
}


class SummarySink(Protocol):
    def append(self, document: str) -> None: ...


@dataclass(frozen=True)
class Counts:
    """Aggregate counts over leaf test nodes."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    running: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "running": self.running,
        }


@dataclass(frozen=True)
class DetailEntry:
    """One listed node with its effective status and nesting depth."""

    node: ResultNode
    status: str
    depth: int

    @property
    def show_output(self) -> bool:
        return self.status in (FAILED, RUNNING) and bool(self.node.output)


def passthrough_text(item: DecodedLine) -> str:
    """Console text for one classified line of the structured stream."""
    if isinstance(item, RawLine):
        return item.text + "\n"
    return item.output or ""


def count_leaves(nodes: list[ResultNode]) -> Counts:
    """Count leaf tests under the given package nodes by effective status."""
    tally = {PASSED: 0, FAILED: 0, SKIPPED: 0, RUNNING: 0}
    for pkg in nodes:
        for leaf in pkg.leaves():
            tally[leaf.effective_status()] += 1
    return Counts(
        total=sum(tally.values()),
        passed=tally[PASSED],
        failed=tally[FAILED],
        skipped=tally[SKIPPED],
        running=tally[RUNNING],
    )


def is_untested(pkg: ResultNode) -> bool:
    """A package that reported a result but ran no tests."""
    return not pkg.children and pkg.terminal and pkg.status == SKIPPED


class Renderer:
    """Renders a result tree into a Markdown summary.

    Args:
        module_name: Go module path, or None if it could not be resolved.
        tree: Finished result tree.
        stderr: Everything the test process wrote to stderr.
        detail_filter: Which non-failing entries to list.
        transcript: Transcript of the structured stream; its raw lines and
            build output are reported as unattributed diagnostics.
    """

    def __init__(
        self,
        module_name: str | None,
        tree: ResultTree,
        stderr: str = "",
        detail_filter: DetailFilter | None = None,
        transcript: Transcript | None = None,
    ) -> None:
        self.module_name = module_name
        self.tree = tree
        self.stderr = stderr
        self.detail_filter = detail_filter or DetailFilter()
        self.transcript = transcript

    def counts(self) -> Counts:
        return count_leaves(self.tree.packages())

    def detail_entries(self, pkg: ResultNode) -> list[DetailEntry]:
        """Listed nodes under one package, depth-first in first-seen order.

        A failed node is always listed; so are its ancestors, so the
        listing keeps its shape.
        """
        entries: list[DetailEntry] = []
        self._collect_entries(pkg, 0, entries)
        return entries

    def _collect_entries(
        self, parent: ResultNode, depth: int, entries: list[DetailEntry],
    ) -> None:
        for child in parent.children.values():
            status = child.effective_status()
            if not self.detail_filter.shows(status):
                continue
            entries.append(DetailEntry(node=child, status=status, depth=depth))
            self._collect_entries(child, depth + 1, entries)

    def visible_packages(self) -> list[ResultNode]:
        packages = self.tree.packages()
        if self.detail_filter.omit_untested:
            packages = [p for p in packages if not is_untested(p)]
        return packages

    def unattributed_text(self) -> str:
        """Diagnostic text not tied to any test."""
        parts: list[str] = []
        if self.transcript is not None:
            raw = self.transcript.unattributed_text()
            if raw.strip():
                parts.append(raw)
        if self.stderr.strip():
            parts.append(self.stderr)
        return "".join(p if p.endswith("\n") else p + "\n" for p in parts)

    def render(self) -> str:
        """Render the full summary document."""
        parts: list[str] = []
        parts.append(self._render_header())
        parts.append(self._render_counts())

        packages = self.visible_packages()
        if packages:
            parts.append(self._render_package_table(packages))

        interrupted = self.tree.interrupted()
        if interrupted:
            parts.append(self._render_interrupted(interrupted))

        details = self._render_details(packages)
        if details:
            parts.append(details)

        diagnostics = self.unattributed_text()
        if diagnostics:
            parts.append(self._render_diagnostics(diagnostics))

        return "\n".join(parts) + "\n"

    def write_summary(self, sink: SummarySink) -> None:
        """Render and append the document to ``sink`` in one operation.

        Raises:
            SummaryWriteError: If the sink rejects the write.
        """
        sink.append(self.render())

    def to_dict(self) -> dict[str, Any]:
        """Structured form of the results, for machine-readable reports."""
        return {
            "module": self.module_name,
            "omit": self.detail_filter.name,
            "summary": self.counts().as_dict(),
            "packages": [
                _node_to_dict(pkg) for pkg in self.tree.packages()
            ],
        }

    def _render_header(self) -> str:
        lines = ["## \U0001f4dd Test results", ""]
        if self.module_name:
            lines.append(f"Module: `{self.module_name}`")
        else:
            lines.append(f"Module: _{UNKNOWN_MODULE}_")
        lines.append("")
        return "\n".join(lines)

    def _render_counts(self) -> str:
        counts = self.counts()
        lines = [
            "| Total | Passed | Failed | Skipped | Interrupted |",
            "| ---: | ---: | ---: | ---: | ---: |",
            f"| {counts.total} | {counts.passed} | {counts.failed} "
            f"| {counts.skipped} | {counts.running} |",
            "",
        ]
        return "\n".join(lines)

    def _render_package_table(self, packages: list[ResultNode]) -> str:
        lines = [
            "### Packages",
            "",
            "| | Package | Passed | Failed | Skipped | Elapsed |",
            "| --- | --- | ---: | ---: | ---: | ---: |",
        ]
        for pkg in packages:
            status = pkg.effective_status()
            counts = count_leaves([pkg])
            label = _package_label(pkg.name, self.module_name)
            if is_untested(pkg):
                label += " _(no test files)_"
            lines.append(
                f"| {STATUS_ICONS[status]} | {label} | {counts.passed} "
                f"| {counts.failed} | {counts.skipped} "
                f"| {_format_elapsed(pkg.elapsed)} |"
            )
        lines.append("")
        return "\n".join(lines)

    def _render_interrupted(self, nodes: list[ResultNode]) -> str:
        names = ", ".join(f"`{n.name}`" for n in nodes)
        return (
            f"> {STATUS_ICONS[RUNNING]} **{len(nodes)} test(s) did not "
            f"finish** (interrupted run): {names}\n"
        )

    def _render_details(self, packages: list[ResultNode]) -> str:
        sections: list[str] = []
        for pkg in packages:
            status = pkg.effective_status()
            entries = self.detail_entries(pkg)
            # Package-level output matters only when the package itself
            # failed (build errors, panics outside a test).
            pkg_output = status == FAILED and pkg.output
            if not entries and not pkg_output:
                continue

            lines = [
                f"#### {STATUS_ICONS[status]} "
                f"`{_package_label(pkg.name, self.module_name)}`",
                "",
            ]
            for entry in entries:
                indent = "  " * entry.depth
                lines.append(
                    f"{indent}- {STATUS_ICONS[entry.status]} "
                    f"`{entry.node.segment}` {STATUS_LABELS[entry.status]}"
                    f"{_elapsed_suffix(entry.node.elapsed)}"
                )
                if entry.show_output:
                    lines.append("")
                    lines.append(_fence(entry.node.output_text, indent + "  "))
                    lines.append("")
            if pkg_output:
                lines.append("")
                lines.append("Package output:")
                lines.append("")
                lines.append(_fence(pkg.output_text))
            lines.append("")
            sections.append("\n".join(lines))

        if not sections:
            return ""
        return "### Details\n\n" + "\n".join(sections)

    def _render_diagnostics(self, text: str) -> str:
        return "\n".join([
            "### Diagnostic output",
            "",
            "Output not attributed to any test:",
            "",
            _fence(text),
            "",
        ])


def _node_to_dict(node: ResultNode) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": node.name,
        "status": node.effective_status(),
    }
    if node.elapsed is not None:
        data["elapsed_seconds"] = round(node.elapsed, 3)
    if node.output:
        data["output"] = node.output_text
    if node.children:
        key = "tests" if node.is_package else "subtests"
        data[key] = [_node_to_dict(c) for c in node.children.values()]
    return data


def _package_label(package: str, module_name: str | None) -> str:
    """Package path relative to the module, when it lives inside it."""
    if module_name and package.startswith(module_name + "/"):
        return package[len(module_name) + 1:]
    return package or "(no package)"


def _format_elapsed(elapsed: float | None) -> str:
    if elapsed is None:
        return "-"
    return f"{elapsed:.2f}s"


def _elapsed_suffix(elapsed: float | None) -> str:
    if elapsed is None:
        return ""
    return f" ({elapsed:.2f}s)"


def _fence(text: str, indent: str = "") -> str:
    """Wrap text in a fenced code block that its content cannot close."""
    body = text.rstrip("\n")
    fence = "```"
    while fence in body:
        fence += "`"
    lines = [fence] + body.split("\n") + [fence]
    return "\n".join(indent + line if line else line for line in lines)
