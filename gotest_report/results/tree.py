"""Hierarchical test results built from a flat event stream.

``go test -json`` reports every package, test, and subtest as independent
records; subtests are only related to their parent by a ``/``-separated
name.  ``ResultTree`` rebuilds the package -> test -> subtest hierarchy as
events arrive, creating intermediate nodes lazily.

Statuses follow a four-state model:

* ``running`` - seen, but no terminal event yet (interrupted if still
  running when the stream ends).
* ``passed`` / ``failed`` / ``skipped`` - set once by the node's own
  terminal event.

A node's displayed status is never stored.  ``effective_status`` derives it
from the node's own status and its descendants at read time, so children
finishing out of order cannot leave a stale parent status behind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from gotest_report.stream.event_decoder import TestEvent

RUNNING = "running"
PASSED = "passed"
FAILED = "failed"
SKIPPED = "skipped"

VALID_STATUSES = frozenset({RUNNING, PASSED, FAILED, SKIPPED})

# test2json terminal action -> node status
_TERMINAL_STATUS = {
    "pass": PASSED,
    "fail": FAILED,
    "skip": SKIPPED,
}


@dataclass
class ResultNode:
    """One package, test, or subtest.

    ``name`` is the qualified test name (``TestA/sub_case``) for tests and
    the import path for packages.  ``explicit`` records whether any event
    ever named this node exactly; nodes created only as ancestors of a
    subtest stay structural and take their status from their children.
    """

    name: str
    is_package: bool = False
    status: str = RUNNING
    terminal: bool = False
    explicit: bool = False
    elapsed: float | None = None
    output: list[str] = field(default_factory=list)
    children: dict[str, ResultNode] = field(default_factory=dict)

    @property
    def segment(self) -> str:
        """Last path component of the name (the name shown under a parent)."""
        if self.is_package:
            return self.name
        return self.name.rsplit("/", 1)[-1]

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def output_text(self) -> str:
        return "".join(self.output)

    def effective_status(self) -> str:
        """Roll-up status derived from this node and its descendants.

        Any failed descendant fails the node.  Otherwise a node with its
        own terminal status shows it.  A structural node without one is
        running if any child is still running, passed if any child passed,
        and skipped if every child skipped.  A named node with no terminal
        status is running.
        """
        child_statuses = [c.effective_status() for c in self.children.values()]
        if self.status == FAILED or FAILED in child_statuses:
            return FAILED
        if self.terminal:
            return self.status
        if self.explicit or not child_statuses:
            return RUNNING
        if RUNNING in child_statuses:
            return RUNNING
        if PASSED in child_statuses:
            return PASSED
        return SKIPPED

    def walk(self) -> Iterator[ResultNode]:
        """Depth-first, pre-order over descendants in first-seen order."""
        for child in self.children.values():
            yield child
            yield from child.walk()

    def leaves(self) -> Iterator[ResultNode]:
        """Leaf test nodes under this node (packages are never leaves)."""
        for node in self.walk():
            if node.is_leaf:
                yield node


class ResultTree:
    """Builds and holds per-package result nodes.

    The tree is mutated only through ``apply``; callers must feed events
    from a single sequence in stream order.
    """

    def __init__(self) -> None:
        self._packages: dict[str, ResultNode] = {}
        # (package, qualified test name) -> node
        self._index: dict[tuple[str, str], ResultNode] = {}
        self.event_count = 0

    def packages(self) -> list[ResultNode]:
        """Package nodes in first-seen order."""
        return list(self._packages.values())

    def lookup(self, package: str, test: str | None = None) -> ResultNode | None:
        """Find a package node, or a test node when ``test`` is given."""
        if test is None:
            return self._packages.get(package)
        return self._index.get((package, test))

    def apply(self, event: TestEvent) -> ResultNode | None:
        """Apply one event and return the node it targeted.

        Build events belong to no package node; their output is kept by
        the transcript instead.

        Args:
            event: Decoded test event.

        Returns:
            The package node (no test name), the named test node, or None
            for build events.
        """
        self.event_count += 1
        if event.is_build:
            return None

        node = self._node_for(event.package, event.test)
        node.explicit = True

        if event.output:
            node.output.append(event.output)

        if event.action in _TERMINAL_STATUS:
            self._finish(node, event)
        elif event.action == "run":
            if not node.terminal:
                node.status = RUNNING
        # pause, cont, bench, start and unknown actions carry no status.

        return node

    def apply_all(self, events: list[TestEvent]) -> None:
        for event in events:
            self.apply(event)

    def _finish(self, node: ResultNode, event: TestEvent) -> None:
        # The first terminal event wins; test2json never sends two for the
        # same test, but a replayed or concatenated file may.
        if node.terminal:
            return
        node.status = _TERMINAL_STATUS[event.action]
        node.terminal = True
        node.elapsed = event.elapsed

    def _package_node(self, package: str) -> ResultNode:
        node = self._packages.get(package)
        if node is None:
            node = ResultNode(name=package, is_package=True)
            self._packages[package] = node
        return node

    def _node_for(self, package: str, test: str | None) -> ResultNode:
        """Return the node for ``test``, creating it and its ancestors."""
        pkg = self._package_node(package)
        if test is None:
            return pkg

        existing = self._index.get((package, test))
        if existing is not None:
            return existing

        if "/" in test:
            parent = self._node_for(package, test.rsplit("/", 1)[0])
        else:
            parent = pkg

        node = ResultNode(name=test)
        parent.children[node.segment] = node
        self._index[(package, test)] = node
        return node

    def interrupted(self) -> list[ResultNode]:
        """Named test nodes that never received a terminal event."""
        return [
            node
            for pkg in self._packages.values()
            for node in pkg.walk()
            if node.explicit and not node.terminal
        ]
