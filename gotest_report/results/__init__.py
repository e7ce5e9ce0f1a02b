"""Hierarchical test results: packages, tests, and subtests."""

from gotest_report.results.tree import (
    FAILED,
    PASSED,
    RUNNING,
    SKIPPED,
    ResultNode,
    ResultTree,
)

__all__ = [
    "FAILED",
    "PASSED",
    "RUNNING",
    "SKIPPED",
    "ResultNode",
    "ResultTree",
]
