"""Test execution: running go test and resolving the module name."""

from gotest_report.execution.module_name import find_module_name, parse_module_name
from gotest_report.execution.pipeline import DiagnosticPipeline, StructuredPipeline
from gotest_report.execution.runner import GoTestRunner, RunResult, replay_json_file

__all__ = [
    "DiagnosticPipeline",
    "GoTestRunner",
    "RunResult",
    "StructuredPipeline",
    "find_module_name",
    "parse_module_name",
    "replay_json_file",
]
