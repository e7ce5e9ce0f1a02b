"""Test result reporting: Markdown summary and YAML report generation."""

from gotest_report.reporting.detail_filter import DetailFilter
from gotest_report.reporting.renderer import Counts, Renderer, passthrough_text
from gotest_report.reporting.sink import FileSummarySink, StreamSummarySink, SummaryWriteError
from gotest_report.reporting.yaml_report import generate_yaml_report, write_yaml_report

__all__ = [
    "Counts",
    "DetailFilter",
    "FileSummarySink",
    "Renderer",
    "StreamSummarySink",
    "SummaryWriteError",
    "generate_yaml_report",
    "passthrough_text",
    "write_yaml_report",
]
