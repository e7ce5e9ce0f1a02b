"""Entry point for the go test report tool.

Runs ``go test -json`` (or replays a saved event file), passes test output
through to the console as it arrives, and appends a Markdown summary to the
job summary file.  The process exits with the ``go test`` exit code.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from gotest_report.config import ActionInputs
from gotest_report.execution.module_name import find_module_name
from gotest_report.execution.runner import GoTestRunner, RunResult, replay_json_file
from gotest_report.reporting.renderer import Renderer
from gotest_report.reporting.sink import (
    FileSummarySink,
    StreamSummarySink,
    SummaryWriteError,
)
from gotest_report.reporting.yaml_report import write_yaml_report

EXIT_CONFIG_ERROR = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Run go test -json and write a test result summary"
    )
    parser.add_argument(
        "--module-directory",
        type=Path,
        default=None,
        help="Directory containing go.mod (default: INPUT_MODULEDIRECTORY or .)",
    )
    parser.add_argument(
        "--omit",
        type=str,
        default=None,
        help="Entries to omit from the detail listing: show-all, omit-passed, "
             "omit-skipped, omit-both, or a comma-separated list of "
             "passed, skipped, untested",
    )
    parser.add_argument(
        "--from-json-file",
        type=Path,
        default=None,
        help="Render a saved go test -json file instead of running tests",
    )
    parser.add_argument(
        "--summary-file",
        type=Path,
        default=None,
        help="File to append the summary to (default: GITHUB_STEP_SUMMARY, "
             "or stdout when unset)",
    )
    parser.add_argument(
        "--yaml-output",
        type=Path,
        default=None,
        help="Path to write a YAML report of the results",
    )
    parser.add_argument(
        "--config-file",
        type=Path,
        default=None,
        help="Path to a JSON config file",
    )
    parser.add_argument(
        "test_arguments",
        nargs=argparse.REMAINDER,
        help="Arguments passed to go test -json (after --)",
    )
    return parser.parse_args(argv)


def _load_inputs(args: argparse.Namespace) -> ActionInputs:
    test_arguments = list(args.test_arguments or [])
    if test_arguments and test_arguments[0] == "--":
        test_arguments = test_arguments[1:]
    overrides = {
        "module_directory": args.module_directory,
        "omit": args.omit,
        "from_json_file": args.from_json_file,
        "summary_file": args.summary_file,
        "yaml_report": args.yaml_output,
        "test_arguments": test_arguments or None,
    }
    return ActionInputs(path=args.config_file, overrides=overrides)


def _collect(inputs: ActionInputs, test_arguments: list[str]) -> RunResult:
    """Run the tests, or replay the configured event file."""
    if inputs.from_json_file is not None:
        return replay_json_file(inputs.from_json_file)

    runner = GoTestRunner(
        inputs.module_directory,
        test_arguments,
        stdout=sys.stdout,
        stderr=sys.stderr,
    )
    result = runner.run()
    if result.exit_code != 0:
        # GitHub workflow command; shows up as an annotation on the run.
        print(
            f"::error::`go test` returned nonzero exit code: {result.exit_code}"
        )
    return result


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        The go test exit code, 1 if writing the summary failed after a
        successful run, or 2 on configuration errors.
    """
    args = parse_args(argv)
    inputs = _load_inputs(args)

    try:
        detail_filter = inputs.omit
        test_arguments = inputs.test_arguments
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    module_name = find_module_name(inputs.module_directory)

    try:
        result = _collect(inputs, test_arguments)
    except OSError as e:
        print(f"Error: unable to collect test results: {e}", file=sys.stderr)
        return 1

    renderer = Renderer(
        module_name,
        result.tree,
        stderr=result.stderr,
        detail_filter=detail_filter,
        transcript=result.transcript,
    )

    summary_file = inputs.summary_file
    sink = FileSummarySink(summary_file) if summary_file else StreamSummarySink()
    try:
        renderer.write_summary(sink)
    except SummaryWriteError as e:
        print(f"Error: {e}", file=sys.stderr)
        return result.exit_code or 1

    if inputs.yaml_report is not None:
        try:
            write_yaml_report(inputs.yaml_report, renderer)
        except OSError as e:
            print(f"Error writing YAML report: {e}", file=sys.stderr)
            return result.exit_code or 1

    interrupted = result.tree.interrupted()
    if interrupted:
        print(
            f"Warning: {len(interrupted)} test(s) did not finish",
            file=sys.stderr,
        )

    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
