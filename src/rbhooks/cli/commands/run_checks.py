"""rb_precommit and the single-check commands.

rb_precommit is what the installed git hook calls. It refuses to run when it
was started by another rbhooks pipeline (a build script calling back into the
hook), exits 0 in that case, and otherwise runs the checks in order.

The single-check commands (rb_checkgitignore, rb_checklowercase,
rb_buildapps, rb_gitreminder) are what the package.json scripts point at.
"""

import argparse
import logging
import sys

from ... import output_utils
from ...exceptions import CheckViolation
from ...pipeline import PipelineResult, run_pipeline, run_single_check
from ...services.recursion_guard import is_nested_invocation
from ...types.enums import HookName, OutputFormat
from ...utils.formatters import create_formatter

logger = logging.getLogger(__name__)


def _report(result: PipelineResult, format_type: str, summary: bool) -> int:
    """Print the outcome and return the exit code."""
    formatter = create_formatter(format_type)
    if format_type == OutputFormat.JSON.value:
        formatter.emit(formatter.format_pipeline_result(result.to_dict()))
        return result.exit_code

    if result.environment_error is not None:
        print(result.environment_error.get_user_message(), file=sys.stderr)
    elif summary:
        formatter.emit(formatter.format_pipeline_result(result.to_dict()))
    return result.exit_code


def execute_precommit(args: argparse.Namespace) -> int:
    """Run the full pipeline."""
    if is_nested_invocation():
        output_utils.info("rbhooks is already running in a parent process. Skipping nested hook run.")
        return 0

    quiet = args.format == OutputFormat.JSON.value
    if not quiet:
        output_utils.progress("Running pre-commit checks...")
    result = run_pipeline(args.cwd, quiet=quiet)
    return _report(result, args.format, summary=True)


def _execute_single(name: HookName, args: argparse.Namespace, **check_kwargs) -> int:
    """Run one check.

    Raises:
        CheckViolation: The check is enforcing and found problems (exit 1)
    """
    quiet = args.format == OutputFormat.JSON.value
    result = run_single_check(name, args.cwd, quiet=quiet, **check_kwargs)
    exit_code = _report(result, args.format, summary=False)
    if result.failed_check is not None:
        raise CheckViolation(f"{name.value} check failed", check_name=name.value)
    return exit_code


def execute_check_gitignore(args: argparse.Namespace) -> int:
    return _execute_single(HookName.GITIGNORE, args)


def execute_check_lowercase(args: argparse.Namespace) -> int:
    return _execute_single(HookName.LOWERCASE, args)


def execute_build_apps(args: argparse.Namespace) -> int:
    """Run the build runner; ``--all`` ignores the staged-file filter."""
    if is_nested_invocation():
        output_utils.info("rbhooks is already running in a parent process. Skipping nested build.")
        return 0
    if getattr(args, "all", False):
        return _execute_single(HookName.BUILD, args, only_affected=False)
    return _execute_single(HookName.BUILD, args)


def execute_git_reminder(args: argparse.Namespace) -> int:
    return _execute_single(HookName.GIT_REMINDER, args)
