"""rb_install, rb_uninstall, rb_fixhooks and rb_showconfig."""

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from ... import output_utils
from ...exceptions import InvalidArgumentError
from ...services.installer import HookInstaller, show_config
from ...types.enums import HookType, InstallTarget, OutputFormat
from ...utils.formatters import create_formatter


def _project_dir(args: argparse.Namespace) -> Path:
    return Path(getattr(args, "project_dir", None) or args.cwd or os.getcwd()).resolve()


def _confirm(question: str) -> Optional[bool]:
    """Ask a yes/no question; None when stdin is not interactive."""
    if not sys.stdin.isatty():
        return None
    answer = input(f"{question} (y/n): ").strip().lower()
    return answer in ("y", "yes")


def execute_install(args: argparse.Namespace) -> int:
    project_dir = _project_dir(args)
    formatter = create_formatter(args.format)
    if args.format == OutputFormat.TEXT.value:
        output_utils.status("🔧", f"Installing React build hooks into {project_dir}...")

    report = HookInstaller(project_dir).install(
        hook_type=HookType.from_string(args.hook),
        target=InstallTarget(args.target),
        reminder_prescripts=args.reminder_prescripts,
    )

    formatter.emit(formatter.format_command_result(
        True,
        f"Installed {report.hook_type.value} hook ({report.target.value})",
        data=report.to_dict(),
        warnings=report.warnings,
    ))
    if args.format == OutputFormat.TEXT.value:
        commit_or_push = "commit" if report.hook_type is HookType.PRE_COMMIT else "push"
        print(f"\n{output_utils.GLYPH_PARTY} Setup complete! Checks will run before each {commit_or_push}.")
    return 0


def execute_uninstall(args: argparse.Namespace) -> int:
    project_dir = _project_dir(args)
    formatter = create_formatter(args.format)

    if not args.yes:
        confirmed = _confirm("This will remove all Git hooks set up by rbhooks. Are you sure?")
        if confirmed is None:
            raise InvalidArgumentError("Refusing to uninstall without confirmation", argument_name="yes",
                                       suggested_fix="Pass --yes to proceed")
        if not confirmed:
            print("Uninstallation cancelled.")
            return 0

    report = HookInstaller(project_dir).uninstall()
    warnings = [f"Skipped {path} as it appears to be custom" for path in report.skipped_hooks]
    message = "Uninstalled rbhooks" if report.removed_hooks else "No hooks were found to uninstall"
    formatter.emit(formatter.format_command_result(True, message, data=report.to_dict(), warnings=warnings))
    return 0


def execute_fix_hooks(args: argparse.Namespace) -> int:
    project_dir = _project_dir(args)
    formatter = create_formatter(args.format)
    report = HookInstaller(project_dir).fix_hooks()
    message = (f"Fixed {len(report.fixed_hooks)} hook(s)" if report.fixed_hooks
               else "No hooks needed fixing or no hooks were found")
    formatter.emit(formatter.format_command_result(True, message, data=report.to_dict(),
                                                   warnings=report.warnings))
    return 0


def execute_show_config(args: argparse.Namespace) -> int:
    config = show_config(_project_dir(args))
    formatter = create_formatter(args.format)
    formatter.emit(formatter.format_config(config.to_dict(), str(config.source) if config.source else None))
    return 0
