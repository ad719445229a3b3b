"""CLI argument parser for rbhooks commands.

One argparse parser with a subcommand per console script:

- rb_precommit: run the whole hook pipeline (what git hooks call)
- rb_checkgitignore / rb_checklowercase / rb_buildapps / rb_gitreminder:
  run one check on its own
- rb_install / rb_uninstall / rb_fixhooks / rb_showconfig: set up a project

Usage:
    from rbhooks.cli.argument_parser import parse_args

    args = parse_args(["rb_buildapps", "--all"])
    print(args.subcommand, args.all)
"""

import argparse
import sys
from typing import List, Optional

from .. import __version__
from ..types.enums import HookType, InstallTarget, OutputFormat

OUTPUT_FORMATS = [fmt.value for fmt in OutputFormat]
HOOK_TYPES = [hook.value for hook in HookType]
INSTALL_TARGETS = [target.value for target in InstallTarget]


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments shared by every command."""
    parser.add_argument(
        "--cwd",
        default=None,
        help="Directory to run in (default: current directory)"
    )

    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default=OutputFormat.TEXT.value,
        help="Output format (default: text)"
    )


def _create_check_parser(subparsers, name: str, help_text: str) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(name, help=help_text, description=help_text)
    _add_common_arguments(parser)
    return parser


def _create_precommit_parser(subparsers) -> argparse.ArgumentParser:
    return _create_check_parser(
        subparsers, "rb_precommit",
        "Run the pre-commit pipeline: gitignore, lowercase, build, git reminder"
    )


def _create_buildapps_parser(subparsers) -> argparse.ArgumentParser:
    parser = _create_check_parser(
        subparsers, "rb_buildapps",
        "Build the project, or the workspace packages touched by staged files"
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Build every workspace package with a build script, touched or not"
    )
    return parser


def _create_install_parser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "rb_install",
        help="Install the git hook and package.json scripts into a project",
        description="Add the check scripts to package.json and write a hook script "
                    "that runs rb_precommit before each commit or push."
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "project_dir",
        nargs="?",
        default=None,
        help="Project directory containing package.json (default: --cwd or current directory)"
    )
    parser.add_argument(
        "--hook",
        choices=HOOK_TYPES,
        default=HookType.PRE_COMMIT.value,
        help="Git hook to install (default: pre-commit)"
    )
    parser.add_argument(
        "--target",
        choices=INSTALL_TARGETS,
        default=InstallTarget.AUTO.value,
        help="Write the hook to .husky/ or the git hooks directory (default: auto)"
    )
    parser.add_argument(
        "--reminder-prescripts",
        action="store_true",
        help="Add pre<script> git reminders for dev/build/test/start/lint"
    )
    return parser


def _create_uninstall_parser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "rb_uninstall",
        help="Remove rbhooks hook scripts and package.json scripts",
        description="Remove hook scripts written by rbhooks. Custom hooks are left alone."
    )
    _add_common_arguments(parser)
    parser.add_argument("project_dir", nargs="?", default=None, help="Project directory")
    parser.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Do not ask for confirmation"
    )
    return parser


def _create_fixhooks_parser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "rb_fixhooks",
        help="Rewrite outdated hook scripts",
        description="Replace deprecated husky bootstrap lines and legacy 'npm run build:dev' "
                    "calls with the current hook script."
    )
    _add_common_arguments(parser)
    parser.add_argument("project_dir", nargs="?", default=None, help="Project directory")
    return parser


def _create_showconfig_parser(subparsers) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "rb_showconfig",
        help="Show the effective hook configuration",
        description="Print the configuration the hooks would use and the file it came from."
    )
    _add_common_arguments(parser)
    parser.add_argument("project_dir", nargs="?", default=None, help="Project directory")
    return parser


def _validate_arguments(args: argparse.Namespace) -> None:
    """Reject argument combinations argparse cannot express.

    Raises:
        SystemExit: If validation fails
    """
    project_dir = getattr(args, "project_dir", None)
    if project_dir and args.cwd and project_dir != args.cwd:
        print("Error: pass either a project directory or --cwd, not both", file=sys.stderr)
        sys.exit(1)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="rbhooks",
        description="Git hooks for React projects: gitignore audit, lowercase names, "
                    "pre-commit builds and commit reminders",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Install the pre-commit hook into the current project
  rbhooks rb_install

  # Run the whole pipeline by hand
  rbhooks rb_precommit

  # Build every workspace package
  rbhooks rb_buildapps --all
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(
        dest="subcommand",
        help="Available commands",
        metavar="COMMAND"
    )

    _create_precommit_parser(subparsers)
    _create_check_parser(subparsers, "rb_checkgitignore", "Add missing sensitive patterns to .gitignore")
    _create_check_parser(subparsers, "rb_checklowercase", "Check staged file names and imports for uppercase")
    _create_buildapps_parser(subparsers)
    _create_check_parser(subparsers, "rb_gitreminder", "Remind about uncommitted, stale or unpulled work")
    _create_install_parser(subparsers)
    _create_uninstall_parser(subparsers)
    _create_fixhooks_parser(subparsers)
    _create_showconfig_parser(subparsers)

    return parser


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments with validation.

    Raises:
        SystemExit: If parsing or validation fails
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.subcommand:
        parser.print_help()
        sys.exit(0)

    _validate_arguments(parsed_args)
    return parsed_args
