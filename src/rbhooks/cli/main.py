"""Main CLI entry points for rbhooks commands.

Each rb_* console script declared in pyproject.toml is generated from
COMMAND_REGISTRY. The functions parse their arguments, configure logging and
delegate to the command implementation with uniform error handling:

    0    success
    1    blocking violation, pipeline FAILED, or bad usage
    2    environment error (git or package manager missing, no repository,
         no package.json)
    130  interrupted
"""

import difflib
import logging
import signal
import sys
import time
from typing import Any, Callable, NoReturn

import psutil

from .. import __version__
from ..exceptions import CheckViolation, HookEnvironmentError, RBHooksError, UserError
from ..utils.logging import configure_logging, is_debug_mode
from .argument_parser import parse_args

PERFORMANCE_THRESHOLD_MS = 60_000

logger = logging.getLogger(__name__)

# command name -> (module, function, description)
COMMAND_REGISTRY = {
    "rb_precommit": ("commands.run_checks", "execute_precommit", "Run the pre-commit pipeline"),
    "rb_checkgitignore": ("commands.run_checks", "execute_check_gitignore",
                          "Add missing sensitive patterns to .gitignore"),
    "rb_checklowercase": ("commands.run_checks", "execute_check_lowercase",
                          "Check staged file names and imports for uppercase"),
    "rb_buildapps": ("commands.run_checks", "execute_build_apps", "Build the affected projects"),
    "rb_gitreminder": ("commands.run_checks", "execute_git_reminder",
                       "Remind about uncommitted, stale or unpulled work"),
    "rb_install": ("commands.setup_project", "execute_install", "Install the hooks into a project"),
    "rb_uninstall": ("commands.setup_project", "execute_uninstall", "Remove the hooks from a project"),
    "rb_fixhooks": ("commands.setup_project", "execute_fix_hooks", "Rewrite outdated hook scripts"),
    "rb_showconfig": ("commands.setup_project", "execute_show_config", "Show the effective configuration"),
}

# Extra names accepted by the ``rbhooks`` dispatcher.
COMMAND_ALIASES = {
    "run": "rb_precommit",
    "build": "rb_buildapps",
    "check-gitignore": "rb_checkgitignore",
    "check-lowercase": "rb_checklowercase",
    "git-reminder": "rb_gitreminder",
    "fix-hooks": "rb_fixhooks",
    "show-config": "rb_showconfig",
}


def _setup_signal_handlers() -> None:
    """Exit with 130 on SIGINT/SIGTERM; a build in progress is abandoned."""
    def signal_handler(signum: int, frame: Any) -> None:
        logger.debug("Received signal %s", signum)
        print("\n\nInterrupted", file=sys.stderr)
        sys.exit(130)

    signal.signal(signal.SIGINT, signal_handler)
    if hasattr(signal, 'SIGTERM'):
        signal.signal(signal.SIGTERM, signal_handler)


def _measure_performance(command: str):
    """Log elapsed time, and memory growth in debug mode."""
    class PerformanceMonitor:
        def __init__(self, command: str):
            self.command = command
            self.start_time = time.perf_counter()
            self.memory_start = None
            if is_debug_mode():
                self.memory_start = psutil.Process().memory_info().rss / 1024 / 1024

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            elapsed_ms = (time.perf_counter() - self.start_time) * 1000
            if elapsed_ms > PERFORMANCE_THRESHOLD_MS:
                logger.info("%s took %.0fms", self.command, elapsed_ms)
            else:
                logger.debug("%s took %.0fms", self.command, elapsed_ms)

            if self.memory_start is not None:
                memory_end = psutil.Process().memory_info().rss / 1024 / 1024
                logger.debug("%s memory: %+.1fMB (start %.1fMB, end %.1fMB)", self.command,
                             memory_end - self.memory_start, self.memory_start, memory_end)

    return PerformanceMonitor(command)


def _format_error_message(error: Exception) -> str:
    if isinstance(error, RBHooksError):
        return error.get_user_message()
    if is_debug_mode():
        return f"❌ {type(error).__name__}: {error}"
    return "❌ Internal error, rerun with RBHOOKS_DEBUG=true for details"


def _execute_command_safely(command_name: str, command_func: Callable, args: Any) -> int:
    """Run a command and map exceptions to exit codes."""
    try:
        with _measure_performance(command_name):
            return command_func(args)
    except KeyboardInterrupt:
        logger.debug("%s interrupted", command_name)
        print("\nInterrupted", file=sys.stderr)
        return 130
    except CheckViolation as e:
        logger.debug("%s blocked: %s", command_name, e.message)
        return 1
    except HookEnvironmentError as e:
        logger.debug("%s environment error: %s", command_name, e.message)
        print(_format_error_message(e), file=sys.stderr)
        return 2
    except UserError as e:
        logger.debug("%s user error: %s", command_name, e.message)
        print(_format_error_message(e), file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception("%s failed unexpectedly", command_name)
        print(_format_error_message(e), file=sys.stderr)
        return 1


def _create_command_function(command_name: str) -> Callable[[], NoReturn]:
    def command_function() -> NoReturn:
        module_path, func_name, description = COMMAND_REGISTRY[command_name]
        _setup_signal_handlers()
        configure_logging()

        args = parse_args([command_name] + sys.argv[1:])
        module = __import__(f"rbhooks.cli.{module_path}", fromlist=[func_name])
        command_func = getattr(module, func_name)
        sys.exit(_execute_command_safely(command_name, command_func, args))

    command_function.__doc__ = COMMAND_REGISTRY[command_name][2]
    command_function.__name__ = command_name
    return command_function


for command_name in COMMAND_REGISTRY:
    globals()[command_name] = _create_command_function(command_name)


def resolve_command(command: str):
    """Console-script name for a dispatcher command, or None."""
    if command in COMMAND_REGISTRY:
        return command
    if command in COMMAND_ALIASES:
        return COMMAND_ALIASES[command]
    prefixed = f"rb_{command}"
    if prefixed in COMMAND_REGISTRY:
        return prefixed
    return None


def main() -> NoReturn:
    """The ``rbhooks`` dispatcher: ``rbhooks <command> [options]``."""
    if len(sys.argv) == 1 or sys.argv[1] in ("-h", "--help"):
        _show_main_help()
        sys.exit(0)
    if sys.argv[1] in ("-v", "--version"):
        print(f"rbhooks {__version__}")
        sys.exit(0)

    command = sys.argv[1]
    resolved = resolve_command(command)
    if resolved is None:
        _show_command_not_found_error(command)
        sys.exit(1)

    sys.argv = [sys.argv[0]] + sys.argv[2:]
    globals()[resolved]()


def _show_command_not_found_error(command: str) -> None:
    print(f"Error: unknown command '{command}'", file=sys.stderr)
    available = sorted(set(COMMAND_ALIASES) | {name[3:] for name in COMMAND_REGISTRY})
    suggestions = difflib.get_close_matches(command, available, n=3, cutoff=0.5)
    if suggestions:
        print("\nDid you mean one of these?", file=sys.stderr)
        for suggestion in suggestions:
            description = COMMAND_REGISTRY[resolve_command(suggestion)][2]
            print(f"  rbhooks {suggestion} - {description}", file=sys.stderr)
    print("\nRun 'rbhooks --help' for the list of commands", file=sys.stderr)


def _show_main_help() -> None:
    print(f"""rbhooks {__version__} - git hooks for React projects

Usage: rbhooks <command> [options]
       rb_<command> [options]

Hook commands:
  run, precommit        Run the whole pre-commit pipeline
  check-gitignore       Add missing sensitive patterns to .gitignore
  check-lowercase       Check staged file names and imports for uppercase
  build, buildapps      Build the affected projects (--all for every package)
  git-reminder          Remind about uncommitted, stale or unpulled work

Setup commands:
  install               Install the hook and package.json scripts
  uninstall             Remove hooks written by rbhooks
  fix-hooks             Rewrite outdated husky hooks
  show-config           Show the effective configuration

Global options:
  -h, --help            Show this help
  -v, --version         Show the version

Environment variables:
  RBHOOKS_DEBUG         Enable debug logging (true/false)
  RBHOOKS_LOG_LEVEL     Log level (DEBUG/INFO/WARNING/ERROR)
  RBHOOKS_LOG_FILE      Also log to this file
  RBHOOKS_LOG_FORMAT    "json" for JSON lines in the log file

Skip the hooks for one commit with: git commit --no-verify
""")


if __name__ == "__main__":
    main()
