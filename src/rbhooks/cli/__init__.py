"""Command-line interface for rbhooks.

Key modules:
- argument_parser: argparse subcommands for every rb_* console script
- main: console-script entry points generated from COMMAND_REGISTRY, and the
  ``rbhooks`` dispatcher accepting ``rbhooks <command>``
- commands/: command implementations returning exit codes
"""

from .argument_parser import create_parser, parse_args

__all__ = [
    "parse_args",
    "create_parser",
]
