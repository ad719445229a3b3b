"""Terminal output helpers.

All human-facing output goes through these functions so every line carries a
short status glyph: progress and success on stdout, warnings and errors on
stderr.
"""

import sys
from typing import Iterable, List, Optional, TextIO

from .exceptions import BYPASS_HINT

GLYPH_INFO = "ℹ️"
GLYPH_PROGRESS = "🔍"
GLYPH_SUCCESS = "✅"
GLYPH_WARNING = "⚠️"
GLYPH_ERROR = "❌"
GLYPH_HINT = "👉"
GLYPH_CLOCK = "⏰"
GLYPH_PACKAGE = "📦"
GLYPH_FOLDER = "📁"
GLYPH_NOTE = "📝"
GLYPH_PARTY = "🎉"

DEFAULT_LIST_LIMIT = 10


def _out(file: Optional[TextIO]) -> TextIO:
    return file if file is not None else sys.stdout


def _err(file: Optional[TextIO]) -> TextIO:
    return file if file is not None else sys.stderr


def status(glyph: str, message: str, file: Optional[TextIO] = None) -> None:
    print(f"{glyph} {message}", file=_out(file))


def info(message: str, file: Optional[TextIO] = None) -> None:
    status(GLYPH_INFO, message, file)


def progress(message: str, file: Optional[TextIO] = None) -> None:
    status(GLYPH_PROGRESS, message, file)


def success(message: str, file: Optional[TextIO] = None) -> None:
    status(GLYPH_SUCCESS, message, file)


def warn(message: str, file: Optional[TextIO] = None) -> None:
    print(f"{GLYPH_WARNING} {message}", file=_err(file))


def error(message: str, file: Optional[TextIO] = None) -> None:
    print(f"{GLYPH_ERROR} {message}", file=_err(file))


def format_capped_list(lines: Iterable[str], limit: int = DEFAULT_LIST_LIMIT,
                       indent: str = "  ") -> List[str]:
    """Return at most ``limit`` indented lines plus an "... and N more files" tail."""
    items = list(lines)
    shown = [f"{indent}{line}" for line in items[:limit]]
    remaining = len(items) - limit
    if remaining > 0:
        shown.append(f"{indent}... and {remaining} more files")
    return shown


def print_blocking(message: str, remediation: Optional[str] = None,
                   file: Optional[TextIO] = None) -> None:
    """Print a blocking error with remediation text and the bypass reminder."""
    target = _err(file)
    print(f"\n{GLYPH_ERROR} {message}", file=target)
    if remediation:
        print(f"{GLYPH_WARNING} {remediation}", file=target)
    print(BYPASS_HINT, file=target)
