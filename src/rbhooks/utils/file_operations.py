"""File helpers used by the checks and the installer.

Reads and writes go through these functions so that failures surface as
FileOperationError with the path attached, and every write can leave a
timestamped backup behind.
"""

import json
import logging
import shutil
import stat
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..exceptions import ErrorCategory, ErrorSeverity, ParseError, RBHooksError

logger = logging.getLogger(__name__)


class FileOperationError(RBHooksError):
    """Reading or writing a file failed."""

    def __init__(self, message: str, file_path: Union[str, Path, None] = None,
                 operation: Optional[str] = None, **kwargs):
        self.file_path = str(file_path) if file_path else None
        self.operation = operation
        kwargs.setdefault("error_code", "FILE_OPERATION_ERROR")
        kwargs.setdefault("category", ErrorCategory.INTERNAL)
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("suggested_fix", "Check that the file exists and is writable")
        context = kwargs.setdefault("context", {})
        if self.file_path:
            context["file_path"] = self.file_path
        if operation:
            context["operation"] = operation
        super().__init__(message, **kwargs)


def read_text_file(file_path: Union[str, Path], encoding: str = "utf-8",
                   newline: Optional[str] = None) -> str:
    """Read a text file.

    Pass ``newline=""`` to get the line terminators exactly as stored.

    Raises:
        FileOperationError: If the file cannot be read or decoded
    """
    path = Path(file_path)
    try:
        with path.open("r", encoding=encoding, newline=newline) as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise FileOperationError(f"Cannot decode '{path}': {e}", path, "read", original_error=e)
    except OSError as e:
        raise FileOperationError(f"Cannot read '{path}': {e}", path, "read", original_error=e)


def create_backup(file_path: Union[str, Path], backup_suffix: Optional[str] = None) -> Path:
    """Copy ``file_path`` next to itself with a timestamp suffix."""
    path = Path(file_path)
    if not path.exists():
        raise FileOperationError(f"Cannot back up missing file '{path}'", path, "backup")
    if backup_suffix is None:
        backup_suffix = f"bak_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    backup_path = path.with_name(f"{path.name}.{backup_suffix}")
    try:
        shutil.copy2(path, backup_path)
    except OSError as e:
        raise FileOperationError(f"Cannot back up '{path}': {e}", path, "backup", original_error=e)
    logger.debug("Backed up %s to %s", path, backup_path)
    return backup_path


def write_text_file(file_path: Union[str, Path], content: str, encoding: str = "utf-8",
                    backup: bool = False) -> Optional[Path]:
    """Write a text file, creating parent directories as needed.

    Returns:
        The backup path when ``backup`` is set and the file existed, else None

    Raises:
        FileOperationError: If the write fails; a backup taken first is restored
    """
    path = Path(file_path)
    backup_path = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if backup and path.exists():
            backup_path = create_backup(path)
        with path.open("w", encoding=encoding, newline="") as f:
            f.write(content)
    except OSError as e:
        if backup_path is not None and backup_path.exists():
            shutil.copy2(backup_path, path)
        raise FileOperationError(f"Cannot write '{path}': {e}", path, "write", original_error=e)
    return backup_path


def read_json_file(file_path: Union[str, Path], encoding: str = "utf-8") -> Dict[str, Any]:
    """Read a JSON object from disk.

    Raises:
        FileOperationError: If the file cannot be read
        ParseError: If the content is not a JSON object
    """
    path = Path(file_path)
    content = read_text_file(path, encoding)
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in '{path}': {e}", original_error=e,
                         context={"file_path": str(path)})
    if not isinstance(data, dict):
        raise ParseError(f"'{path}' must contain a JSON object", context={"file_path": str(path)})
    return data


def find_upwards(start: Union[str, Path], file_name: str,
                 stop_at: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Find the closest ``file_name`` in ``start`` or its parents.

    The search does not go above ``stop_at`` when given.
    """
    current = Path(start).resolve()
    stop = Path(stop_at).resolve() if stop_at else None
    for directory in [current] + list(current.parents):
        candidate = directory / file_name
        if candidate.is_file():
            return candidate
        if stop is not None and directory == stop:
            break
    return None


def make_executable(file_path: Union[str, Path]) -> None:
    """Set 0755-style execute bits on a file."""
    path = Path(file_path)
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH | stat.S_IRUSR | stat.S_IWUSR)


def safe_delete_file(file_path: Union[str, Path]) -> bool:
    """Delete a file if it exists; returns whether something was deleted."""
    path = Path(file_path)
    if not path.exists():
        return False
    try:
        path.unlink()
    except OSError as e:
        raise FileOperationError(f"Cannot delete '{path}': {e}", path, "delete", original_error=e)
    return True
