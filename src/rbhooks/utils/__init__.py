"""
rbhooks utility modules

File operations, manifest editing, directory walking, logging and report
formatting.
"""

from .file_operations import (
    FileOperationError,
    create_backup,
    find_upwards,
    make_executable,
    read_json_file,
    read_text_file,
    safe_delete_file,
    write_text_file,
)
from .formatters import BaseFormatter, JSONFormatter, TextFormatter, create_formatter
from .manifest import MANIFEST_NAME, ManifestHandler
from .values import safe_get_bool, safe_get_dict, safe_get_number, safe_get_str_list
from .walker import DEFAULT_EXCLUDES, walk_dirs_containing

__all__ = [
    "BaseFormatter",
    "DEFAULT_EXCLUDES",
    "FileOperationError",
    "JSONFormatter",
    "MANIFEST_NAME",
    "ManifestHandler",
    "TextFormatter",
    "create_backup",
    "create_formatter",
    "find_upwards",
    "make_executable",
    "read_json_file",
    "read_text_file",
    "safe_delete_file",
    "safe_get_bool",
    "safe_get_dict",
    "safe_get_number",
    "safe_get_str_list",
    "walk_dirs_containing",
    "write_text_file",
]
