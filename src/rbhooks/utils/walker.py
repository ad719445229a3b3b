"""Filesystem walker for locating manifests.

The walk is depth-first in sorted order so discovery order (and therefore
build order) is stable across runs and platforms.
"""

import logging
import os
from pathlib import Path
from typing import AbstractSet, Iterator, Union

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDES = frozenset({"node_modules", ".git"})


def walk_dirs_containing(
    root: Union[str, Path],
    file_name: str,
    exclude: AbstractSet[str] = DEFAULT_EXCLUDES,
) -> Iterator[Path]:
    """Yield every directory under ``root`` (inclusive) that contains ``file_name``.

    Directories whose name is in ``exclude`` are not entered. Unreadable
    directories are skipped with a debug log.

    Args:
        root: Directory to start from
        file_name: File to look for, e.g. "package.json"
        exclude: Directory names to prune
    """
    root = Path(root)
    try:
        entries = sorted(os.scandir(root), key=lambda entry: entry.name)
    except OSError as e:
        logger.debug("Skipping unreadable directory %s: %s", root, e)
        return

    subdirs = []
    has_file = False
    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                if entry.name not in exclude:
                    subdirs.append(Path(entry.path))
            elif entry.name == file_name and entry.is_file():
                has_file = True
        except OSError as e:
            logger.debug("Skipping %s: %s", entry.path, e)

    if has_file:
        yield root
    for subdir in subdirs:
        yield from walk_dirs_containing(subdir, file_name, exclude)
