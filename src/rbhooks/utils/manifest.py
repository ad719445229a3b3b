"""package.json handling.

The handler only ever rewrites the ``scripts`` object. Every other key is
written back untouched, in its original order, with the file's original
indentation and trailing newline.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from ..exceptions import ManifestNotFoundError, ParseError
from .file_operations import create_backup, read_text_file, write_text_file
from .logging import audit

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"
DEPENDENCY_KEYS = ("dependencies", "devDependencies", "peerDependencies")


class ManifestHandler:
    """Load, edit and save a package.json file.

    Usage:
        handler = ManifestHandler(project_dir / "package.json")
        handler.load()
        if handler.set_script("check-gitignore", "rb_checkgitignore"):
            handler.save()
    """

    def __init__(self, file_path: Union[str, Path]):
        self.file_path = Path(file_path)
        self._original_content: Optional[str] = None
        self._data: Optional[Dict[str, Any]] = None
        self._indent: Union[int, str] = 2
        self._dirty = False
        self._backup_path: Optional[Path] = None

    def exists(self) -> bool:
        return self.file_path.is_file()

    @property
    def data(self) -> Dict[str, Any]:
        if self._data is None:
            raise ParseError("Manifest not loaded. Call load() first.")
        return self._data

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    @property
    def backup_path(self) -> Optional[Path]:
        return self._backup_path

    def load(self) -> Dict[str, Any]:
        """Read and parse the manifest.

        Raises:
            ManifestNotFoundError: If the file does not exist
            ParseError: If it is not a JSON object
        """
        if not self.exists():
            raise ManifestNotFoundError(self.file_path.parent)
        self._original_content = read_text_file(self.file_path)
        try:
            data = json.loads(self._original_content)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON in {self.file_path}: {e}", original_error=e,
                             context={"file_path": str(self.file_path)})
        if not isinstance(data, dict):
            raise ParseError(f"{self.file_path} must contain a JSON object",
                             context={"file_path": str(self.file_path)})
        self._indent = self._detect_indent(self._original_content)
        self._data = data
        self._dirty = False
        return data

    @staticmethod
    def _detect_indent(content: str) -> Union[int, str]:
        match = re.search(r"^([ \t]+)\S", content, re.MULTILINE)
        if not match:
            return 2
        whitespace = match.group(1)
        if "\t" in whitespace:
            return "\t"
        return len(whitespace)

    def get_scripts(self) -> Dict[str, str]:
        scripts = self.data.get("scripts")
        return dict(scripts) if isinstance(scripts, dict) else {}

    def get_script(self, name: str) -> Optional[str]:
        value = self.get_scripts().get(name)
        return value if isinstance(value, str) else None

    def set_script(self, name: str, command: str, overwrite: bool = False) -> bool:
        """Set ``scripts[name]``; returns True when the manifest changed."""
        scripts = self.data.get("scripts")
        if not isinstance(scripts, dict):
            scripts = {}
            self.data["scripts"] = scripts
        if name in scripts and not overwrite:
            return False
        if scripts.get(name) == command:
            return False
        scripts[name] = command
        self._dirty = True
        return True

    def remove_script(self, name: str) -> bool:
        """Delete ``scripts[name]``; returns True when something was removed."""
        scripts = self.data.get("scripts")
        if not isinstance(scripts, dict) or name not in scripts:
            return False
        del scripts[name]
        self._dirty = True
        return True

    def remove_scripts_matching(self, names: Iterable[str], pattern: "re.Pattern[str]") -> Dict[str, str]:
        """Remove the scripts in ``names`` whose command matches ``pattern``."""
        removed = {}
        for name in names:
            command = self.get_script(name)
            if command is not None and pattern.search(command):
                self.remove_script(name)
                removed[name] = command
        return removed

    def has_dependency(self, package: str) -> bool:
        for key in DEPENDENCY_KEYS:
            deps = self.data.get(key)
            if isinstance(deps, dict) and package in deps:
                return True
        return False

    def save(self, backup: bool = True) -> bool:
        """Write the manifest back if it changed.

        A backup is taken before the first write of this handler's lifetime
        when ``backup`` is set.

        Returns:
            Whether the file was written
        """
        if not self._dirty:
            return False
        if backup and self._backup_path is None and self.exists():
            self._backup_path = create_backup(self.file_path)
        content = json.dumps(self.data, indent=self._indent, ensure_ascii=False)
        if self._original_content is None or self._original_content.endswith("\n"):
            content += "\n"
        write_text_file(self.file_path, content)
        self._original_content = content
        self._dirty = False
        audit("update_manifest_scripts", self.file_path, backup=str(self._backup_path or ""))
        logger.debug("Saved %s", self.file_path)
        return True
