"""Tests for package.json editing."""

import json
import re

import pytest

from rbhooks.exceptions import ManifestNotFoundError, ParseError
from rbhooks.utils.manifest import ManifestHandler


@pytest.fixture
def manifest_path(tmp_path):
    path = tmp_path / "package.json"
    path.write_text('{\n    "name": "app",\n    "version": "1.0.0",\n    "scripts": {\n'
                    '        "build": "vite build"\n    }\n}\n')
    return path


class TestManifestHandler:
    """Load, edit and save."""

    def test_missing_manifest(self, tmp_path):
        with pytest.raises(ManifestNotFoundError):
            ManifestHandler(tmp_path / "package.json").load()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text("[1, 2]")
        with pytest.raises(ParseError):
            ManifestHandler(path).load()

    def test_set_script_does_not_overwrite(self, manifest_path):
        handler = ManifestHandler(manifest_path)
        handler.load()
        assert handler.set_script("build", "other") is False
        assert handler.set_script("check-lowercase", "rb_checklowercase") is True
        assert handler.is_dirty

    def test_save_keeps_key_order_and_indent(self, manifest_path):
        handler = ManifestHandler(manifest_path)
        handler.load()
        handler.set_script("git-reminder", "rb_gitreminder")
        assert handler.save() is True
        content = manifest_path.read_text()
        assert content.startswith('{\n    "name": "app",\n    "version"')
        assert content.endswith("}\n")
        assert list(json.loads(content)["scripts"]) == ["build", "git-reminder"]
        assert handler.backup_path is not None and handler.backup_path.exists()

    def test_clean_handler_does_not_write(self, manifest_path):
        handler = ManifestHandler(manifest_path)
        handler.load()
        assert handler.save() is False
        assert handler.backup_path is None

    def test_remove_scripts_matching(self, manifest_path):
        handler = ManifestHandler(manifest_path)
        handler.load()
        handler.set_script("build:dev", "rb_buildapps")
        removed = handler.remove_scripts_matching(["build:dev", "build"], re.compile(r"rb_buildapps"))
        assert removed == {"build:dev": "rb_buildapps"}
        assert handler.get_script("build") == "vite build"

    def test_has_dependency(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text(json.dumps({"devDependencies": {"husky": "^9"}}))
        handler = ManifestHandler(path)
        handler.load()
        assert handler.has_dependency("husky")
        assert not handler.has_dependency("react")
