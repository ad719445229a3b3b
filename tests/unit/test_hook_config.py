"""Tests for the hook configuration model and loader."""

import json
import logging

import pytest

from rbhooks.exceptions import ConfigParseError
from rbhooks.models.hook_config import HookConfig, HookSettings
from rbhooks.settings import ConfigLoader, find_config_file, load_config, parse_config_text
from rbhooks.types.enums import HookName


class TestDefaults:
    """Default flags per check."""

    def test_every_hook_enabled_by_default(self):
        config = HookConfig.defaults()
        for name in HookName:
            assert config[name].enabled is True

    def test_enforce_defaults(self):
        """Build and gitignore block, lowercase and reminder only warn."""
        config = HookConfig.defaults()
        assert config[HookName.BUILD].enforce is True
        assert config[HookName.GITIGNORE].enforce is True
        assert config[HookName.LOWERCASE].enforce is False
        assert config[HookName.GIT_REMINDER].enforce is False

    def test_defaults_have_no_source(self):
        assert HookConfig.defaults().is_default


class TestFromDict:
    """Merging raw config data over the defaults."""

    def test_partial_entry_keeps_other_defaults(self):
        config = HookConfig.from_dict({"lowercase": {"enforce": True}})
        assert config[HookName.LOWERCASE].enforce is True
        assert config[HookName.LOWERCASE].enabled is True
        assert config[HookName.BUILD].enforce is True

    def test_unknown_hook_names_are_ignored(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="rbhooks.models.hook_config"):
            config = HookConfig.from_dict({"deploy": {"enabled": False}, "build": {"enforce": False}})
        assert set(config.hooks) == set(HookName)
        assert config[HookName.BUILD].enforce is False
        assert "Invalid hook name 'deploy'" in caplog.text

    def test_hook_name_from_string(self):
        assert HookName.from_string("gitReminder") is HookName.GIT_REMINDER
        with pytest.raises(ValueError, match="Valid values"):
            HookName.from_string("git_reminder")

    def test_string_booleans_are_accepted(self):
        config = HookConfig.from_dict({"build": {"enabled": "false", "enforce": "no"}})
        assert config[HookName.BUILD].enabled is False
        assert config[HookName.BUILD].enforce is False

    def test_non_boolean_flags_fall_back(self):
        config = HookConfig.from_dict({"gitignore": {"enabled": 42, "enforce": "maybe"}})
        assert config[HookName.GITIGNORE].enabled is True
        assert config[HookName.GITIGNORE].enforce is True

    def test_non_dict_entry_falls_back(self):
        config = HookConfig.from_dict({"build": "off"})
        assert config[HookName.BUILD] == HookSettings.default_for(HookName.BUILD)

    def test_settings_are_read_only(self):
        config = HookConfig.from_dict({"gitReminder": {"settings": {"hoursThreshold": 2}}})
        settings = config[HookName.GIT_REMINDER].settings
        assert settings["hoursThreshold"] == 2
        with pytest.raises(TypeError):
            settings["hoursThreshold"] = 8

    def test_config_is_frozen(self):
        config = HookConfig.defaults()
        with pytest.raises(AttributeError):
            config.source = None

    def test_to_dict_round_trips_settings(self):
        data = {"build": {"enabled": True, "enforce": False, "settings": {"sharedPaths": ["libs"]}}}
        assert HookConfig.from_dict(data).to_dict()["build"] == data["build"]


class TestConfigFiles:
    """Config file discovery and parsing."""

    def test_no_file_yields_defaults(self, tmp_path):
        config = load_config(tmp_path)
        assert config.is_default
        assert config == HookConfig.defaults()

    def test_json_file(self, tmp_path):
        (tmp_path / "hooks-config.json").write_text(json.dumps({"build": {"enabled": False}}))
        config = load_config(tmp_path)
        assert config[HookName.BUILD].enabled is False
        assert config.source == tmp_path / "hooks-config.json"

    def test_yaml_file(self, tmp_path):
        (tmp_path / "hooks-config.yaml").write_text(
            "lowercase:\n  enforce: true\ngitReminder:\n  settings:\n    hoursThreshold: 8\n"
        )
        config = load_config(tmp_path)
        assert config[HookName.LOWERCASE].enforce is True
        assert config[HookName.GIT_REMINDER].get("hoursThreshold") == 8

    def test_json_wins_over_yaml(self, tmp_path):
        (tmp_path / "hooks-config.json").write_text("{}")
        (tmp_path / "hooks-config.yml").write_text("build:\n  enabled: false\n")
        assert find_config_file(tmp_path).name == "hooks-config.json"
        assert load_config(tmp_path)[HookName.BUILD].enabled is True

    def test_malformed_file_falls_back_to_defaults(self, tmp_path):
        (tmp_path / "hooks-config.json").write_text("{not json")
        loader = ConfigLoader(tmp_path)
        config = loader.load()
        assert config == HookConfig.defaults()
        assert isinstance(loader.last_error, ConfigParseError)

    def test_non_mapping_is_rejected(self, tmp_path):
        path = tmp_path / "hooks-config.yaml"
        with pytest.raises(ConfigParseError):
            parse_config_text("- build\n- lowercase\n", path)

    def test_empty_yaml_is_empty_config(self, tmp_path):
        assert parse_config_text("", tmp_path / "hooks-config.yml") == {}
