"""Configuration file discovery and loading.

Configuration lives next to the project's package.json in one of two formats.
The first file that exists wins:

    hooks-config.json
    hooks-config.yaml
    hooks-config.yml

A missing file yields the defaults. A file that cannot be read or parsed is
logged and also yields the defaults: configuration problems never stop a
commit on their own.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from ..exceptions import ConfigParseError
from ..models.hook_config import HookConfig
from ..types.enums import HookName
from ..utils.file_operations import FileOperationError, read_text_file

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = ("hooks-config.json", "hooks-config.yaml", "hooks-config.yml")


def find_config_file(directory: Union[str, Path]) -> Optional[Path]:
    """First existing config file in ``directory``, in CONFIG_FILE_NAMES order."""
    directory = Path(directory)
    for name in CONFIG_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def parse_config_text(text: str, path: Path) -> Dict[str, Any]:
    """Parse config content according to the file extension.

    Raises:
        ConfigParseError: If the content is invalid or not a mapping
    """
    try:
        if path.suffix == ".json":
            data = json.loads(text) if text.strip() else {}
        else:
            data = yaml.safe_load(text)
            if data is None:
                data = {}
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(f"Cannot parse {path.name}: {e}", path, original_error=e)

    if not isinstance(data, dict):
        raise ConfigParseError(f"{path.name} must contain a mapping of hook names", path)
    return data


class ConfigLoader:
    """Loads the HookConfig for a project directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self.last_error: Optional[Exception] = None

    def load(self) -> HookConfig:
        config, error = self.load_with_error()
        self.last_error = error
        return config

    def load_with_error(self) -> Tuple[HookConfig, Optional[Exception]]:
        """Load the config and report the problem that forced defaults, if any."""
        path = find_config_file(self.directory)
        if path is None:
            logger.debug("No hooks config in %s, using defaults", self.directory)
            return HookConfig.defaults(), None

        try:
            data = parse_config_text(read_text_file(path), path)
        except (ConfigParseError, FileOperationError) as e:
            logger.info("Ignoring %s: %s", path, e.message)
            return HookConfig.defaults(), e

        unknown = self._unknown_keys(data)
        if unknown:
            logger.debug("Ignoring unknown hook names in %s: %s", path, ", ".join(unknown))

        logger.debug("Loaded hooks config from %s", path)
        return HookConfig.from_dict(data, source=path), None

    @staticmethod
    def _unknown_keys(data: Dict[str, Any]) -> List[str]:
        known = set(HookName.get_all_names())
        return [str(key) for key in data if key not in known]


def load_config(directory: Union[str, Path]) -> HookConfig:
    """Load the HookConfig stored in ``directory`` (defaults when absent or broken)."""
    return ConfigLoader(directory).load()
