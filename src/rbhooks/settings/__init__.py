"""Configuration discovery for rbhooks."""

from .loader import CONFIG_FILE_NAMES, ConfigLoader, find_config_file, load_config, parse_config_text

__all__ = [
    "CONFIG_FILE_NAMES",
    "ConfigLoader",
    "find_config_file",
    "load_config",
    "parse_config_text",
]
