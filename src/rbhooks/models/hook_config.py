"""Hook configuration model.

The configuration maps each check name (``build``, ``gitignore``,
``lowercase``, ``gitReminder``) to its flags:

    {
        "build": {"enabled": true, "enforce": true},
        "gitReminder": {
            "enabled": true,
            "enforce": false,
            "settings": {"hoursThreshold": 4}
        }
    }

A HookConfig is built once per invocation and never mutated afterwards; every
check receives it (or its own HookSettings) explicitly.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from ..types.enums import HookName
from ..utils.values import safe_get_bool, safe_get_dict

logger = logging.getLogger(__name__)


def _freeze(value: Any) -> Any:
    """Recursively wrap dicts in read-only views and lists in tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


@dataclass(frozen=True)
class HookSettings:
    """Flags and free-form settings for a single check.

    Attributes:
        enabled: Whether the check runs at all
        enforce: Whether a violation blocks the commit (True) or only warns
        settings: Check-specific options, read-only
    """
    enabled: bool = True
    enforce: bool = False
    settings: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        if not isinstance(self.settings, MappingProxyType):
            object.__setattr__(self, "settings", _freeze(dict(self.settings or {})))

    def get(self, key: str, default: Any = None) -> Any:
        """Read one entry of ``settings``."""
        return self.settings.get(key, default)

    @classmethod
    def default_for(cls, name: HookName) -> "HookSettings":
        return cls(enabled=True, enforce=name.default_enforce())

    @classmethod
    def from_dict(cls, name: HookName, data: Any) -> "HookSettings":
        """Merge a raw config entry over the defaults for ``name``.

        Non-dict entries and non-boolean flags fall back to the defaults.
        """
        defaults = cls.default_for(name)
        if not isinstance(data, dict):
            return defaults
        return cls(
            enabled=safe_get_bool(data, "enabled", defaults.enabled),
            enforce=safe_get_bool(data, "enforce", defaults.enforce),
            settings=safe_get_dict(data, "settings"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"enabled": self.enabled, "enforce": self.enforce}
        if self.settings:
            result["settings"] = _thaw(self.settings)
        return result


@dataclass(frozen=True)
class HookConfig:
    """Immutable configuration for one pipeline run.

    Attributes:
        hooks: HookSettings per HookName (always contains every name)
        source: File the configuration was read from, None for defaults
    """
    hooks: Mapping[HookName, HookSettings]
    source: Optional[Path] = None

    def __post_init__(self):
        merged = {name: HookSettings.default_for(name) for name in HookName}
        merged.update(self.hooks)
        object.__setattr__(self, "hooks", MappingProxyType(merged))

    def __getitem__(self, name: HookName) -> HookSettings:
        return self.hooks[HookName(name)]

    @property
    def is_default(self) -> bool:
        return self.source is None

    @classmethod
    def defaults(cls) -> "HookConfig":
        return cls(hooks={})

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[Path] = None) -> "HookConfig":
        """Build a config from parsed file contents; unknown keys are ignored."""
        hooks = {}
        for key, value in data.items():
            try:
                name = HookName.from_string(key)
            except ValueError as e:
                logger.debug("Ignoring config entry: %s", e)
                continue
            hooks[name] = HookSettings.from_dict(name, value)
        return cls(hooks=hooks, source=source)

    def to_dict(self) -> Dict[str, Any]:
        return {name.value: settings.to_dict() for name, settings in self.hooks.items()}
