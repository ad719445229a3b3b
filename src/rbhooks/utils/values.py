"""Helpers for reading loosely-typed values out of parsed config data."""

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def safe_get_bool(data: Dict[str, Any], key: str, default: bool = False) -> bool:
    """Safely get a boolean value from a dictionary.

    Strings such as "true"/"false"/"1"/"0" are accepted; anything else falls
    back to the default.
    """
    value = data.get(key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    return default


def safe_get_dict(
    data: Dict[str, Any], key: str, default: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Safely get a dictionary value from a dictionary."""
    default = default or {}
    value = data.get(key, default)
    return dict(value) if isinstance(value, dict) else default


def safe_get_number(data: Dict[str, Any], key: str, default: Optional[float] = None,
                    allow_zero: bool = False) -> Optional[float]:
    """Safely get a positive number (or zero with ``allow_zero``).

    Numeric strings are parsed; bools, other strings and out-of-range values
    yield the default, and the rejection is logged at debug level.
    """
    if key not in data:
        return default
    value = data[key]
    parsed = None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = float(value)
        except ValueError:
            parsed = None
    if parsed is not None and (parsed > 0 or (allow_zero and parsed == 0)):
        return parsed
    logger.debug("Ignoring invalid value %r for %s, using %r", value, key, default)
    return default


def safe_get_str_list(data: Dict[str, Any], key: str, default: Optional[List[str]] = None) -> List[str]:
    """Safely get a list of strings; a single string becomes a one-item list."""
    default = list(default or [])
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return default
