"""
Configuration merger for Rolecall.

Layered config dicts are combined with a deep merge; list values
can be extended or pruned with '+key' / '-key' entries.
"""

from typing import Any


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Merge rules:
    - Scalars and plain lists in override replace base
    - Nested dicts are merged recursively
    - '+key' with a list appends unseen items to base[key]
    - '-key' with a list removes those items from base[key]
    - None drops the key

    Args:
        base: Base configuration dictionary.
        override: Override configuration dictionary.

    Returns:
        A new merged dictionary; neither input is modified.

    Examples:
        >>> deep_merge({"auth": {"scopes": ["a"]}}, {"auth": {"+scopes": ["b"]}})
        {'auth': {'scopes': ['a', 'b']}}
    """
    merged = dict(base)

    for key, value in override.items():
        if key[:1] in ("+", "-") and isinstance(value, list):
            target = key[1:]
            current = merged.get(target)
            if key[0] == "+":
                if isinstance(current, list):
                    merged[target] = current + [v for v in value if v not in current]
                else:
                    merged[target] = list(value)
            elif isinstance(current, list):
                merged[target] = [v for v in current if v not in value]
        elif value is None:
            merged.pop(key, None)
        elif isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value

    return merged


def get_nested_value(config: dict[str, Any], key_path: str) -> Any:
    """
    Read a dotted key such as "remote.base_url".

    Returns:
        The value, or None when any segment is missing.
    """
    current: Any = config
    for key in key_path.split("."):
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def set_nested_value(config: dict[str, Any], key_path: str, value: Any) -> dict[str, Any]:
    """
    Set a dotted key, creating intermediate dictionaries as needed.

    Args:
        config: Configuration dictionary (modified in place).
        key_path: Dot-separated key path (e.g., "auth.scopes").
        value: Value to set.

    Returns:
        The same dictionary, for chaining.
    """
    *parents, leaf = key_path.split(".")
    current = config
    for key in parents:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]
    current[leaf] = value
    return config
