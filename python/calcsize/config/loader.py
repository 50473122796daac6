"""
Loading and merging of TOML configuration files.

A run is usually described by several layers: the built-in defaults, a
tuning file and experiment overrides. Later layers win.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from .validation import check_schema_version, find_unknown_keys

logger = logging.getLogger(__name__)

__all__ = [
    "KNOWN_TOP_LEVEL_KEYS",
    "deep_merge",
    "load_config",
    "load_config_layers",
]

KNOWN_TOP_LEVEL_KEYS = {
    "schema",
    "model",
    "column",
    "components",
    "modes",
    "species",
    "registry",
}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Merge ``override`` into a copy of ``base``.

    Tables are merged recursively; any other value, including arrays, is
    replaced.

    Examples
    --------
    >>> deep_merge({"column": {"num_levels": 72}}, {"column": {"num_levels": 1}})
    {'column': {'num_levels': 1}}
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config(path: str | Path) -> dict[str, Any]:
    """
    Load a single TOML configuration file.

    Unknown top-level tables are reported with a warning and kept in the
    returned dictionary; the builder ignores them.

    A ``[schema] version`` in the file is checked before the file is used.

    Parameters
    ----------
    path
        Path to the TOML file.

    Returns
    -------
    dict[str, Any]
        Raw configuration dictionary.

    Raises
    ------
    IncompatibleSchemaError
        If the file was written for another major schema version
    """
    path = Path(path)
    with path.open("rb") as f:
        config = tomllib.load(f)

    version = config.get("schema", {}).get("version")
    if version is not None:
        check_schema_version(version, source=str(path))

    unknown = find_unknown_keys(config, KNOWN_TOP_LEVEL_KEYS)
    if unknown:
        logger.warning(
            f"Unknown configuration keys in {path}: {', '.join(unknown)}. "
            "These will be ignored."
        )

    logger.debug(f"Loaded configuration from {path}")
    return config


def load_config_layers(*paths: str | Path) -> dict[str, Any]:
    """
    Load several TOML files and merge them in order.

    Parameters
    ----------
    *paths
        Paths to the TOML files, lowest precedence first.

    Returns
    -------
    dict[str, Any]
        Merged configuration dictionary. Empty when no path is given.
    """
    result: dict[str, Any] = {}
    for path in paths:
        result = deep_merge(result, load_config(path))
    return result
