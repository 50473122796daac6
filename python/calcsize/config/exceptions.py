"""
Exceptions raised while configuring calcsize.

- ConfigError: Base exception for all configuration errors
- ValidationError: Bad parameter values, malformed mode or species tables
- IncompatibleSchemaError: Schema version mismatch
- ProcessNotFoundError: Process name not in the registry
"""

from __future__ import annotations

__all__ = [
    "ConfigError",
    "IncompatibleSchemaError",
    "ProcessNotFoundError",
    "ValidationError",
]


class ConfigError(Exception):
    """Base exception for all configuration errors."""

    pass


class ValidationError(ConfigError):
    """
    Raised for validation failures.

    This includes unknown or missing fields, out-of-range parameter values and
    inconsistent mode or species tables.
    """

    pass


class IncompatibleSchemaError(ConfigError):
    """
    Raised when a configuration file's schema version cannot be read.

    Parameters
    ----------
    config_version
        The version string from the configuration file.
    loader_version
        The version string supported by this loader.
    """

    def __init__(self, config_version: str, loader_version: str) -> None:
        message = (
            f"Incompatible schema version: config has version {config_version}, "
            f"but this loader supports version {loader_version}"
        )
        super().__init__(message)
        self.config_version = config_version
        self.loader_version = loader_version


class ProcessNotFoundError(ConfigError):
    """
    Raised when a requested process is not found in the registry.

    Parameters
    ----------
    name
        The process name that was not found.
    available
        Names of the registered processes.
    """

    def __init__(self, name: str, available: list[str]) -> None:
        if not available:
            message = f"Process '{name}' not found. No processes are registered."
        else:
            available_str = ", ".join(f"'{p}'" for p in sorted(available))
            message = (
                f"Process '{name}' not found. Available processes: {available_str}"
            )
        super().__init__(message)
        self.name = name
        self.available = available
