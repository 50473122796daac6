"""
calcsize configuration layer.

This module provides file-based configuration for the calcsize process:
- TOML config files for the process parameters, column and mode tables
- Layered configuration (defaults -> tuning -> experiment overrides)
- Structured parameter metadata with validation

Example:
    >>> from calcsize.config import build_column, load_config
    >>> config = load_config("configs/mam4.toml")
    >>> process, prognostics, diagnostics, tendencies = build_column(config)
"""

from __future__ import annotations

from .base import ColumnConfig, ModelConfig
from .builder import build_column, build_process, build_registry, config_from_dict
from .exceptions import (
    ConfigError,
    IncompatibleSchemaError,
    ProcessNotFoundError,
    ValidationError,
)
from .loader import deep_merge, load_config, load_config_layers
from .parameters import (
    ParameterMetadata,
    get_parameter_metadata,
    parameter,
    validate_parameters,
)
from .registry import ProcessRegistry, process_registry
from .validation import SCHEMA_VERSION, check_schema_version

__all__ = [
    "SCHEMA_VERSION",
    "ColumnConfig",
    "ConfigError",
    "IncompatibleSchemaError",
    "ModelConfig",
    "ParameterMetadata",
    "ProcessNotFoundError",
    "ProcessRegistry",
    "ValidationError",
    "build_column",
    "build_process",
    "build_registry",
    "check_schema_version",
    "config_from_dict",
    "deep_merge",
    "get_parameter_metadata",
    "load_config",
    "load_config_layers",
    "parameter",
    "process_registry",
    "validate_parameters",
]
