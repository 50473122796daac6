"""Build calcsize processes and columns from configuration."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from calcsize.modes import Mode, ModeRegistry, Species, mam4_registry

from .base import ColumnConfig
from .exceptions import ValidationError
from .parameters import get_parameter_metadata
from .registry import process_registry
from .validation import SCHEMA_VERSION, check_schema_version, find_unknown_keys

if TYPE_CHECKING:
    from calcsize.config.models.calcsize import CalcSizeConfig
    from calcsize.process import AerosolProcess
    from calcsize.state import Diagnostics, Prognostics, Tendencies

logger = logging.getLogger(__name__)

__all__ = ["build_column", "build_process", "build_registry", "config_from_dict"]

_MODE_KEYS = {"min_diameter", "nom_diameter", "max_diameter", "mean_std_dev"}
_REGISTRY_KEYS = {"aitken", "accumulation", "no_transfer_acc2ait"}
_COMPONENT_KEYS = {"process", "parameters"}


def _require_keys(table: dict[str, Any], required: set[str], where: str) -> None:
    missing = sorted(required - set(table))
    if missing:
        msg = f"Missing keys in {where}: {', '.join(missing)}"
        raise ValidationError(msg)
    unknown = find_unknown_keys(table, required)
    if unknown:
        msg = f"Unknown keys in {where}: {', '.join(unknown)}"
        raise ValidationError(msg)


def build_registry(config: dict[str, Any]) -> ModeRegistry:
    """Build the mode and species table from configuration.

    The ``[modes.<name>]`` and ``[species.<name>]`` tables replace the MAM4
    defaults when present. Modes keep the order in which they are written.
    The ``[registry]`` table names the Aitken and Accumulation modes and the
    species that never leave the Accumulation mode.

    Parameters
    ----------
    config
        Configuration dictionary (e.g. from :func:`load_config`)

    Returns
    -------
    ModeRegistry
        The validated registry

    Raises
    ------
    ValidationError
        If a table has missing or unknown keys, or the tables are inconsistent
    """
    default = mam4_registry()
    modes_table = config.get("modes")
    species_table = config.get("species")
    registry_table = config.get("registry", {})

    unknown = find_unknown_keys(registry_table, _REGISTRY_KEYS)
    if unknown:
        msg = f"Unknown keys in [registry]: {', '.join(unknown)}"
        raise ValidationError(msg)

    try:
        if modes_table is None:
            modes = default.modes
            mode_species = default.mode_species
        else:
            modes = []
            mode_species = []
            for name, table in modes_table.items():
                mode_values = {k: v for k, v in table.items() if k != "species"}
                _require_keys(mode_values, _MODE_KEYS, f"[modes.{name}]")
                modes.append(Mode(name=name, **mode_values))
                mode_species.append(tuple(table.get("species", ())))

        if species_table is None:
            species = default.species
        else:
            species = []
            for name, table in species_table.items():
                _require_keys(table, {"density"}, f"[species.{name}]")
                species.append(Species(name=name, density=table["density"]))

        known_species = {s.name for s in species}
        no_transfer = registry_table.get(
            "no_transfer_acc2ait", default.no_transfer_acc2ait & known_species
        )

        registry = ModeRegistry(
            modes=tuple(modes),
            species=tuple(species),
            mode_species=tuple(mode_species),
            aitken=registry_table.get("aitken", default.aitken),
            accumulation=registry_table.get("accumulation", default.accumulation),
            no_transfer_acc2ait=frozenset(no_transfer),
        )
    except ValueError as err:
        msg = f"Invalid mode or species table: {err}"
        raise ValidationError(msg) from err

    logger.info(
        f"Built registry with modes {list(registry.mode_names)} and "
        f"{len(registry.species)} species"
    )
    return registry


def config_from_dict(config: dict[str, Any]) -> CalcSizeConfig:
    """Convert a configuration dictionary into a :class:`CalcSizeConfig`.

    Parameters
    ----------
    config
        Configuration dictionary (e.g. from :func:`load_config_layers`)

    Returns
    -------
    CalcSizeConfig
        Validated configuration

    Raises
    ------
    IncompatibleSchemaError
        If the schema major version is not supported
    ValidationError
        If a parameter, the column or the registry tables are invalid
    """
    from calcsize.config.models.calcsize import (  # noqa: PLC0415
        CalcSizeConfig,
        CalcSizeParameters,
    )

    schema_version = config.get("schema", {}).get("version", SCHEMA_VERSION)
    check_schema_version(schema_version)

    model = config.get("model", {})
    component = config.get("components", {}).get("calcsize", {})
    unknown = find_unknown_keys(component, _COMPONENT_KEYS)
    if unknown:
        msg = f"Unknown keys in [components.calcsize]: {', '.join(unknown)}"
        raise ValidationError(msg)

    params = component.get("parameters", {})
    unknown = find_unknown_keys(params, set(get_parameter_metadata(CalcSizeParameters)))
    if unknown:
        msg = f"Unknown calcsize parameters: {', '.join(unknown)}"
        raise ValidationError(msg)

    try:
        parameters = CalcSizeParameters(**params)
        column = ColumnConfig(**config.get("column", {}))
    except (TypeError, ValueError) as err:
        raise ValidationError(str(err)) from err

    return CalcSizeConfig(
        name=model.get("name", "calcsize"),
        model_type=model.get("type", "calcsize"),
        version=model.get("version", "1.0.0"),
        config_schema=schema_version,
        description=model.get("description", ""),
        process=component.get("process", "CalcSize"),
        calcsize=parameters,
        registry=build_registry(config),
        column=column,
    )


def build_process(config: CalcSizeConfig | dict[str, Any]) -> AerosolProcess:
    """Build the calcsize process from configuration.

    Parameters
    ----------
    config
        CalcSizeConfig instance or dict from TOML

    Returns
    -------
    AerosolProcess
        The configured process

    Raises
    ------
    ValueError
        If model_type is unknown
    ProcessNotFoundError
        If the requested process is not registered
    """
    # Registers the CalcSize process as a side effect
    from calcsize.config.models import calcsize as _calcsize  # noqa: F401, PLC0415

    if isinstance(config, dict):
        config = config_from_dict(config)
    else:
        check_schema_version(config.config_schema)

    if config.model_type != "calcsize":
        msg = f"Unknown model type: {config.model_type!r}"
        raise ValueError(msg)

    process_cls = process_registry.get(config.process)
    process = process_cls.from_parameters(asdict(config.calcsize), config.registry)
    logger.info(f"Built process {process.name()!r} for model {config.name!r}")
    return process


def build_column(
    config: CalcSizeConfig | dict[str, Any],
) -> tuple[AerosolProcess, Prognostics, Diagnostics, Tendencies]:
    """Build the process together with containers sized for the column.

    Parameters
    ----------
    config
        CalcSizeConfig instance or dict from TOML

    Returns
    -------
    tuple
        ``(process, prognostics, diagnostics, tendencies)``
    """
    if isinstance(config, dict):
        config = config_from_dict(config)

    process = build_process(config)
    column = config.column if config.column is not None else ColumnConfig()
    prognostics, diagnostics, tendencies = column.allocate(
        process.registry.num_modes
    )
    process.validate_containers(prognostics, diagnostics, tendencies)
    return process, prognostics, diagnostics, tendencies
