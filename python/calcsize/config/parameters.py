"""
Parameter metadata for configuration dataclasses.

Fields declared with :func:`parameter` carry a unit, a description, an
optional hard range or list of choices and a literature source. The
metadata is used to validate values when a configuration is built.

Example:
    >>> from dataclasses import dataclass
    >>> from calcsize.config.parameters import parameter, validate_parameters
    >>>
    >>> @dataclass
    ... class MyParams:
    ...     timescale: float = parameter(default=86400.0, range=(1.0, 1e7), unit="s")
    >>>
    >>> validate_parameters(MyParams(timescale=0.0))
    ["Parameter 'timescale' value 0.0 is outside valid range [1.0, 10000000.0]"]
"""

from __future__ import annotations

from dataclasses import MISSING, dataclass, field, fields, replace
from typing import Any

__all__ = [
    "ParameterMetadata",
    "get_parameter_metadata",
    "parameter",
    "validate_parameters",
]


@dataclass(frozen=True)
class ParameterMetadata:
    """Metadata for a single configuration parameter.

    Attributes
    ----------
    name : str
        Parameter name
    unit : str | None
        Physical unit (e.g., "s", "m")
    description : str | None
        Human-readable description
    range : tuple[float, float] | None
        Hard validation range (min, max). Values outside this range are errors.
    choices : list[Any] | None
        Valid enum-like choices for the parameter
    source : str | None
        Citation or reference for the parameter value
    """

    name: str
    unit: str | None = None
    description: str | None = None
    range: tuple[float, float] | None = None
    choices: list[Any] | None = None
    source: str | None = None


def parameter(  # noqa: PLR0913
    default: Any = MISSING,
    unit: str | None = None,
    description: str | None = None,
    range: tuple[float, float] | None = None,
    choices: list[Any] | None = None,
    source: str | None = None,
) -> Any:
    """Create a dataclass field with parameter metadata.

    Parameters
    ----------
    default : Any
        Default value. The field is required when omitted.
    unit : str | None
        Physical unit
    description : str | None
        Human-readable description
    range : tuple[float, float] | None
        Hard validation range (min, max)
    choices : list | None
        Valid choices for enum-like parameters
    source : str | None
        Citation or reference

    Returns
    -------
    Any
        A dataclass field with the metadata attached under ``"param"``
    """
    metadata = {
        "param": ParameterMetadata(
            name="",
            unit=unit,
            description=description,
            range=range,
            choices=choices,
            source=source,
        )
    }

    if default is MISSING:
        return field(metadata=metadata)
    return field(default=default, metadata=metadata)


def get_parameter_metadata(cls: type) -> dict[str, ParameterMetadata]:
    """Collect the parameter metadata of a dataclass.

    Parameters
    ----------
    cls : type
        A dataclass type with fields declared via :func:`parameter`

    Returns
    -------
    dict[str, ParameterMetadata]
        Mapping from field name to metadata, with ``name`` filled in
    """
    return {
        f.name: replace(f.metadata["param"], name=f.name)
        for f in fields(cls)
        if "param" in f.metadata
    }


def validate_parameters(instance: Any) -> list[str]:
    """Check parameter values against their metadata.

    Parameters
    ----------
    instance : Any
        An instance of a dataclass with parameter metadata

    Returns
    -------
    list[str]
        Validation error messages (empty if valid)
    """
    errors = []
    for name, meta in get_parameter_metadata(type(instance)).items():
        value = getattr(instance, name)

        if meta.range is not None:
            min_val, max_val = meta.range
            if value < min_val or value > max_val:
                errors.append(
                    f"Parameter '{name}' value {value} is outside valid range "
                    f"[{min_val}, {max_val}]"
                )

        if meta.choices is not None and value not in meta.choices:
            errors.append(
                f"Parameter '{name}' value {value!r} is not in valid choices: "
                f"{meta.choices}"
            )

    return errors
