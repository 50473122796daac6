"""
Schema version checks and unknown key detection.

Every configuration layer may carry ``[schema] version = "MAJOR.MINOR.PATCH"``.
Layers with another major version are refused before they are merged. Newer
minor versions are read, with a warning.
"""

from __future__ import annotations

import logging

from .exceptions import IncompatibleSchemaError, ValidationError

logger = logging.getLogger(__name__)

__all__ = [
    "SCHEMA_VERSION",
    "check_schema_version",
    "find_unknown_keys",
]

#: Configuration schema version understood by this package
SCHEMA_VERSION = "1.0.0"


def _major_minor(version: object, source: str) -> tuple[int, int]:
    parts = version.split(".") if isinstance(version, str) else []
    if len(parts) != 3 or not all(p.isdigit() for p in parts):  # noqa: PLR2004
        msg = (
            f"Invalid [schema] version {version!r} in {source} "
            "(expected 'MAJOR.MINOR.PATCH')"
        )
        raise ValidationError(msg)
    return int(parts[0]), int(parts[1])


def check_schema_version(
    version: object,
    supported: str = SCHEMA_VERSION,
    *,
    source: str = "configuration",
) -> None:
    """
    Check that a configuration layer can be read by this package.

    Parameters
    ----------
    version
        ``[schema] version`` value of the layer
    supported
        Schema version understood by this package
    source
        Where the layer came from, used in messages (e.g. a file path)

    Raises
    ------
    ValidationError
        If ``version`` is not a "MAJOR.MINOR.PATCH" string
    IncompatibleSchemaError
        If the major versions differ

    Examples
    --------
    >>> check_schema_version("1.0.3")
    """
    major, minor = _major_minor(version, source)
    supported_major, supported_minor = _major_minor(supported, "this package")

    if major != supported_major:
        raise IncompatibleSchemaError(str(version), supported)

    if minor > supported_minor:
        logger.warning(
            f"{source} uses schema version {version}, newer than {supported}. "
            "Keys added since then are ignored."
        )


def find_unknown_keys(data: dict[str, object], known_keys: set[str]) -> list[str]:
    """
    Keys of ``data`` that are not in ``known_keys``, sorted.

    Examples
    --------
    >>> find_unknown_keys({"a": 1, "b": 2}, {"a"})
    ['b']
    """
    return sorted(set(data.keys()) - known_keys)
