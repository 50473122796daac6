"""
Process lookup by configuration name.

``[components.calcsize] process = "CalcSize"`` names the class that
:func:`calcsize.config.build_process` constructs. Model modules register their
process classes here when they are imported.
"""

from __future__ import annotations

from calcsize.process import AerosolProcess

from .exceptions import ProcessNotFoundError

__all__ = ["ProcessRegistry", "process_registry"]


class ProcessRegistry:
    """Mapping from configuration names to process classes."""

    def __init__(self) -> None:
        self._registry: dict[str, type[AerosolProcess]] = {}

    def register(self, name: str, process_class: type[AerosolProcess]) -> None:
        """
        Register a process class by name.

        The class must be an :class:`AerosolProcess` that can be built from a
        parameter mapping, i.e. it provides ``from_parameters``. Registering
        the same class twice is allowed.

        Raises
        ------
        TypeError
            If the class cannot be built from configuration.
        ValueError
            If the name is already taken by a different class.
        """
        if not (
            isinstance(process_class, type)
            and issubclass(process_class, AerosolProcess)
            and callable(getattr(process_class, "from_parameters", None))
        ):
            msg = (
                f"{process_class!r} is not an AerosolProcess with a "
                "from_parameters constructor"
            )
            raise TypeError(msg)

        existing = self._registry.get(name)
        if existing is not None and existing is not process_class:
            msg = f"Process '{name}' is already registered with a different class"
            raise ValueError(msg)
        self._registry[name] = process_class

    def get(self, name: str) -> type[AerosolProcess]:
        """
        Look up a process class.

        Raises
        ------
        ProcessNotFoundError
            If no process is registered under ``name``.
        """
        try:
            return self._registry[name]
        except KeyError:
            raise ProcessNotFoundError(name, sorted(self._registry)) from None


process_registry = ProcessRegistry()
