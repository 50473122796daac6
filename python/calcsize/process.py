"""
Typed aerosol processes.

This module provides a base class for aerosol processes that declare which
column fields they read and write. A process reads prognostic fields
(``Input``), writes tendency fields (``Output``) and reads and rewrites
diagnostic fields (``State``).

Example
-------
```python
from calcsize.process import AerosolProcess, Input, Output


class Decay(AerosolProcess):
    n_mode_i = Input("n_mode_i", unit="1/kg")
    dnidt = Output("n_mode_i", unit="1/kg/s")

    def __init__(self, rate: float):
        self.rate = rate

    def compute_tendencies(self, t, dt, prognostics, diagnostics, tendencies):
        tendencies.n_mode_i[...] = -self.rate * prognostics.n_mode_i
```
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from .state import Diagnostics, Prognostics, Tendencies

__all__ = [
    "AerosolProcess",
    "Input",
    "Output",
    "RequirementDefinition",
    "RequirementType",
    "State",
]


class RequirementType(enum.Enum):
    """How a process uses a field."""

    Input = "input"
    Output = "output"
    State = "state"


_CONTAINERS = {
    RequirementType.Input: "prognostics",
    RequirementType.Output: "tendencies",
    RequirementType.State: "diagnostics",
}


@dataclass(frozen=True)
class RequirementDefinition:
    """A field a process depends on."""

    name: str
    unit: str
    requirement_type: RequirementType

    @property
    def container(self) -> str:
        """Name of the container holding the field."""
        return _CONTAINERS[self.requirement_type]


@dataclass(frozen=True)
class Input:
    """Declare a prognostic field read by a process.

    Parameters
    ----------
    name
        The field name on the prognostics container (e.g., "n_mode_i")
    unit
        The unit string (e.g., "1/kg")
    """

    name: str
    unit: str = ""

    def to_requirement(self) -> RequirementDefinition:
        """Convert to a RequirementDefinition."""
        return RequirementDefinition(self.name, self.unit, RequirementType.Input)


@dataclass(frozen=True)
class Output:
    """Declare a tendency field written by a process.

    Parameters
    ----------
    name
        The field name on the tendencies container (e.g., "n_mode_i")
    unit
        The unit string (e.g., "1/kg/s")
    """

    name: str
    unit: str = ""

    def to_requirement(self) -> RequirementDefinition:
        """Convert to a RequirementDefinition."""
        return RequirementDefinition(self.name, self.unit, RequirementType.Output)


@dataclass(frozen=True)
class State:
    """Declare a diagnostic field that a process reads and rewrites.

    Parameters
    ----------
    name
        The field name on the diagnostics container (e.g., "dgncur_i")
    unit
        The unit string (e.g., "m")
    """

    name: str
    unit: str = ""

    def to_requirement(self) -> RequirementDefinition:
        """Convert to a RequirementDefinition."""
        return RequirementDefinition(self.name, self.unit, RequirementType.State)


class ProcessMeta(type):
    """
    Metaclass for AerosolProcess that collects field declarations.

    Input, Output and State class attributes (including inherited ones) are
    gathered into ``_process_inputs``, ``_process_outputs`` and
    ``_process_states``.
    """

    def __new__(  # noqa: D102
        mcs,
        name: str,
        bases: tuple[type, ...],
        namespace: dict[str, Any],
        **kwargs: Any,
    ) -> ProcessMeta:
        inputs: dict[str, Input] = {}
        outputs: dict[str, Output] = {}
        states: dict[str, State] = {}

        for base in bases:
            if hasattr(base, "_process_inputs"):
                inputs.update(base._process_inputs)
            if hasattr(base, "_process_outputs"):
                outputs.update(base._process_outputs)
            if hasattr(base, "_process_states"):
                states.update(base._process_states)

        for attr_name, attr_value in list(namespace.items()):
            if isinstance(attr_value, Input):
                inputs[attr_name] = attr_value
            elif isinstance(attr_value, Output):
                outputs[attr_name] = attr_value
            elif isinstance(attr_value, State):
                states[attr_name] = attr_value

        namespace["_process_inputs"] = inputs
        namespace["_process_outputs"] = outputs
        namespace["_process_states"] = states

        return super().__new__(mcs, name, bases, namespace, **kwargs)


class AerosolProcess(metaclass=ProcessMeta):
    """Base class for aerosol processes acting on a column.

    Subclasses declare their fields using class-level descriptors and
    implement :meth:`compute_tendencies`.
    """

    _process_inputs: ClassVar[dict[str, Input]] = {}
    _process_outputs: ClassVar[dict[str, Output]] = {}
    _process_states: ClassVar[dict[str, State]] = {}

    def name(self) -> str:
        """Unique name of the process."""
        return type(self).__name__

    def definitions(self) -> list[RequirementDefinition]:
        """Return the field definitions for this process.

        This method is auto-generated from the Input, Output, and State
        class attributes.
        """
        defs: list[RequirementDefinition] = []

        for inp in self._process_inputs.values():
            defs.append(inp.to_requirement())

        for out in self._process_outputs.values():
            defs.append(out.to_requirement())

        for state in self._process_states.values():
            defs.append(state.to_requirement())

        return defs

    def validate_containers(
        self,
        prognostics: Prognostics,
        diagnostics: Diagnostics,
        tendencies: Tendencies,
    ) -> None:
        """Check that the containers provide every declared field.

        Raises
        ------
        KeyError
            If a declared field is missing from its container
        ValueError
            If the containers do not describe the same column
        """
        containers = {
            "prognostics": prognostics,
            "diagnostics": diagnostics,
            "tendencies": tendencies,
        }
        for definition in self.definitions():
            container = containers[definition.container]
            if not hasattr(container, definition.name):
                raise KeyError(  # noqa: TRY003
                    f"{self.name()} requires field '{definition.name}' "
                    f"on {definition.container}"
                )

        levels = {name: c.num_levels for name, c in containers.items()}
        if len(set(levels.values())) != 1:
            msg = f"Containers have different numbers of levels: {levels}"
            raise ValueError(msg)

    def compute_tendencies(
        self,
        t: float,
        dt: float,
        prognostics: Prognostics,
        diagnostics: Diagnostics,
        tendencies: Tendencies,
    ) -> None:
        """Compute tendencies for one time step.

        Parameters
        ----------
        t
            Current time [s]
        dt
            Time step [s]
        prognostics
            Prognostic fields (read only)
        diagnostics
            Diagnostic fields (read and updated)
        tendencies
            Tendency fields (written)
        """
        raise NotImplementedError("Subclasses must implement compute_tendencies()")
