"""Selection of the fields that are to be interpolated to the grid."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Sequence, Tuple

FIELD_FLAGS: Tuple[str, ...] = (
    "triangulation",
    "density",
    "velocity",
    "velocity_gradient",
    "velocity_divergence",
    "velocity_shear",
    "velocity_vorticity",
    "velocity_std",
    "scalar",
    "scalar_gradient",
)
"""Flag names in the order in which ``Field.update_choices`` matches them."""

UNAVERAGED_FIELD_NAMES: Tuple[str, ...] = (
    "triangulation",
    "density",
    "velocity",
    "gradient",
    "divergence",
    "shear",
    "vorticity",
    "",
    "scalar",
    "scalarGradient",
)
"""Option values selecting fields at the sampling points."""

AVERAGED_FIELD_NAMES: Tuple[str, ...] = (
    "",
    "density_a",
    "velocity_a",
    "gradient_a",
    "divergence_a",
    "shear_a",
    "vorticity_a",
    "velocityStd_a",
    "scalar_a",
    "scalarGradient_a",
)
"""Option values selecting fields averaged over the sampling cells."""

_VELOCITY_DERIVATIVES = ("velocity_divergence", "velocity_shear", "velocity_vorticity")
_VELOCITY = (
    "velocity",
    "velocity_gradient",
    "velocity_divergence",
    "velocity_shear",
    "velocity_vorticity",
    "velocity_std",
)
_SCALAR = ("scalar", "scalar_gradient")


@dataclass
class Field:
    """Which quantities are to be computed."""

    triangulation: bool = False
    density: bool = False
    velocity: bool = False
    velocity_gradient: bool = False
    velocity_divergence: bool = False
    velocity_shear: bool = False
    velocity_vorticity: bool = False
    velocity_std: bool = False
    scalar: bool = False
    scalar_gradient: bool = False

    def update_choices(self, choice: str, names: Sequence[str]) -> bool:
        """Switch on the flag whose option name equals ``choice``.

        ``names`` gives the option name of each flag in the order of
        ``FIELD_FLAGS``. Returns False if no name matches.
        """
        if len(names) != len(FIELD_FLAGS):
            raise ValueError(f"expected {len(FIELD_FLAGS)} field names, got {len(names)}")
        for flag, name in zip(FIELD_FLAGS, names):
            if choice == name:
                setattr(self, flag, True)
                return True
        return False

    def selected(self) -> bool:
        """True if any quantity other than the triangulation is selected."""
        return any(getattr(self, f.name) for f in fields(self) if f.name != "triangulation")

    def selected_velocity_derivatives(self) -> bool:
        return any(getattr(self, name) for name in _VELOCITY_DERIVATIVES)

    def deselect_velocity_derivatives(self) -> None:
        for name in _VELOCITY_DERIVATIVES:
            setattr(self, name, False)

    def selected_velocity(self) -> bool:
        return any(getattr(self, name) for name in _VELOCITY)

    def deselect_velocity(self) -> None:
        for name in _VELOCITY:
            setattr(self, name, False)

    def selected_scalar(self) -> bool:
        return any(getattr(self, name) for name in _SCALAR)

    def deselect_scalar(self) -> None:
        for name in _SCALAR:
            setattr(self, name, False)