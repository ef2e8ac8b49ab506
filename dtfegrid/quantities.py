"""Storage of the fields interpolated to the sampling points."""

from __future__ import annotations

from dataclasses import dataclass, field as dc_field
from itertools import product
from math import prod
from typing import Any, Callable, List, Sequence

from .fields import Field
from .particles import NO_DIM, NO_SCALAR_COMP, NO_VEL_COMP

NO_GRAD_COMP = NO_DIM * NO_DIM
NO_SHEAR_COMP = (NO_DIM * (NO_DIM + 1)) // 2 - 1
NO_VORT_COMP = ((NO_DIM - 1) * NO_DIM) // 2
NO_SCALAR_GRAD_COMP = NO_SCALAR_COMP * NO_DIM


def _scalar_zero() -> float:
    return 0.0


def _vector_zero(length: int) -> Callable[[], List[float]]:
    return lambda: [0.0] * length


_ZEROS: dict[str, Callable[[], Any]] = {
    "density": _scalar_zero,
    "velocity": _vector_zero(NO_VEL_COMP),
    "velocity_gradient": _vector_zero(NO_GRAD_COMP),
    "velocity_divergence": _scalar_zero,
    "velocity_shear": _vector_zero(NO_SHEAR_COMP),
    "velocity_vorticity": _vector_zero(NO_VORT_COMP),
    "velocity_std": _scalar_zero,
    "scalar": _vector_zero(NO_SCALAR_COMP),
    "scalar_gradient": _vector_zero(NO_SCALAR_GRAD_COMP),
}


def _copy_value(value: Any) -> Any:
    return list(value) if isinstance(value, list) else value


def _flat_index(coords: Sequence[int], shape: Sequence[int]) -> int:
    index = 0
    for c, n in zip(coords, shape):
        index = index * n + c
    return index


@dataclass
class Quantities:
    """Interpolated fields; only the computed ones are non-empty."""

    density: List[float] = dc_field(default_factory=list)
    velocity: List[List[float]] = dc_field(default_factory=list)
    velocity_gradient: List[List[float]] = dc_field(default_factory=list)
    velocity_divergence: List[float] = dc_field(default_factory=list)
    velocity_shear: List[List[float]] = dc_field(default_factory=list)
    velocity_vorticity: List[List[float]] = dc_field(default_factory=list)
    velocity_std: List[float] = dc_field(default_factory=list)
    scalar: List[List[float]] = dc_field(default_factory=list)
    scalar_gradient: List[List[float]] = dc_field(default_factory=list)

    def copy_from_subgrid(
        self,
        subgrid_results: "Quantities",
        field: Field,
        main_grid: Sequence[int],
        subgrid: Sequence[int],
        subgrid_offset: Sequence[int],
    ) -> None:
        """Copy the selected fields of a subgrid into this main grid at the given offset."""
        main_shape = list(main_grid[:NO_DIM])
        sub_shape = list(subgrid[:NO_DIM])
        offset = list(subgrid_offset[:NO_DIM])
        for name in _ZEROS:
            if not getattr(field, name):
                continue
            source = getattr(subgrid_results, name)
            target = getattr(self, name)
            for sub_index, coords in enumerate(product(*(range(n) for n in sub_shape))):
                main_coords = [c + o for c, o in zip(coords, offset)]
                target[_flat_index(main_coords, main_shape)] = _copy_value(source[sub_index])

    def size(self) -> int:
        """Common length of the non-empty fields, or 0 if all are empty."""
        expected = 0
        for name in _ZEROS:
            values = getattr(self, name)
            if not values:
                continue
            if expected and expected != len(values):
                raise ValueError(
                    "Two or more objects of class 'Quantities' have different sizes. "
                    "All objects in this class should be empty or have the same size."
                )
            expected = len(values)
        return expected

    def reserve_memory(self, grid_size: Sequence[int], field: Field) -> None:
        """Resize the selected fields to the number of cells of ``grid_size``, padding with zeros."""
        total = prod(grid_size[:NO_DIM])
        zero_fill = _ZEROS
        for name, zero in zero_fill.items():
            if not getattr(field, name):
                continue
            values = getattr(self, name)
            if len(values) > total:
                del values[total:]
            else:
                values.extend(zero() for _ in range(total - len(values)))