"""Particle, sample point and triangulation vertex records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

NO_DIM = 3
"""Number of spatial dimensions."""

NO_VEL_COMP = NO_DIM
"""Number of velocity components."""

NO_SCALAR_COMP = 1
"""Number of components of the scalar data carried by each particle."""


def _vector(values: Sequence[float] | None, length: int, name: str) -> List[float]:
    if values is None:
        return [0.0] * length
    result = [float(v) for v in values]
    if len(result) != length:
        raise ValueError(f"'{name}' must have {length} components, got {len(result)}")
    return result


@dataclass
class _DataFields:
    """Point properties other than the position."""

    weight: float = 1.0
    density: float = 0.0
    velocity: List[float] = field(default_factory=lambda: [0.0] * NO_VEL_COMP)
    scalar: List[float] = field(default_factory=lambda: [0.0] * NO_SCALAR_COMP)

    def __post_init__(self) -> None:
        self.weight = float(self.weight)
        self.density = float(self.density)
        self.velocity = _vector(self.velocity, NO_VEL_COMP, "velocity")
        self.scalar = _vector(self.scalar, NO_SCALAR_COMP, "scalar")


@dataclass
class ParticleData(_DataFields):
    """A particle: its position plus weight, density, velocity and scalar data."""

    position: List[float] = field(default_factory=lambda: [0.0] * NO_DIM)

    def __post_init__(self) -> None:
        super().__post_init__()
        self.position = _vector(self.position, NO_DIM, "position")

    def copy(self) -> "ParticleData":
        """Return an independent copy of this particle."""
        return ParticleData(
            weight=self.weight,
            density=self.density,
            velocity=list(self.velocity),
            scalar=list(self.scalar),
            position=list(self.position),
        )


@dataclass
class SamplePoint:
    """A user supplied sampling point and the size of its grid cell."""

    position: List[float] = field(default_factory=lambda: [0.0] * NO_DIM)
    delta: List[float] = field(default_factory=lambda: [0.0] * NO_DIM)

    def __post_init__(self) -> None:
        self.position = _vector(self.position, NO_DIM, "position")
        self.delta = _vector(self.delta, NO_DIM, "delta")


@dataclass
class VertexData(_DataFields):
    """Data attached to a vertex of the Delaunay triangulation."""

    dummy: bool = False
    dummy_neighbor: bool = False

    def my_scalar(self) -> List[float]:
        """Return the scalar quantity that is to be interpolated."""
        return list(self.scalar)

    def set_data(self, other: _DataFields) -> None:
        """Copy the non-position data of a particle into this vertex."""
        self.weight = other.weight
        self.density = other.density
        self.velocity = list(other.velocity)
        self.scalar = list(other.scalar)

    def set_dummy(self) -> None:
        """Mark the vertex as a dummy test point with zero density."""
        self.dummy = True
        self.dummy_neighbor = True
        self.density = 0.0

    def set_dummy_neighbor(self) -> None:
        """Mark the vertex as having a dummy point among its neighbours."""
        self.dummy_neighbor = True

    def is_dummy(self) -> bool:
        return self.dummy

    def has_dummy_neighbor(self) -> bool:
        return self.dummy_neighbor


def particle_sort_key(particle: ParticleData | SamplePoint) -> Tuple[float, ...]:
    """Key that orders points lexicographically by x, then y, then z."""
    return tuple(particle.position)


def compare_particles(p1: ParticleData | SamplePoint, p2: ParticleData | SamplePoint) -> bool:
    """True if ``p1`` comes strictly before ``p2`` in positional order."""
    return particle_sort_key(p1) < particle_sort_key(p2)


def same_particle(p1: ParticleData | SamplePoint, p2: ParticleData | SamplePoint) -> bool:
    """True if both points share the same position."""
    return particle_sort_key(p1) == particle_sort_key(p2)