"""Split a simplex into the pieces that fall inside the cells of a regular grid.

For every grid cell overlapped by a triangle (2D) or tetrahedron (3D) the
splitter returns the overlap volume and the first moment of that overlap
(volume times centre of mass), which is what volume averaging on a grid needs.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from itertools import combinations, product
from math import prod
from typing import List, Optional, Sequence, Tuple

VOLUME_TOL = 1.0e-3
"""Relative volume below which a piece is not split any further."""

COORD_TOL = 1.0e-5
"""Tolerance used when deciding on which grid cells a coordinate touches."""

MIN_VOLUME_TOL = 1.0e-6
"""Lower bound on the absolute volume tolerance (in grid cell units)."""

_SUPPORTED_DIMS = (2, 3)


def _flat_index(coords: Sequence[int], shape: Sequence[int]) -> int:
    index = 0
    for c, n in zip(coords, shape):
        index = index * n + c
    return index


@dataclass
class Vertex:
    """A simplex vertex and the range of grid cells its coordinates touch."""

    coords: List[float]
    n_min: Optional[List[int]] = None
    n_max: Optional[List[int]] = None

    def __post_init__(self) -> None:
        self.coords = [float(c) for c in self.coords]
        dim = len(self.coords)
        self.n_min = [0] * dim if self.n_min is None else [int(n) for n in self.n_min]
        self.n_max = [0] * dim if self.n_max is None else [int(n) for n in self.n_max]
        if len(self.n_min) != dim or len(self.n_max) != dim:
            raise ValueError("'n_min' and 'n_max' must have as many entries as 'coords'")

    @classmethod
    def zero(cls, dim: int) -> "Vertex":
        """A vertex at the origin of a ``dim`` dimensional space."""
        return cls([0.0] * dim)

    def __len__(self) -> int:
        return len(self.coords)

    def __getitem__(self, i: int) -> float:
        return self.coords[i]

    def __setitem__(self, i: int, value: float) -> None:
        self.coords[i] = float(value)

    def copy(self) -> "Vertex":
        return Vertex(list(self.coords), list(self.n_min), list(self.n_max))

    def update_n_min_max(self, i: int, p: float, tol: float) -> None:
        """Record the cells touched along axis ``i`` by coordinate ``p`` within ``tol``."""
        self.n_min[i] = int(p - tol)
        self.n_max[i] = int(p + tol)


@dataclass
class Simplex:
    """A triangle (2D) or tetrahedron (3D) and its cached volume."""

    vertices: List[Vertex]
    vol: float = 0.0

    def __post_init__(self) -> None:
        self.vertices = [v.copy() if isinstance(v, Vertex) else Vertex(list(v)) for v in self.vertices]
        dim = len(self.vertices) - 1
        if dim not in _SUPPORTED_DIMS:
            raise ValueError(f"a simplex needs 3 (2D) or 4 (3D) vertices, got {len(self.vertices)}")
        if any(len(v) != dim for v in self.vertices):
            raise ValueError(f"every vertex of a {dim}D simplex must have {dim} coordinates")

    @classmethod
    def from_points(cls, points: Sequence[Sequence[float]]) -> "Simplex":
        """Build a simplex from its vertex coordinates."""
        return cls([Vertex(list(p)) for p in points])

    @property
    def dim(self) -> int:
        return len(self.vertices) - 1

    def __getitem__(self, i: int) -> Vertex:
        return self.vertices[i]

    def __setitem__(self, i: int, vertex: Vertex) -> None:
        self.vertices[i] = vertex.copy()

    def copy(self) -> "Simplex":
        return Simplex([v.copy() for v in self.vertices], self.vol)

    def volume(self) -> float:
        """Area (2D) or volume (3D) of the simplex."""
        origin = self.vertices[0].coords
        d = [[a - b for a, b in zip(v.coords, origin)] for v in self.vertices[1:]]
        if self.dim == 2:
            return 0.5 * abs(d[0][0] * d[1][1] - d[0][1] * d[1][0])
        det = (
            d[0][0] * d[1][1] * d[2][2]
            + d[0][1] * d[1][2] * d[2][0]
            + d[0][2] * d[1][0] * d[2][1]
            - d[0][2] * d[1][1] * d[2][0]
            - d[0][0] * d[1][2] * d[2][1]
            - d[0][1] * d[1][0] * d[2][2]
        )
        return abs(det) / 6.0

    def mass_center(self) -> Vertex:
        """The centre of mass of the simplex."""
        count = len(self.vertices)
        return Vertex([sum(axis) / count for axis in zip(*(v.coords for v in self.vertices))])


class VolumeSplit:
    """Distributes the volume of simplices over the cells of a regular grid."""

    def __init__(self, start: Sequence[float], grid: Sequence[int], dx: Sequence[float]) -> None:
        if not len(start) == len(grid) == len(dx):
            raise ValueError("'start', 'grid' and 'dx' must have the same number of entries")
        if len(start) not in _SUPPORTED_DIMS:
            raise ValueError(f"only 2D and 3D grids are supported, got {len(start)} dimensions")
        if any(d <= 0 for d in dx):
            raise ValueError("the grid spacing must be positive along every axis")
        self.dim = len(start)
        self.start = [float(s) for s in start]
        self.grid = [int(g) for g in grid]
        self.dx = [float(d) for d in dx]
        self.tol = COORD_TOL
        self.tol_volume = VOLUME_TOL
        self.cell_volume = prod(self.dx)
        if self.dim == 2:
            self.pairs: List[Tuple[int, int]] = [(0, 1), (1, 2), (2, 0)]
        else:
            self.pairs = list(combinations(range(self.dim + 1), 2))
        self.current_start = list(self.start)
        self.new_grid = [0] * self.dim
        self._results: List[List[float]] = []

    def sort_pairs(self, simplex: Simplex) -> List[Tuple[int, int]]:
        """The simplex edges ordered by decreasing length; equal edges keep their order."""

        def squared_length(pair: Tuple[int, int]) -> float:
            i1, i2 = pair
            return sum((a - b) ** 2 for a, b in zip(simplex[i1].coords, simplex[i2].coords))

        return sorted(self.pairs, key=squared_length, reverse=True)

    def main_grid_index(self, x: float, axis: int) -> int:
        """Index of the main grid cell that holds coordinate ``x`` along ``axis``."""
        temp = (x - self.start[axis]) / self.dx[axis]
        return int(temp) if temp >= 0.0 else int(temp) - 1

    def find_bounding_grid(self, simplex: Simplex) -> List[Optional[int]]:
        """Set up the smallest grid enclosing ``simplex``.

        Returns, for every cell of that small grid, the flat index of the
        matching main grid cell, or None where it lies outside the main grid.
        The simplex vertices are rewritten in place in small grid cell units.
        """
        per_axis = [[self.main_grid_index(v[j], j) for v in simplex.vertices] for j in range(self.dim)]
        n_min = [min(values) for values in per_axis]
        n_max = [max(values) + 1 for values in per_axis]

        self.current_start = [s + n * d for s, n, d in zip(self.start, n_min, self.dx)]
        self.new_grid = [hi - lo for lo, hi in zip(n_min, n_max)]

        indices: List[Optional[int]] = []
        for cell in product(*(range(lo, hi) for lo, hi in zip(n_min, n_max))):
            inside = all(0 <= c < g for c, g in zip(cell, self.grid))
            indices.append(_flat_index(cell, self.grid) if inside else None)

        for vertex in simplex.vertices:
            for j, (s, d) in enumerate(zip(self.current_start, self.dx)):
                vertex[j] = (vertex[j] - s) / d
                vertex.update_n_min_max(j, vertex[j], self.tol)
        return indices

    def find_intersection(self, simplex: Simplex) -> Tuple[List[Optional[int]], List[List[float]]]:
        """Split ``simplex`` over the grid cells it overlaps.

        Returns the main grid indices of the small enclosing grid (see
        ``find_bounding_grid``) and, for each of its cells, the list
        ``[m_0, ..., m_{dim-1}, V]`` with ``V`` the overlap volume and ``m_i``
        the overlap's first moment along axis ``i``. The input is not modified.
        """
        if simplex.dim != self.dim:
            raise ValueError(f"expected a {self.dim}D simplex, got a {simplex.dim}D one")
        work = simplex.copy()
        indices = self.find_bounding_grid(work)
        self._results = [[0.0] * (self.dim + 1) for _ in indices]

        vol = work.volume()
        tol = VOLUME_TOL if vol > 1.0 else VOLUME_TOL * vol
        self.tol_volume = max(tol, MIN_VOLUME_TOL)
        self._split_all(work, vol)
        return indices, self._results

    def _small_grid_index(self, cell: Sequence[int]) -> Optional[int]:
        if any(c < 0 or c >= n for c, n in zip(cell, self.new_grid)):
            return None
        return _flat_index(cell, self.new_grid)

    def _contribute(self, simplex: Simplex, vol: float) -> None:
        cm = simplex.mass_center()
        index = self._small_grid_index([int(c) for c in cm.coords])
        if index is None:
            return
        volume = vol * self.cell_volume
        entry = self._results[index]
        entry[self.dim] += volume
        for i, (c, d, s) in enumerate(zip(cm.coords, self.dx, self.current_start)):
            entry[i] += (c * d + s) * volume

    def _cut(self, simplex: Simplex) -> Optional[Simplex]:
        """Cut ``simplex`` along the first grid wall crossed by one of its edges.

        ``simplex`` keeps one part and the other part is returned; None is
        returned when no edge crosses a wall.
        """
        for i1, i2 in self.sort_pairs(simplex):
            a, b = simplex[i1], simplex[i2]
            for j in range(self.dim):
                a_above = a.n_min[j] > b.n_max[j]
                if not (a_above or a.n_max[j] < b.n_min[j]):
                    continue
                n_cut = b.n_max[j] if a_above else a.n_max[j]
                delta = a[j] - b[j]

                point = Vertex.zero(self.dim)
                point[j] = float(n_cut + 1)
                point.n_min[j] = n_cut
                point.n_max[j] = n_cut + 1
                others = [(j + 1) % self.dim] if self.dim == 2 else [(j + 1) % self.dim, (j + 2) % self.dim]
                for k in others:
                    slope = (a[k] - b[k]) / delta
                    point[k] = slope * point[j] + (a[k] - slope * a[j])
                    point.update_n_min_max(k, point[k], self.tol)

                piece = simplex.copy()
                piece[i1] = point
                piece.vol = piece.volume()
                simplex[i2] = point
                simplex.vol -= piece.vol
                return piece
        return None

    def _split_all(self, simplex: Simplex, vol: float) -> None:
        first = simplex.copy()
        first.vol = vol
        pending = deque([first])
        while pending:
            current = pending[0]
            piece = self._cut(current)
            if piece is None:
                self._contribute(current, current.vol)
                pending.popleft()
                continue
            finished = current.vol < self.tol_volume
            if finished:
                self._contribute(current, current.vol)
            if piece.vol < self.tol_volume:
                self._contribute(piece, piece.vol)
            else:
                pending.append(piece)
            if finished:
                pending.popleft()