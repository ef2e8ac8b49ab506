import pytest

from dtfegrid.fields import Field
from dtfegrid.particles import NO_DIM, NO_VEL_COMP
from dtfegrid.quantities import NO_GRAD_COMP, Quantities


def test_empty_size_is_zero():
    assert Quantities().size() == 0


def test_reserve_memory_only_selected_fields():
    q = Quantities()
    q.reserve_memory([2, 3, 4], Field(density=True, velocity=True))
    assert len(q.density) == 2 * 3 * 4
    assert len(q.velocity) == 2 * 3 * 4
    assert q.velocity_gradient == []
    assert all(d == 0.0 for d in q.density)
    assert all(v == [0.0] * NO_VEL_COMP for v in q.velocity)
    assert q.size() == 24


def test_reserve_memory_vectors_are_independent():
    q = Quantities()
    q.reserve_memory([2, 2, 2], Field(velocity_gradient=True))
    q.velocity_gradient[0][0] = 5.0
    assert q.velocity_gradient[1][0] == 0.0
    assert len(q.velocity_gradient[0]) == NO_GRAD_COMP


def test_reserve_memory_keeps_existing_values():
    q = Quantities(density=[7.0, 8.0])
    q.reserve_memory([2, 2, 1], Field(density=True))
    assert q.density[:2] == [7.0, 8.0]
    assert len(q.density) == 4


def test_size_mismatch_raises():
    q = Quantities(density=[1.0, 2.0], velocity_std=[1.0])
    with pytest.raises(ValueError):
        q.size()


def test_copy_full_subgrid_is_identity():
    grid = [2, 3, 2]
    n = 2 * 3 * 2
    sub = Quantities(density=[float(i) for i in range(n)],
                     velocity=[[float(i)] * NO_VEL_COMP for i in range(n)])
    main = Quantities()
    field = Field(density=True, velocity=True)
    main.reserve_memory(grid, field)
    main.copy_from_subgrid(sub, field, grid, grid, [0] * NO_DIM)
    assert main.density == sub.density
    assert main.velocity == sub.velocity
    assert main.velocity[0] is not sub.velocity[0]


def test_copy_with_offset_places_block():
    main_grid = [4, 4, 4]
    subgrid = [2, 2, 2]
    values = [float(i + 1) for i in range(8)]
    sub = Quantities(density=values)
    main = Quantities()
    field = Field(density=True)
    main.reserve_memory(main_grid, field)
    main.copy_from_subgrid(sub, field, main_grid, subgrid, [1, 2, 0])
    assert sum(main.density) == sum(values)
    assert sorted(v for v in main.density if v) == values
    assert main.density[24] == 1.0
    assert main.density[45] == 8.0


def test_two_subgrids_tile_main_grid():
    main_grid = [2, 2, 2]
    subgrid = [1, 2, 2]
    field = Field(velocity_std=True)
    main = Quantities()
    main.reserve_memory(main_grid, field)
    left = Quantities(velocity_std=[1.0, 2.0, 3.0, 4.0])
    right = Quantities(velocity_std=[5.0, 6.0, 7.0, 8.0])
    main.copy_from_subgrid(left, field, main_grid, subgrid, [0, 0, 0])
    main.copy_from_subgrid(right, field, main_grid, subgrid, [1, 0, 0])
    assert main.velocity_std == left.velocity_std + right.velocity_std


def test_unselected_field_not_copied():
    grid = [1, 1, 2]
    sub = Quantities(density=[3.0, 4.0], velocity_divergence=[1.0, 2.0])
    main = Quantities()
    main.reserve_memory(grid, Field(density=True, velocity_divergence=True))
    main.copy_from_subgrid(sub, Field(density=True), grid, grid, [0, 0, 0])
    assert main.density == [3.0, 4.0]
    assert main.velocity_divergence == [0.0, 0.0]


def test_copy_into_unreserved_grid_raises():
    grid = [1, 1, 2]
    sub = Quantities(density=[3.0, 4.0])
    with pytest.raises(IndexError):
        Quantities().copy_from_subgrid(sub, Field(density=True), grid, grid, [0, 0, 0])