import pytest

from dtfegrid.particles import (
    NO_DIM,
    NO_SCALAR_COMP,
    NO_VEL_COMP,
    ParticleData,
    SamplePoint,
    VertexData,
    compare_particles,
    particle_sort_key,
    same_particle,
)


def test_particle_defaults():
    p = ParticleData()
    assert p.weight == 1.0
    assert p.density == 0.0
    assert p.velocity == [0.0] * NO_VEL_COMP
    assert p.scalar == [0.0] * NO_SCALAR_COMP
    assert p.position == [0.0] * NO_DIM


def test_particle_rejects_wrong_position_length():
    with pytest.raises(ValueError):
        ParticleData(position=[1.0, 2.0])


def test_sample_point_rejects_wrong_delta_length():
    with pytest.raises(ValueError):
        SamplePoint(position=[0.0, 0.0, 0.0], delta=[1.0])


def test_particle_copy_is_independent():
    p = ParticleData(position=[1.0, 2.0, 3.0], velocity=[4.0, 5.0, 6.0])
    q = p.copy()
    q.position[0] = 9.0
    q.velocity[1] = 7.0
    assert p.position == [1.0, 2.0, 3.0]
    assert p.velocity == [4.0, 5.0, 6.0]


def test_vertex_set_data_copies_fields():
    p = ParticleData(weight=2.5, density=3.0, velocity=[1.0, 2.0, 3.0], scalar=[7.0], position=[0.1, 0.2, 0.3])
    v = VertexData()
    v.set_data(p)
    assert v.weight == 2.5
    assert v.density == 3.0
    assert v.velocity == [1.0, 2.0, 3.0]
    assert v.my_scalar() == [7.0]
    p.velocity[0] = 100.0
    assert v.velocity[0] == 1.0


def test_vertex_dummy_flags():
    v = VertexData(density=5.0)
    assert not v.is_dummy()
    assert not v.has_dummy_neighbor()
    v.set_dummy()
    assert v.is_dummy()
    assert v.has_dummy_neighbor()
    assert v.density == 0.0


def test_vertex_dummy_neighbor_only():
    v = VertexData()
    v.set_dummy_neighbor()
    assert v.has_dummy_neighbor()
    assert not v.is_dummy()


def test_compare_particles_lexicographic():
    a = ParticleData(position=[1.0, 5.0, 5.0])
    b = ParticleData(position=[2.0, 0.0, 0.0])
    c = ParticleData(position=[1.0, 5.0, 6.0])
    assert compare_particles(a, b)
    assert not compare_particles(b, a)
    assert compare_particles(a, c)
    assert not compare_particles(a, a)


def test_sorting_with_key():
    pts = [
        ParticleData(position=[2.0, 0.0, 0.0]),
        ParticleData(position=[1.0, 1.0, 0.0]),
        ParticleData(position=[1.0, 0.0, 2.0]),
    ]
    ordered = sorted(pts, key=particle_sort_key)
    assert [p.position for p in ordered] == [[1.0, 0.0, 2.0], [1.0, 1.0, 0.0], [2.0, 0.0, 0.0]]


def test_same_particle():
    a = ParticleData(position=[1.0, 2.0, 3.0], weight=1.0)
    b = ParticleData(position=[1.0, 2.0, 3.0], weight=4.0)
    c = ParticleData(position=[1.0, 2.0, 3.5])
    assert same_particle(a, b)
    assert not same_particle(a, c)