import pytest

from dtfegrid.fields import (
    AVERAGED_FIELD_NAMES,
    FIELD_FLAGS,
    UNAVERAGED_FIELD_NAMES,
    Field,
)


def test_default_field_selects_nothing():
    field = Field()
    assert not field.selected()
    assert not field.triangulation


@pytest.mark.parametrize(
    "choice, flag",
    [
        ("density", "density"),
        ("velocity", "velocity"),
        ("gradient", "velocity_gradient"),
        ("divergence", "velocity_divergence"),
        ("shear", "velocity_shear"),
        ("vorticity", "velocity_vorticity"),
        ("scalar", "scalar"),
        ("scalarGradient", "scalar_gradient"),
        ("triangulation", "triangulation"),
    ],
)
def test_unaveraged_choices(choice, flag):
    field = Field()
    assert field.update_choices(choice, UNAVERAGED_FIELD_NAMES) is True
    assert getattr(field, flag) is True
    others = [f for f in FIELD_FLAGS if f != flag]
    assert not any(getattr(field, f) for f in others)


@pytest.mark.parametrize(
    "choice, flag",
    [
        ("density_a", "density"),
        ("velocityStd_a", "velocity_std"),
        ("scalarGradient_a", "scalar_gradient"),
    ],
)
def test_averaged_choices(choice, flag):
    field = Field()
    assert field.update_choices(choice, AVERAGED_FIELD_NAMES) is True
    assert getattr(field, flag) is True


def test_unknown_choice_returns_false():
    field = Field()
    assert field.update_choices("pressure", UNAVERAGED_FIELD_NAMES) is False
    assert field == Field()


def test_averaged_name_not_accepted_as_unaveraged():
    field = Field()
    assert field.update_choices("density_a", UNAVERAGED_FIELD_NAMES) is False


def test_wrong_number_of_names_raises():
    with pytest.raises(ValueError):
        Field().update_choices("density", ("density",))


def test_triangulation_alone_is_not_selected():
    field = Field(triangulation=True)
    assert field.selected() is False


def test_velocity_derivatives():
    field = Field(velocity_shear=True, velocity=True)
    assert field.selected_velocity_derivatives()
    field.deselect_velocity_derivatives()
    assert not field.selected_velocity_derivatives()
    assert field.velocity is True


def test_deselect_velocity_keeps_other_fields():
    field = Field(density=True, velocity=True, velocity_std=True, velocity_gradient=True)
    assert field.selected_velocity()
    field.deselect_velocity()
    assert not field.selected_velocity()
    assert field.density is True
    assert field.selected()


def test_deselect_scalar():
    field = Field(scalar=True, scalar_gradient=True)
    assert field.selected_scalar()
    field.deselect_scalar()
    assert not field.selected_scalar()
    assert not field.selected()