import math

import pytest

from dtfegrid.cli import main, parse_options
from dtfegrid.options import OptionsError
from dtfegrid.particles import NO_DIM

FILES = ["in.dat", "out"]


def parse(*args, **kwargs):
    kwargs.setdefault("show_options", False)
    return parse_options(FILES + list(args), **kwargs)


def test_file_names_and_single_grid_value():
    opts = parse("-g", "64")
    assert opts.input_filename == "in.dat"
    assert opts.output_filename == "out"
    assert opts.grid_size == [64] * NO_DIM


def test_default_field_is_averaged_density():
    opts = parse("-g", "64")
    assert opts.a_field.density is True
    assert opts.u_field.selected() is False


def test_grid_with_wrong_number_of_values():
    with pytest.raises(OptionsError):
        parse("-g", "16", "32")


def test_grid_zero_rejected():
    with pytest.raises(OptionsError):
        parse("-g", "0")


def test_box_sets_coordinates():
    opts = parse("--box", "0", "1", "0.5", "1.5", "0", "10")
    assert opts.box_coordinates.coords == [0.0, 1.0, 0.5, 1.5, 0.0, 10.0]
    assert opts.user_given_box_coordinates is True


def test_box_wrong_order_and_count():
    with pytest.raises(OptionsError):
        parse("--box", "1", "0", "0", "1", "0", "1")
    with pytest.raises(OptionsError):
        parse("--box", "0", "1")


def test_input_bit_flags():
    opts = parse("-i", "105", "7", "14")
    assert opts.input_file_type == 105
    assert opts.read_particle_data[:4] == [1, 1, 1, 0]
    assert opts.read_particle_species[:5] == [0, 1, 1, 1, 0]


def test_field_choices():
    opts = parse("-f", "velocity", "density_a", "velocityStd_a")
    assert opts.u_field.velocity is True
    assert opts.a_field.density is True
    assert opts.a_field.velocity_std is True
    assert opts.u_field.density is False


def test_unknown_field():
    with pytest.raises(OptionsError):
        parse("-f", "pressure")


def test_conflicting_methods():
    with pytest.raises(OptionsError):
        parse("--NGP", "--CIC")


def test_part_no_requires_partition():
    with pytest.raises(OptionsError):
        parse("--partNo", "1")


def test_partition_options():
    assert parse("--partition", "1").partition_on is False
    opts = parse("--partition", "2", "--partNo", "3")
    assert opts.partition_on is True
    assert opts.partition == [2] * NO_DIM
    assert opts.part_no == 3
    with pytest.raises(OptionsError):
        parse("--partition", "2", "--partNo", "8")


def test_padding_options():
    assert parse("--padding", "3").padding_particles == 3.0
    opts = parse("--padding", "0.1", "0.2", "0.1", "0.1", "0.3", "0.5")
    assert opts.padding_length.coords == [0.1, 0.2, 0.1, 0.1, 0.3, 0.5]
    assert opts.padding_mpc_on is False
    with pytest.raises(OptionsError):
        parse("--padding", "0.1", "0.2")


def test_method_sample_defaults():
    assert parse("-m", "2").no_points == 20
    assert parse("-m", "3").no_points == 27
    assert parse().no_points == 100
    with pytest.raises(OptionsError):
        parse("-m", "4")


def test_seed_is_kept():
    assert parse("--seed", "12345").random_seed == 12345


def test_redshift_space_is_normalised():
    opts = parse("--redshiftSpace", "3", "0", "4")
    assert opts.transform_to_redshift_space_on is True
    assert math.isclose(sum(d * d for d in opts.transform_to_redshift_space), 1.0)
    assert opts.transform_to_redshift_space[1] == 0.0


def test_redshift_cone_needs_origin():
    with pytest.raises(OptionsError):
        parse("--redshiftCone", "1", "10", "0", "90", "0", "360")
    opts = parse("--redshiftCone", "1", "10", "0", "90", "0", "180", "--origin", "0", "0", "0")
    assert opts.redshift_cone_on is True
    assert opts.origin_position == [0.0, 0.0, 0.0]


def test_cic_moves_fields_and_drops_gradient():
    opts = parse("--CIC", "-f", "density", "gradient")
    assert opts.dtfe is False
    assert opts.u_field.selected() is False
    assert opts.a_field.density is True
    assert opts.a_field.velocity_gradient is False


def test_cic_with_only_gradient_has_nothing_to_do():
    with pytest.raises(OptionsError):
        parse("--CIC", "-f", "gradient")


def test_sph_keeps_scalar():
    opts = parse("--SPH", "40", "-f", "scalar_a")
    assert opts.sph is True
    assert opts.sph_neighbors == 40
    assert opts.a_field.scalar is True


def test_missing_output_file():
    with pytest.raises(OptionsError):
        parse_options(["in.dat"], show_options=False)
    opts = parse_options(["-g", "8"], get_file_names=False, show_options=False)
    assert opts.input_filename == ""


def test_help_exits(capsys):
    with pytest.raises(SystemExit) as info:
        parse_options(["--help"])
    assert info.value.code == 0
    assert "--full_help" in capsys.readouterr().out


def test_config_file(tmp_path):
    config = tmp_path / "run.cfg"
    config.write_text("grid = 32  # grid\nperiodic\ninputFile = data.bin\noutputFile = result\n")
    opts = parse_options(["-c", str(config)], show_options=False)
    assert opts.grid_size == [32] * NO_DIM
    assert opts.periodic is True
    assert opts.input_filename == "data.bin"
    assert opts.output_filename == "result"


def test_command_line_wins_over_config(tmp_path):
    config = tmp_path / "run.cfg"
    config.write_text("grid = 32\nmethod = 2\n")
    opts = parse("-g", "16", "-c", str(config))
    assert opts.grid_size == [16] * NO_DIM
    assert opts.method == 2


def test_program_options_recorded():
    opts = parse("-g", "8")
    assert opts.program_options.startswith("dtfegrid in.dat out -g 8")


def test_main_success_and_failure(capsys):
    assert main(FILES + ["-g", "8"]) == 0
    assert "RUNNING:" in capsys.readouterr().out
    assert main(FILES + ["-g", "8", "8"]) == 1
    assert "~~~ERROR~~~" in capsys.readouterr().err