import pytest

from dtfegrid.options import OptionsError
from dtfegrid.parser import build_parser, full_help, read_config_file, short_help


@pytest.mark.parametrize("full", [True, False])
def test_parse_main_options(full):
    args = build_parser(full).parse_args(
        ["in.dat", "out", "-g", "256", "128", "64", "--box", "0", "1", "-2", "2", "0", "10", "-p"]
    )
    assert args.input_file == "in.dat"
    assert args.output_file == "out"
    assert args.grid == [256, 128, 64]
    assert args.box == [0.0, 1.0, -2.0, 2.0, 0.0, 10.0]
    assert args.periodic is True


def test_defaults():
    args = build_parser(True).parse_args([])
    assert args.method == 1
    assert args.verbose == 3
    assert args.grid is None
    assert args.input_file is None
    assert args.ngp is False
    assert args.field is None


def test_interpolation_flags_and_values():
    args = build_parser(True).parse_args(
        ["--NGP", "--SPH", "32", "--MpcUnit", "1", "--field", "density", "velocity_a", "-s", "20", "--seed", "5"]
    )
    assert args.ngp is True
    assert args.cic is False
    assert args.sph == 32
    assert args.mpc_unit == 1.0
    assert args.field == ["density", "velocity_a"]
    assert args.samples == 20
    assert args.seed == 5


def test_hidden_file_options():
    args = build_parser(True).parse_args(["--inputFile", "a.dat", "--outputFile", "b"])
    assert args.input_file_option == "a.dat"
    assert args.output_file_option == "b"
    assert args.input_file is None


def test_negative_grid_rejected():
    with pytest.raises(OptionsError):
        build_parser(True).parse_args(["-g", "-5"])


def test_unknown_option_rejected():
    with pytest.raises(OptionsError):
        build_parser(True).parse_args(["--nonsense"])


def test_bad_integer_rejected():
    with pytest.raises(OptionsError):
        build_parser(True).parse_args(["--method", "two"])


def test_read_config_file(tmp_path):
    path = tmp_path / "run.cfg"
    path.write_text(
        "# a comment line\n"
        "grid = 256\n"
        "periodic\n"
        "field = density velocity_a\n"
        "field = shear\n"
        "seed=7 # trailing comment\n"
        "inputFile = data file.dat\n"
    )
    tokens = read_config_file(path)
    assert tokens == [
        "--grid", "256",
        "--periodic",
        "--field", "density", "velocity_a", "shear",
        "--seed", "7",
        "--inputFile", "data file.dat",
    ]
    args = build_parser(True).parse_args(tokens)
    assert args.grid == [256]
    assert args.periodic is True
    assert args.field == ["density", "velocity_a", "shear"]
    assert args.input_file_option == "data file.dat"


def test_config_unknown_option(tmp_path):
    path = tmp_path / "run.cfg"
    path.write_text("bogus = 1\n")
    with pytest.raises(OptionsError):
        read_config_file(path)


def test_config_section_prefixes_names(tmp_path):
    path = tmp_path / "run.cfg"
    path.write_text("[extra]\ngrid = 10\n")
    with pytest.raises(OptionsError):
        read_config_file(path)


def test_config_repeated_single_value(tmp_path):
    path = tmp_path / "run.cfg"
    path.write_text("seed = 1\nseed = 2\n")
    with pytest.raises(OptionsError):
        read_config_file(path)


def test_config_flag_with_value(tmp_path):
    path = tmp_path / "run.cfg"
    path.write_text("periodic = yes\n")
    with pytest.raises(OptionsError):
        read_config_file(path)


def test_config_missing_value(tmp_path):
    path = tmp_path / "run.cfg"
    path.write_text("grid =\n")
    with pytest.raises(OptionsError):
        read_config_file(path)


def test_config_missing_file(tmp_path):
    with pytest.raises(OSError):
        read_config_file(tmp_path / "absent.cfg")


def test_short_help():
    text = short_help("myprog")
    assert "myprog" in text
    assert text.endswith("Use '--full_help' for a more detailed help information.\n")
    assert "--redshiftSpace" in text
    assert "velocityStd_a" not in text
    assert "inputFile" not in text


def test_full_help():
    text = full_help("myprog")
    assert "myprog" in text
    assert "velocityStd_a" in text
    assert "10% of the data set" in text
    assert "Use '--full_help' for a more detailed" not in text
    assert "Redshift cone options" in text