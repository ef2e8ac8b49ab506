"""Reading, checking and reporting the program options of a grid interpolation run."""

from __future__ import annotations

import argparse
import logging
import random
import sys
from math import prod, sqrt
from typing import List, Optional, Sequence

from .fields import Field
from .options import OptionsError, UserOptions, _interval_check, _lower_bound_check
from .parser import DEFAULT_PROG, build_parser, full_help, read_config_file, short_help
from .particles import NO_DIM

logger = logging.getLogger(__name__)

_U_FIELDS = {
    "triangulation": "triangulation",
    "density": "density",
    "velocity": "velocity",
    "gradient": "velocity_gradient",
    "divergence": "velocity_divergence",
    "shear": "velocity_shear",
    "vorticity": "velocity_vorticity",
    "scalar": "scalar",
    "scalarGradient": "scalar_gradient",
}

_A_FIELDS = {
    "density_a": "density",
    "velocity_a": "velocity",
    "gradient_a": "velocity_gradient",
    "divergence_a": "velocity_divergence",
    "shear_a": "velocity_shear",
    "vorticity_a": "velocity_vorticity",
    "velocityStd_a": "velocity_std",
    "scalar_a": "scalar",
    "scalarGradient_a": "scalar_gradient",
}

_TRANSFERRED_FIELDS = (
    "density",
    "velocity",
    "velocity_gradient",
    "velocity_divergence",
    "velocity_shear",
    "velocity_vorticity",
    "scalar",
    "scalar_gradient",
)

_CONFLICTS = (
    (("sph", "SPH"), ("tsc", "TSC")),
    (("sph", "SPH"), ("cic", "CIC")),
    (("cic", "CIC"), ("tsc", "TSC")),
    (("ngp", "NGP"), ("cic", "CIC")),
    (("ngp", "NGP"), ("tsc", "TSC")),
    (("ngp", "NGP"), ("sph", "SPH")),
    (("region", "region"), ("region_mpc", "regionMpc")),
    (("padding", "padding"), ("padding_mpc", "paddingMpc")),
)

_DEPENDENCIES = (
    (("part_no", "partNo"), ("partition", "partition")),
    (("redshift_cone", "redshiftCone"), ("origin", "origin")),
)


def _given(ns: argparse.Namespace, dest: str) -> bool:
    value = getattr(ns, dest)
    return bool(value) if isinstance(value, bool) else value is not None


def _parse_tokens(tokens: Sequence[str]) -> argparse.Namespace:
    parser = build_parser(True)
    # defaults are applied only after merging with the configuration file
    parser.set_defaults(method=None, verbose=None)
    return parser.parse_args(list(tokens))


def _merge(primary: argparse.Namespace, secondary: argparse.Namespace) -> None:
    """Fill the options missing in ``primary`` with those of ``secondary``."""
    for dest, value in vars(primary).items():
        other = getattr(secondary, dest, None)
        if isinstance(value, bool):
            setattr(primary, dest, value or bool(other))
        elif value is None:
            setattr(primary, dest, other)


def _read_namespace(argv: List[str]) -> argparse.Namespace:
    ns = _parse_tokens(argv)
    if ns.config is not None:
        try:
            tokens = read_config_file(ns.config)
        except OSError:
            logger.error("Can not open the configuration file '%s'.", ns.config)
        else:
            _merge(ns, _parse_tokens(tokens))
    if ns.input_file is None:
        ns.input_file = ns.input_file_option
    if ns.output_file is None:
        ns.output_file = ns.output_file_option
    if ns.method is None:
        ns.method = 1
    if ns.verbose is None:
        ns.verbose = 3
    return ns


def _check_relations(ns: argparse.Namespace) -> None:
    for (d1, n1), (d2, n2) in _CONFLICTS:
        if _given(ns, d1) and _given(ns, d2):
            raise OptionsError(f"Conflicting options '{n1}' and '{n2}'.")
    for (d1, n1), (d2, n2) in _DEPENDENCIES:
        if _given(ns, d1) and not _given(ns, d2):
            raise OptionsError(f"Option '{n1}' requires option '{n2}'.")


def _bits(value: int, count: int) -> List[int]:
    return [(value >> i) & 1 for i in range(count)]


def _apply_main_options(ns: argparse.Namespace, opts: UserOptions) -> None:
    if ns.grid is not None:
        grid = list(ns.grid)
        if len(grid) == 1:
            grid *= NO_DIM
        elif len(grid) != NO_DIM:
            raise OptionsError(
                f"You can only insert 1 or {NO_DIM} values for the '-g [ --grid ]' option "
                "(e.g. '-g 256' or '-g 128 256 256')."
            )
        for n in grid:
            _lower_bound_check(n, 1, "the values of option '-g [ --grid ]'")
        opts.grid_size = grid
    if ns.box is not None:
        if len(ns.box) != 2 * NO_DIM:
            raise OptionsError(f"You need to specify {2 * NO_DIM} arguments with the option '--box'.")
        opts.box_coordinates.coords = [float(v) for v in ns.box]
        for axis in range(NO_DIM):
            if ns.box[2 * axis + 1] < ns.box[2 * axis]:
                raise OptionsError(
                    "The right coordinate of the box encompasing the data along axis "
                    f"{axis + 1} (1=x, 2=y, 3=z) must be larger than the left coordinate of the box."
                )
        opts.user_given_box_coordinates = True
    if ns.input is not None:
        opts.input_file_type = ns.input[0]
        if len(ns.input) >= 2:
            opts.read_particle_data = _bits(ns.input[1], len(opts.read_particle_data))
        if len(ns.input) >= 3:
            opts.read_particle_species = _bits(ns.input[2], len(opts.read_particle_species))
    if ns.output is not None:
        opts.output_file_type = ns.output
    opts.periodic = ns.periodic


def _apply_fields(ns: argparse.Namespace, opts: UserOptions) -> None:
    if ns.field is None:
        opts.a_field.density = True
        return
    for choice in ns.field:
        if choice in _U_FIELDS:
            setattr(opts.u_field, _U_FIELDS[choice], True)
        elif choice in _A_FIELDS:
            setattr(opts.a_field, _A_FIELDS[choice], True)
        else:
            raise OptionsError(f"Unknown value '{choice}' for the option '--field'.")


def _apply_region(ns: argparse.Namespace, opts: UserOptions) -> None:
    values = ns.region_mpc if ns.region_mpc is not None else ns.region
    if values is None:
        return
    opts.region_mpc_on = ns.region_mpc is not None
    opts.region_on = True
    if len(values) != 2 * NO_DIM:
        raise OptionsError(
            f"You have to insert {2 * NO_DIM} values for the '--region' or '--regionMpc' option "
            "(e.g. '--region 0.4 0.6 0.3 0.7 0.45 0.55')."
        )
    opts.region.coords = [float(v) for v in values]
    for axis in range(NO_DIM):
        if values[2 * axis + 1] < values[2 * axis]:
            raise OptionsError(
                f"The right coordinate of the region of interest along axis {axis + 1} (1=x, 2=y, 3=z) "
                "must be larger than the left coordinate."
            )


def _apply_partition(ns: argparse.Namespace, opts: UserOptions) -> None:
    if ns.partition is None:
        return
    opts.partition_on = True
    partition = list(ns.partition)
    if len(partition) == 1:
        partition *= NO_DIM
    elif len(partition) != NO_DIM:
        raise OptionsError(
            f"You can only insert 1 or {NO_DIM} values for the '--partition' option "
            "(e.g. '--partition 3' or '--partition 2 3 3')."
        )
    for n in partition:
        _lower_bound_check(n, 1, "the values for the option '--partition'")
    opts.partition = partition
    total = prod(partition)
    if ns.part_no is not None:
        opts.part_no = ns.part_no
        _interval_check(opts.part_no, 0, total - 1, "'--partNo' program option")
    if total == 1:
        opts.partition_on = False


def _apply_padding(ns: argparse.Namespace, opts: UserOptions) -> None:
    if ns.padding_mpc is None and ns.padding is None:
        return
    opts.padding_on = True
    if ns.padding_mpc is not None:
        opts.padding_mpc_on = True
        count = len(ns.padding_mpc)
        opts.padding_length.coords = [float(v) for v in ns.padding_mpc]
    elif len(ns.padding) == 1:
        opts.padding_particles = float(ns.padding[0])
        _lower_bound_check(opts.padding_particles, 0.0, "'--padding' program option")
        count = 2 * NO_DIM
    else:
        count = len(ns.padding)
        opts.padding_length.coords = [float(v) for v in ns.padding]
    if count != 2 * NO_DIM:
        raise OptionsError(
            f"You have to insert 1 or {2 * NO_DIM} values for the '--padding' or '--paddingMpc' option "
            "(e.g. '--padding 0.1 0.2 0.1 0.1 0.3 0.5')."
        )


def _apply_averaging(ns: argparse.Namespace, opts: UserOptions) -> None:
    opts.method = ns.method
    _interval_check(opts.method, 1, 3, "'--method' (only the volume averaging methods 1 to 3 exist)")
    if ns.samples is not None:
        opts.no_points_on = True
        opts.no_points = ns.samples
        _lower_bound_check(opts.no_points, 1, "value of the '-s' ['--samples'] option")
    elif opts.method == 2:
        opts.no_points = 20
    elif opts.method == 3:
        opts.no_points = 27
    if ns.density0 is not None:
        opts.average_density = ns.density0
        _lower_bound_check(opts.average_density, 0.0, "the value of '--density0'")
    if ns.seed is not None:
        opts.random_seed = ns.seed
    else:
        opts.random_seed = random.randrange(2**31)


def _apply_redshift_cone(ns: argparse.Namespace, opts: UserOptions) -> None:
    if ns.redshift_cone is not None:
        opts.redshift_cone_on = True
        cone = ns.redshift_cone
        if len(cone) != 2 * NO_DIM:
            names = (
                "(r_min, r_max, psi_min, psi_max)"
                if NO_DIM == 2
                else "(r_min, r_max, theta_min, theta_max, psi_min, psi_max)"
            )
            raise OptionsError(
                f"The '--redshiftCone' option must be followed by {2 * NO_DIM} values which give the "
                f"extension {names} for the spherical coordinates region used to interpolate to grid."
            )
        opts.redshift_cone.coords = [float(v) for v in cone]
        for axis in range(NO_DIM):
            if cone[2 * axis] >= cone[2 * axis + 1]:
                raise OptionsError(
                    "When inserting the lower and upper values for option '--redshiftCone'. A lower value "
                    "is higher than an upper value. If error was due to an angular interval value, increase "
                    "the upper bound by 360 degrees."
                )
        if NO_DIM == 3:
            _interval_check(cone[2], 0.0, 180.0, "3rd value of option '--redshiftCone'")
            _interval_check(cone[3], 0.0, 180.0, "4th value of option '--redshiftCone'")
        if cone[2 * (NO_DIM - 1) + 1] - cone[2 * (NO_DIM - 1)] >= 360.0:
            raise OptionsError("The 'psi' angle interval can strech at most 360 degrees.")
    if ns.origin is not None:
        if len(ns.origin) != NO_DIM:
            raise OptionsError(f"The option '--origin' must be followed by {NO_DIM} values.")
        opts.origin_position = [float(v) for v in ns.origin]


def _apply_additional(ns: argparse.Namespace, opts: UserOptions) -> None:
    opts.ngp, opts.cic, opts.tsc = ns.ngp, ns.cic, ns.tsc
    if ns.sph is not None:
        opts.sph = True
        opts.sph_neighbors = ns.sph
    if opts.ngp or opts.cic or opts.tsc or opts.sph:
        opts.dtfe = False
    if ns.mpc_unit is not None:
        opts.mpc_value = ns.mpc_unit
        _lower_bound_check(opts.mpc_value, 0.0, "value of option '--MpcUnit'")
    opts.extensive = ns.extensive
    opts.verbose_level = ns.verbose
    _interval_check(opts.verbose_level, 0, 3, "value of option '--verbose'")
    if ns.random_sample is not None:
        opts.random_sample = ns.random_sample
        _interval_check(opts.random_sample, 0.0, 1.0, "value of option '--randomSample'")
    if ns.poisson is not None:
        opts.poisson = ns.poisson
        _lower_bound_check(opts.poisson, 1, "value of option '--poisson'")
    if ns.redshift_space is not None:
        direction = [float(v) for v in ns.redshift_space]
        if len(direction) != NO_DIM:
            names = "(d1,d2)" if NO_DIM == 2 else "(d1,d2,d3)"
            raise OptionsError(
                f"The '--redshiftSpace' option must be followed by {NO_DIM} values which give the direction "
                f"{names} of the vector used to transform from position-space to redshift-space."
            )
        length = sqrt(sum(d * d for d in direction))
        if length == 0.0:
            raise OptionsError("The direction given to the '--redshiftSpace' option has zero length.")
        opts.transform_to_redshift_space_on = True
        opts.transform_to_redshift_space = [d / length for d in direction]
    else:
        opts.transform_to_redshift_space_on = False
        opts.transform_to_redshift_space = [0.0] * NO_DIM
    if ns.options is not None:
        opts.additional_options = list(ns.options)


def _restrict_to_grid_methods(opts: UserOptions) -> None:
    """Only averaged fields exist for NGP, CIC, TSC and SPH, and not all of them."""
    if not (opts.ngp or opts.cic or opts.tsc or opts.sph):
        return
    for name in _TRANSFERRED_FIELDS:
        if getattr(opts.u_field, name):
            setattr(opts.a_field, name, True)
    opts.u_field = Field()
    if opts.a_field.velocity_gradient or opts.a_field.selected_velocity_derivatives():
        logger.warning(
            "The NGP, CIC, TSC or SPH grid interpolation methods do not have implemented a method for "
            "computing the velocity gradient. The velocity gradient will not be computed!"
        )
        opts.a_field.velocity_gradient = False
        opts.a_field.deselect_velocity_derivatives()
    if opts.a_field.scalar_gradient:
        logger.warning(
            "The NGP, CIC, TSC or SPH grid interpolation methods do not have implemented a method for "
            "computing the scalar gradient. The scalar gradient will not be computed!"
        )
        opts.a_field.scalar_gradient = False
    if (opts.ngp or opts.cic or opts.tsc) and opts.a_field.scalar:
        logger.warning(
            "The NGP, CIC and TSC grid interpolation methods do not have implemented a method for computing "
            "the scalar fields on the grid. The scalar field cannot be computed!"
        )
        opts.a_field.scalar = False


def parse_options(
    argv: Optional[Sequence[str]] = None,
    get_file_names: bool = True,
    show_options: bool = True,
) -> UserOptions:
    """Read and check the program options given on the command line (and a configuration file).

    Prints the requested help text and raises SystemExit(0) for ``--help`` and
    ``--full_help``; raises OptionsError for invalid options.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    ns = _read_namespace(args)
    wants_help = ns.help or ns.full_help

    if get_file_names and not wants_help:
        missing = [
            what
            for what, value in (("input", ns.input_file), ("output", ns.output_file))
            if value is None
        ]
        if missing:
            raise OptionsError(" ".join(f"No {what} file detected." for what in missing))
    if ns.help:
        print(short_help(DEFAULT_PROG))
        raise SystemExit(0)
    if ns.full_help:
        print(full_help(DEFAULT_PROG))
        raise SystemExit(0)

    _check_relations(ns)

    opts = UserOptions()
    opts.input_filename = ns.input_file or ""
    opts.output_filename = ns.output_file or ""
    opts.config_filename = ns.config or ""
    _apply_main_options(ns, opts)
    _apply_fields(ns, opts)
    _apply_region(ns, opts)
    _apply_partition(ns, opts)
    _apply_padding(ns, opts)
    _apply_averaging(ns, opts)
    _apply_redshift_cone(ns, opts)
    _apply_additional(ns, opts)

    opts.program_options = "".join(f"{token} " for token in [DEFAULT_PROG, *args])
    opts.test_padded_boundaries = False
    _restrict_to_grid_methods(opts)

    if not (
        opts.u_field.selected()
        or opts.u_field.triangulation
        or opts.a_field.selected()
        or opts.a_field.triangulation
    ):
        raise OptionsError(
            "No valid field interpolation quantities were selected for the computation. The program cannot "
            "continue since it does not compute anything."
        )

    if show_options and opts.verbose_level > 0:
        print(opts.describe())
    return opts


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Check the program options and report the settings that will be used."""
    try:
        parse_options(argv)
    except OptionsError as exc:
        print(f"~~~ERROR~~~ {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())