"""Command line and configuration file syntax of the program options.

The argument parser stores each option under a snake case destination:
``grid``, ``box``, ``input``, ``output``, ``periodic``, ``field``, ``region``,
``region_mpc``, ``partition``, ``part_no``, ``padding``, ``padding_mpc``,
``method``, ``samples``, ``density0``, ``seed``, ``redshift_cone``,
``origin``, ``config``, ``ngp``, ``cic``, ``tsc``, ``sph``, ``mpc_unit``,
``extensive``, ``verbose``, ``random_sample``, ``poisson``,
``redshift_space``, ``options``, ``help`` and ``full_help``. The two
positional file names go to ``input_file`` and ``output_file``; the same
names given as ``--inputFile`` / ``--outputFile`` (which is how a
configuration file supplies them) go to ``input_file_option`` and
``output_file_option``. Options that were not given are None, except
``method`` (1) and ``verbose`` (3).
"""

from __future__ import annotations

import argparse
import textwrap
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .options import OptionsError

DEFAULT_PROG = "dtfegrid"

_DESCRIPTION = (
    "Use this program to interpolate fields on a grid using the DTFE method - there are multiple "
    "options which allow for increased flexibility of the program.\n"
    "On top of the positional file names, the user can add any of the following options:"
)
_USAGE = "%(prog)s  name_position_file  output(root)_file  'options - see below'"
_SHORT_FOOTER = "\nUse '--full_help' for a more detailed help information.\n"


def _size_t(text: str) -> int:
    try:
        value = int(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid non-negative integer value: '{text}'") from exc
    if value < 0:
        raise argparse.ArgumentTypeError(f"invalid non-negative integer value: '{text}'")
    return value


@dataclass(frozen=True)
class _Option:
    name: str
    short: Optional[str]
    dest: str
    kind: str  # "flag", "one" or "many"
    type: Optional[Callable[[str], object]]
    full_help: str
    short_help: str
    default: object = None


_FIELD_FULL = (
    "specify which field is to be interpolated to grid - e.g. '-f density'. You can specify multiple "
    "fields at a time. You can choose to output the field value at the sampling point or the volume "
    "averaged field value inside the grid cell associated to the sampling point (field names end with "
    "'_a' with 'a' standing for averaged). Available options are:\n"
    "  density = \tcompute the density at the sampling point position.\n"
    "  density_a = \tcompute the volume averaged density inside the sampling cell associated to the "
    "sampling point [DEFAULT choice if none provided]. Each of the options below have also a '*_a' "
    "version which will be left out to minimize the help messages.\n"
    "  velocity = \tcompute the velocity at the sampling point position (use 'velocity_a' to get the "
    "averaged velocity inside the sampling cell).\n"
    "  gradient = \tcompute the velocity gradient at the sampling point position (use 'gradient_a' to "
    "get the averaged velocity gradient inside the sampling cell).\n"
    "  divergence = \tcompute velocity divergence at the sampling point position (use 'divergence_a' "
    "to get the averaged velocity divergence inside the sampling cell).\n"
    "  shear = \tcompute velocity shear at the sampling point position (use 'shear_a' to get the "
    "averaged velocity shear inside the sampling cell).\n"
    "  vorticity = \tcompute velocity vorticity at the sampling point position (use 'vorticity_a' to "
    "get the averaged velocity vortivity inside the sampling cell).\n"
    "  velocityStd_a = \tcompute velocity standard deviation inside the sampling cell (NOTE: there is "
    "no 'velocityStd' of this option and this option works only with averaging method 2 '--method 2').\n"
    "  scalar = \tcompute scalar quantities at the sampling point position (use 'scalar_a' to get the "
    "averaged field components inside the sampling cell).\n"
    "  scalarGradient = \tcompute the gradient of the scalar quantities at the sampling point position "
    "(use 'scalarGradient_a' to get the averaged field gradient inside the sampling cell)."
)

_FIELD_SHORT = (
    "specify which field to interpolate to grid. Available options are:\n"
    "  density = \tdensity at the sampling point position.\n"
    "  density_a = \tvolume averaged density inside the sampling cell[DEFAULT]. Each of the options "
    "below also have a '*_a' version which is left out to minimize the help messages.\n"
    "  velocity = \tnon-averaged velocity (use 'velocity_a' to get the volume averaged value).\n"
    "  gradient = \tnon-averaged velocity gradient (use 'gradient_a' to get the volume averaged value).\n"
    "  divergence = \tnon-averaged velocity divergence (use 'divergence_a' to get the volume averaged "
    "value).\n"
    "  shear = \tnon-averaged velocity shear (use 'shear_a' to get the volume averaged value).\n"
    "  vorticity = \tnon-averaged velocity vorticity (use 'vorticity_a' to get the volume averaged "
    "value).\n"
    "  scalar = \tnon-averaged scalar quantities (use 'scalar_a' to get the volume averaged value).\n"
    "  scalarGradient = \tnon-averaged gradient of the scalar quantities (use 'scalarGradient_a' to get "
    "the volume averaged value)."
)

_GROUPS: Tuple[Tuple[str, Tuple[_Option, ...]], ...] = (
    (
        "Main options",
        (
            _Option("help", "h", "help", "flag", None,
                    "produce summary of help message. For more detailed help use the '--full_help' option.",
                    "produce this help message."),
            _Option("full_help", None, "full_help", "flag", None,
                    "produce detailed help message. For more detailed help information consult the "
                    "documentation.",
                    "produce detailed help message."),
            _Option("grid", "g", "grid", "many", _size_t,
                    "choose grid size along each direction (e.g. '-g 256' for a 256^3 grid; '-g 256 128 512' "
                    "for different gridsize along each direction).",
                    "specify grid size along each direction."),
            _Option("box", None, "box", "many", float,
                    "the coordinates of the box encompasing all the particles. It needs 6 arguments for 3D "
                    "(4 for 2D) which give 'x_left', 'x_right', 'y_left', 'y_right', etc... (where 'x_left' "
                    "is the left box coordinates along x-direction). For example '--box 0 1 0.5 1.5 0 10'.",
                    "specify the coordinates of the box encompasing all the particles."),
            _Option("input", "i", "input", "many", int,
                    "give the type of the input file (101=gadget multiple file, 102=gadget single file, "
                    "105=gadget HDF5 file, see documenation for more options). If present, a 2nd argument "
                    "gives the data to be read from file (1=positions, 2=weights, 4=masses, ..., 2^n=the n+1 "
                    "data) - e.g. to read positions, masses and velocities insert 1+2+4=7. If present, a 3rd "
                    "argument gives the particle species to be read from file (1=1st species, 2=2nd species, "
                    "..., 2^n=the n+1 species) - e.g. to read the data of species 2,3 and 4 insert 2+4+8=14.",
                    "give the type of the input file, which data to read and for which particle species. "
                    "See full help for details."),
            _Option("output", "o", "output", "one", int,
                    "give the type of the output file (101=binary file, 111=text file, see documenation for "
                    "more options).",
                    "give the type of the output file. See full help for details."),
            _Option("periodic", "p", "periodic", "flag", None,
                    "particle data is in a periodic box with box coordinates given by option '--box' or read "
                    "from input file.",
                    "specify the data is in a periodic box."),
        ),
    ),
    (
        "Field choices",
        (_Option("field", "f", "field", "many", str, _FIELD_FULL, _FIELD_SHORT),),
    ),
    (
        "Region options",
        (
            _Option("region", None, "region", "many", float,
                    "choose this option to compute the field interpolation only in a given part of the full "
                    "box. Use this option to specify the region of interest in terms of fractions of box "
                    "length (i.e. '--region 0.4 0.6 0.3 0.7 0.45 0.55' computes the density for the box that "
                    "extends from 0.4 to 0.6 of the box length along direction x, 0.3 to 0.7 along direction "
                    "y and 0.45 to 0.55 along direction z).",
                    "specify to interpolate the fields only in a region of the box given in terms of "
                    "fractions of box length."),
            _Option("regionMpc", None, "region_mpc", "many", float,
                    "choose this option to compute the field interpolation only in a given part of the box. "
                    "Specify the limits of that region in Mpc units; see previous option for additional "
                    "information.",
                    "specify to interpolate the fields only in a region given in Mpc coordinates."),
        ),
    ),
    (
        "Partition options",
        (
            _Option("partition", None, "partition", "many", _size_t,
                    "choose this option if the particle data is too large to compute the Delaunay "
                    "triangulation for the full data at once. Specify here in how many parts to split the box "
                    "along each direction (e.g. '--partition 3 3 3' splits the data in 27 chuncks).",
                    "specify in how many parts to split the box along each direction."),
            _Option("partNo", None, "part_no", "one", int,
                    "choose to compute the density only for this partition number (from 0 to 'maximum "
                    "partitions'-1). This options is usefull if you would like to compute the density for a "
                    "large particle number on several different machines at the same time - need to run the "
                    "program on each machine independently.",
                    "choose to compute the interpolation only for this partition number."),
        ),
    ),
    (
        "Padding options",
        (
            _Option("padding", None, "padding", "many", float,
                    "give the size of the padding need to make sure that the Delaunay triangulation fully "
                    "covers the region of interest. There are two ways to give the padding size:\n"
                    "  1) \t by giving one value which is the average number of particles that will be copied "
                    "along each face of the region of interest. The actual computation uses all the particle "
                    "that are within 'padding number' * 'particle grid spacing' distance from the region of "
                    "interest. For example '--padding 5' will add an average of 5 particles on both the left "
                    "and right sides for each dimension.\n"
                    "  2) \t by giving the size of the padding for each face of the box of interest. This size "
                    "is given with respect to the box length along each coordinate (i.e. '-padding 0.1 0.2 "
                    "0.5 0.5 0.1 0.1' means that box will be padded with '0.1*x box length' on the left of "
                    "the x-coordiante and by '0.2*x box length' on the right of the x-coordinate, similar for "
                    "the y and z dimensions).",
                    "give the size of the buffer zone to make sure that the triangulation fully covers the "
                    "region of interest."),
            _Option("paddingMpc", None, "padding_mpc", "many", float,
                    "give the size of the padding need to make sure that the Delaunay triangulation fully "
                    "covers the region of interest. Similar to option 'padding' choice '2)' with the "
                    "difference that the padding size is given in Mpc and not box lengths.",
                    "give the size of the buffer zone in Mpc units."),
        ),
    ),
    (
        "Averaging options",
        (
            _Option("method", "m", "method", "one", int,
                    "choose volume averaging method (only for fields inserted using the '_a' ending):\n"
                    "  1 = \tvolume average the fields using a Monte Carlo method with pseudo-random numbers "
                    "inside the Delaunay cell.\n"
                    "  2 = \tvolume average the fields using the Monte Carlo method inside the grid cell.\n"
                    "  3 = \tvolume average the fields using uniformly distributed volume sampling points in "
                    "each grid cell (recommended only for testing purposes).",
                    "choose the MC averaging method: 1 = volume average inside the Delaunay cell OR 2 = "
                    "volume average inside the grid cell.",
                    1),
            _Option("samples", "s", "samples", "one", int,
                    "specify the number of sampling points when volume averaging the fields inside each grid "
                    "cell (e.g. '-s 20'). DEFAULT values if none specified:\n"
                    "  1st method: \tan average of 100 sample points per grid cell.\n"
                    "  2nd method: \t20 random points per grid cell.\n"
                    "  3rd method: \t27 random points per grid cell.",
                    "specify the number of MC sampling points for volume averaged interpolation."),
            _Option("density0", None, "density0", "one", float,
                    "supply a value to be used to scale the density. If none is supplied, the average density "
                    "will be used for this task.",
                    "value to scale the density [DEFAULT: use average density]."),
            _Option("seed", None, "seed", "one", _size_t,
                    "integer value to be used for the random seed generator when interpolating to the grid "
                    "using Monte Carlo methods. Generated randomly if not supplied by the user.",
                    "integer value used as seed for the random generator."),
        ),
    ),
    (
        "Redshift cone options",
        (
            _Option("redshiftCone", None, "redshift_cone", "many", float,
                    "specify to interpolate the fields on a redshift cone grid (i.e. on spherical "
                    "coordinates). Must give 6 arguments in 3D (4 in 2D) which give 'r_min', 'r_max', "
                    "'theta_min', 'theta_max', 'psi_min' and 'psi_max' (where 'r' is the distance in Mpc and "
                    "'theta' and 'psi' the two angles expressed in degrees). For example '--redshiftCone 1 10 "
                    "0 90 0 360' gives you a half a sphere shell.",
                    "specify to interpolate the fields on a redshift cone grid and give the coordinates "
                    "('r_min', 'r_max', 'theta_min', 'theta_max', 'psi_min' and 'psi_max')."),
            _Option("origin", None, "origin", "many", float,
                    "specify the origin of the spherical coordinate system used in option '--redshiftCone'. "
                    "It gives the x, y and z values of the origin point.",
                    "specify the origin of the spherical coordinate system."),
        ),
    ),
    (
        "Additional options",
        (
            _Option("config", "c", "config", "one", str,
                    "supply all/part of the program options in a configuration file. The option syntax is the "
                    "same as at the command line. Can insert comments using the '#' symbol (everything after "
                    "this symbol until the end of the line will be considered a comment).",
                    "name the configuration file from which to read the program options."),
            _Option("NGP", None, "ngp", "flag", None,
                    "choose the NGP (nearest grid point) as the grid interpolation method instead of DTFE. "
                    "This method is available only for: density and velocity fields.",
                    "choose NGP (Nearest Grid Point) for grid interpolation."),
            _Option("CIC", None, "cic", "flag", None,
                    "choose the CIC (Cloud In Cell) as the grid interpolation method instead of DTFE. This "
                    "method is available only for: density and velocity fields.",
                    "choose CIC (Cloud In Cell) for grid interpolation."),
            _Option("TSC", None, "tsc", "flag", None,
                    "choose the TSC (Triangular Shape Cloud) as the grid interpolation method instead of "
                    "DTFE. This method is available only for: density and velocity fields.",
                    "choose TSC (Triangular Shape Cloud) for grid interpolation."),
            _Option("SPH", None, "sph", "one", int,
                    "choose the SPH (Smoothed Particle Hydrodynamics) as the grid interpolation method "
                    "instead of DTFE. This method is available only for: density, velocity and scalar fields.",
                    "choose SPH for grid interpolation (argument = number nearest neighbors)."),
            _Option("MpcUnit", None, "mpc_unit", "one", float,
                    "specify the value of 1Mpc in units of the input particle position data.",
                    "value of 1Mpc in units of the input position data."),
            _Option("extensive", None, "extensive", "flag", None,
                    "specify that all the fields under 'scalar fields' are extensive quantities. If this "
                    "option is missing than the code treats the variables as intensive fields. This option is "
                    "important only when using the TSC or SPH interpolation methods applied to the scalar "
                    "variable.",
                    "the fields under 'scalar fields' are extensive quantities [DEFAULT: intensive "
                    "variables]."),
            _Option("verbose", "v", "verbose", "one", int,
                    "choose the verbosity level of the program (a value from 0 to 3). See the documentation "
                    "for additional help.",
                    "choose the verbosity level (from 0 to 3).",
                    3),
            _Option("randomSample", None, "random_sample", "one", float,
                    "generates a random subsample of the input data. The size of the subsample is given by "
                    "value supplied to the option (with values from 0. to 1.). Only this random subsample of "
                    "the full data set will be used in any further computations. For example '--randomSample "
                    "0.1' will keep only 10% of the data set for further computations.",
                    "generates a random subsample of the input data (argument = from 0 to 1, gives fraction "
                    "of particles)."),
            _Option("poisson", None, "poisson", "one", _size_t,
                    "generate the particle positions randomly. The argument gives the root 3 in 3D (and root "
                    "2 in 2D) of the random number of particles. The particles have the same weight and are "
                    "in a box of size unity. For example '-poisson 256' will generate 256^3 particles in 3D, "
                    "while only 256^2 particles in 2D.",
                    "generate the particle positions randomly."),
            _Option("redshiftSpace", None, "redshift_space", "many", float,
                    "specify this option to transform the particle positions from position-space to "
                    "redhsift-space. This option takes 3 arguments that specifies the direction (d1,d2,d3) "
                    "along which to tranform to redshift-space. For example '--redshiftSpace d1 d2 d3' "
                    "specifies to transform to 'redshift-space = position-space + (d1,d2,d3)*velocity / H', "
                    "with H=100 h km/s /Mpc and (d1,d2,d3) normalized to a unit vector.",
                    "transform the particle positions from position-space to redhsift-space -- need to give 3 "
                    "values that give the direction for the shift."),
            _Option("options", None, "options", "many", str,
                    "variable used to supply additional options to the program in a very simple way. Each "
                    "additional option will be stored as a string in the list of additional options.",
                    "variable used to supply additional options."),
        ),
    ),
)

_HIDDEN: Tuple[_Option, ...] = (
    _Option("inputFile", None, "input_file_option", "one", str, "", ""),
    _Option("outputFile", None, "output_file_option", "one", str, "", ""),
)

_ALL_OPTIONS: Dict[str, _Option] = {
    opt.name: opt for _, group in _GROUPS for opt in group
}
_ALL_OPTIONS.update({opt.name: opt for opt in _HIDDEN})


class _HelpFormatter(argparse.HelpFormatter):
    """Wraps each line of a help text separately, keeping explicit line breaks."""

    def _split_lines(self, text: str, width: int) -> List[str]:
        lines: List[str] = []
        for paragraph in text.expandtabs(1).splitlines():
            lines.extend(textwrap.wrap(paragraph, width) or [""])
        return lines

    def _fill_text(self, text: str, width: int, indent: str) -> str:
        return "\n".join(indent + line for line in self._split_lines(text, width - len(indent)))


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise OptionsError(message)


def _add_option(container, opt: _Option, help_text: str) -> None:
    flags = [f"--{opt.name}"] + ([f"-{opt.short}"] if opt.short else [])
    escaped = help_text.replace("%", "%%") if help_text is not argparse.SUPPRESS else help_text
    if opt.kind == "flag":
        container.add_argument(*flags, dest=opt.dest, action="store_true", help=escaped)
    elif opt.kind == "many":
        container.add_argument(*flags, dest=opt.dest, nargs="+", type=opt.type, default=opt.default,
                               metavar="VALUE", help=escaped)
    else:
        container.add_argument(*flags, dest=opt.dest, type=opt.type, default=opt.default,
                               metavar="VALUE", help=escaped)


def build_parser(full: bool) -> argparse.ArgumentParser:
    """Argument parser for all program options, with the detailed or short help texts."""
    parser = _Parser(
        prog=DEFAULT_PROG,
        usage=_USAGE,
        description=_DESCRIPTION,
        add_help=False,
        formatter_class=_HelpFormatter,
    )
    for title, group in _GROUPS:
        section = parser.add_argument_group(title)
        for opt in group:
            _add_option(section, opt, opt.full_help if full else opt.short_help)
    for opt in _HIDDEN:
        _add_option(parser, opt, argparse.SUPPRESS)
    parser.add_argument("input_file", nargs="?", default=None, help=argparse.SUPPRESS)
    parser.add_argument("output_file", nargs="?", default=None, help=argparse.SUPPRESS)
    return parser


def read_config_file(path) -> List[str]:
    """Read a configuration file and return its options as command line tokens.

    Each line holds ``name = value`` (or just ``name`` for switches) using the
    long option names; ``#`` starts a comment and ``[section]`` lines prefix
    the following names with ``section.``. Repeating a multi-valued option
    appends to its values.
    """
    text = Path(path).read_text()
    collected: Dict[str, List[str]] = {}
    section = ""
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        if line.startswith("[") and line.endswith("]"):
            section = line[1:-1].strip()
            continue
        key, sep, value = line.partition("=")
        key, value = key.strip(), value.strip()
        if not key:
            raise OptionsError(f"Syntax error in the configuration file '{path}' at line {number}: '{raw}'.")
        name = f"{section}.{key}" if section else key
        opt = _ALL_OPTIONS.get(name)
        if opt is None:
            raise OptionsError(f"Unrecognised option '{name}' in the configuration file '{path}'.")
        if opt.kind == "flag":
            if value:
                raise OptionsError(f"The option '{name}' in the configuration file '{path}' takes no value.")
            values: List[str] = []
        elif not value:
            raise OptionsError(f"The option '{name}' in the configuration file '{path}' requires a value.")
        elif opt.kind == "many":
            values = value.split()
        else:
            values = [value]
        if name in collected:
            if opt.kind != "many":
                raise OptionsError(
                    f"The option '{name}' cannot be specified more than once in the configuration file '{path}'."
                )
            collected[name].extend(values)
        else:
            collected[name] = values
    tokens: List[str] = []
    for name, values in collected.items():
        tokens.append(f"--{name}")
        tokens.extend(values)
    return tokens


def short_help(prog: str) -> str:
    """The short help message for program name ``prog``."""
    parser = build_parser(False)
    parser.prog = prog
    return parser.format_help() + _SHORT_FOOTER


def full_help(prog: str) -> str:
    """The detailed help message for program name ``prog``."""
    parser = build_parser(True)
    parser.prog = prog
    return parser.format_help()