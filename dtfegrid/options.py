"""Program options: the region, padding, grid and interpolation settings of a run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from math import prod
from typing import Iterable, List, Sequence

from .fields import Field
from .particles import NO_DIM

logger = logging.getLogger(__name__)

INPUT_FILE_DEFAULT = 101
"""Default input file type (multiple Gadget files)."""

OUTPUT_FILE_DEFAULT = 101
"""Default output file type (binary file)."""

MPC_UNIT = 1000.0
"""Default value of 1 Mpc in the units of the input positions (kpc data)."""

NO_READ_FLAGS = 10
"""Number of data blocks and particle species that can be selected for reading."""

INPUT_FILE_TYPES = {
    101: "Gadget multiple files",
    102: "Gadget single file",
    105: "Gadget HDF5 file/files",
    111: "text file with positions (first 3 columns and weights in 4th column)",
}

OUTPUT_FILE_TYPES = {
    101: "binary file",
    100: "density binary file",
    110: "text file",
}

AVERAGING_METHODS = {
    1: "Monte Carlo sampling using quasi-random points inside the Delaunay cells",
    2: "Monte Carlo sampling using random points inside the sampling cells",
    3: "equidistant sampling points inside the sampling cells",
}

_AXIS_NAMES = ("x", "y", "z")


class OptionsError(ValueError):
    """Raised when the program options are invalid or inconsistent."""


def _lower_bound_check(value, bound, what: str) -> None:
    if value < bound:
        raise OptionsError(f"Invalid {what}: {value} is smaller than the minimum allowed value {bound}.")


def _interval_check(value, low, high, what: str) -> None:
    if value < low or value > high:
        raise OptionsError(f"Invalid {what}: {value} is outside the allowed interval [{low}, {high}].")


def _root_n(value: int, dim: int) -> int:
    """The integer ``dim``-th root of ``value``; raises if ``value`` is not a perfect power."""
    root = round(value ** (1.0 / dim))
    if root**dim != value:
        raise OptionsError(
            f"The number of sampling points {value} must be a perfect power {dim} of an integer "
            "when using equidistant volume sampling points (method 3)."
        )
    return root


def _fmt(value) -> str:
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _join(values: Iterable, sep: str) -> str:
    return sep.join(_fmt(v) for v in values)


def _zero_coords() -> List[float]:
    return [0.0] * (2 * NO_DIM)


@dataclass
class Box:
    """Box coordinates stored as ``[x_left, x_right, y_left, y_right, ...]``."""

    coords: List[float] = field(default_factory=_zero_coords)

    def __post_init__(self) -> None:
        self.coords = [float(c) for c in self.coords]

    def __len__(self) -> int:
        return len(self.coords)

    def __iter__(self):
        return iter(self.coords)

    def __getitem__(self, i: int) -> float:
        return self.coords[i]

    def __setitem__(self, i: int, value: float) -> None:
        self.coords[i] = float(value)

    def copy(self) -> "Box":
        return Box(list(self.coords))

    def assign(self, value: float) -> None:
        """Set every coordinate to ``value``."""
        self.coords = [float(value)] * len(self.coords)

    def is_null_box(self) -> bool:
        """True if every coordinate is zero."""
        return all(c == 0.0 for c in self.coords)

    def volume(self) -> float:
        """Product of the box lengths along every axis."""
        return prod(self.coords[2 * i + 1] - self.coords[2 * i] for i in range(len(self.coords) // 2))


def _default_read_data() -> List[int]:
    flags = [0] * NO_READ_FLAGS
    flags[0] = flags[1] = flags[2] = 1
    return flags


def _default_read_species() -> List[int]:
    flags = [0] * NO_READ_FLAGS
    flags[1] = 1
    return flags


@dataclass
class UserOptions:
    """All the settings that control a grid interpolation run."""

    input_filename: str = ""
    output_filename: str = ""

    grid_size: List[int] = field(default_factory=list)
    periodic: bool = False
    box_coordinates: Box = field(default_factory=Box)
    user_given_box_coordinates: bool = False
    input_file_type: int = INPUT_FILE_DEFAULT
    read_particle_data: List[int] = field(default_factory=_default_read_data)
    read_particle_species: List[int] = field(default_factory=_default_read_species)
    output_file_type: int = OUTPUT_FILE_DEFAULT

    u_field: Field = field(default_factory=Field)
    a_field: Field = field(default_factory=Field)

    partition_on: bool = False
    partition: List[int] = field(default_factory=list)
    part_no: int = -1

    padding_on: bool = False
    padding_mpc_on: bool = False
    padding_particles: float = 5.0
    padding_length: Box = field(default_factory=Box)
    test_padded_boundaries: bool = False

    region_on: bool = False
    region_mpc_on: bool = False
    region: Box = field(default_factory=Box)

    method: int = 1
    no_points: int = 100
    no_points_on: bool = False
    average_density: float = -1.0
    random_seed: int = 0

    origin_position: List[float] = field(default_factory=list)
    redshift_cone_on: bool = False
    redshift_cone: Box = field(default_factory=Box)

    config_filename: str = ""
    ngp: bool = False
    cic: bool = False
    tsc: bool = False
    sph: bool = False
    sph_neighbors: int = 0
    mpc_value: float = MPC_UNIT
    extensive: bool = False
    verbose_level: int = 3
    random_sample: float = -1.0
    poisson: int = 0
    additional_options: List[str] = field(default_factory=list)
    transform_to_redshift_space_on: bool = False
    transform_to_redshift_space: List[float] = field(default_factory=lambda: [0.0] * NO_DIM)

    padded_box: Box = field(default_factory=Box)
    full_box_offset: List[float] = field(default_factory=list)
    full_box_length: List[float] = field(default_factory=list)
    dtfe: bool = True
    user_defined_sampling: bool = False
    no_processors: int = 1
    thread_id: int = 0
    total_time: float = 0.0
    program_options: str = ""

    def update_full_box(self, new_box: Box | Sequence[float]) -> None:
        """Set the full box and recompute its per-axis offsets and lengths."""
        coords = list(new_box.coords if isinstance(new_box, Box) else new_box)
        self.box_coordinates = Box(coords)
        self.full_box_offset = [coords[2 * i] for i in range(NO_DIM)]
        self.full_box_length = [coords[2 * i + 1] - coords[2 * i] for i in range(NO_DIM)]

    def update_entries(self, no_total_particles: int, user_sampling: bool) -> None:
        """Finish the options once the input data is known, checking their consistency."""
        if len(self.box_coordinates) != 2 * NO_DIM:
            raise OptionsError(
                f"Failed a consistency check. The box encompasing the data should have {2 * NO_DIM} "
                f"coordinates, but it has {len(self.box_coordinates)} coordinates. Check again the values "
                "supplied as the coordinates of the full data box."
            )
        if self.box_coordinates.volume() == 0.0:
            raise OptionsError(
                "Failed a consistency check. The box encompasing the data has 0. volume. Probably you "
                "forget to initialize the coordinates of the full particle data box."
            )
        if (not self.grid_size and not user_sampling) or len(self.grid_size) != NO_DIM:
            raise OptionsError(
                f"Failed a consistency check. The array storing the interpolation grid should have {NO_DIM} "
                f"values, but it has {len(self.grid_size)} values. Check again the values supplied as the "
                "size of the interpolation grid."
            )
        for n in self.grid_size:
            _lower_bound_check(n, 1, "the values of option '--grid'")

        self.padded_box = self.box_coordinates.copy()
        self.update_full_box(self.box_coordinates)
        self.update_padding(no_total_particles)

        if self.region_on and not self.region_mpc_on:
            for i in range(len(self.region)):
                axis = i // 2
                self.region[i] = self.full_box_offset[axis] + self.region[i] * self.full_box_length[axis]
            self.region_mpc_on = True
        elif not self.region_on:
            self.region = self.box_coordinates.copy()

        self.user_defined_sampling = user_sampling
        if user_sampling:
            self.redshift_cone_on = False
            self._force_method_two("a user defined grid")
        elif self.redshift_cone_on:
            self._force_method_two("a redshift cone grid")

        if self.partition_on and (user_sampling or self.redshift_cone_on):
            logger.warning(
                "The option '--partition' is not available when interpolating the fields to a redshift "
                "cone grid or to user defined sampling points. The '--partition' option will be disabled."
            )
            self.partition_on = False
            self.partition = [1] * NO_DIM
            self.part_no = -1

        if self.redshift_cone_on:
            if NO_DIM == 3:
                _interval_check(self.redshift_cone[2], 0.0, 180.0, "3rd value of option '--redshiftCone'")
                _interval_check(self.redshift_cone[3], 0.0, 180.0, "4th value of option '--redshiftCone'")
            psi_range = self.redshift_cone[2 * (NO_DIM - 1) + 1] - self.redshift_cone[2 * (NO_DIM - 1)]
            if psi_range >= 360.0:
                raise OptionsError("The 'psi' angle interval can strech at most 360 degrees.")
            if len(self.origin_position) != NO_DIM:
                raise OptionsError(f"The origin position of the redshift cone must have {NO_DIM} entries.")
        if self.random_sample >= 0.0:
            _interval_check(self.random_sample, 0.0, 1.0, "value of '--randomSample'")

        if self.method == 3:
            _root_n(self.no_points, NO_DIM)

        if self.ngp or self.cic or self.tsc or self.sph:
            if self.a_field.velocity_gradient or self.a_field.selected_velocity_derivatives():
                raise OptionsError(
                    "The NGP, CIC, TSC and SPH grid interpolation methods do not have implemented a method "
                    "for computing the velocity gradient. The velocity gradient cannot be computed!"
                )
            if self.a_field.scalar_gradient:
                raise OptionsError(
                    "The NGP, CIC, TSC and SPH grid interpolation methods do not have implemented a method "
                    "for computing the scalar fields gradients. The scalar gradient cannot be computed!"
                )
            if (self.cic or self.tsc) and self.a_field.scalar:
                raise OptionsError(
                    "The NGP, CIC and TSC grid interpolation method does not have implemented a method for "
                    "computing the scalar fields on the grid. The scalar field cannot be computed!"
                )

        if self.test_padded_boundaries:
            raise OptionsError("Testing the padding efficiency with dummy boundary particles is not available.")

    def _force_method_two(self, where: str) -> None:
        if self.method != 2 and self.a_field.selected():
            self.method = 2
            if not self.no_points_on:
                self.no_points = 20
            logger.warning(
                "When computing the volume average of the fields on %s only volume averaging method 2 is "
                "available. The program will use volume averaging method '2 - Monte Carlo sampling using "
                "random points inside the grid cells' using '%d' random samples in each grid cell.",
                where,
                self.no_points,
            )

    def update_padding(self, no_total_particles: int) -> None:
        """Compute the padding length around the region of interest in box units."""
        if self.padding_length.is_null_box():
            if self.padding_particles <= 0.0:
                self.padding_length.assign(0.0)
            elif self.dtfe or self.sph:
                spacing = no_total_particles ** (1.0 / NO_DIM)
                for i in range(2 * NO_DIM):
                    self.padding_length[i] = self.padding_particles / spacing * self.full_box_length[i // 2]
            elif self.tsc or self.ngp:
                for i in range(2 * NO_DIM):
                    self.padding_length[i] = self.full_box_length[i // 2] / self.grid_size[i // 2]
            elif self.cic:
                self.padding_length.assign(0.0)
            self.padding_on = True
            self.padding_mpc_on = True
        elif self.padding_on and not self.padding_mpc_on:
            for i in range(2 * NO_DIM):
                self.padding_length[i] *= self.full_box_length[i // 2]
            self.padding_mpc_on = True

    def _field_summary(self, fld: Field, labels: Sequence[tuple]) -> str:
        return "".join(f" {label}," for name, label in labels if getattr(fld, name))

    def describe(self) -> str:
        """A human readable summary of the options the program will use."""
        u_labels = (
            ("density", "density"),
            ("velocity", "velocity"),
            ("velocity_gradient", "velocity gradient"),
            ("velocity_divergence", "velocity divergence"),
            ("velocity_shear", "velocity shear"),
            ("velocity_vorticity", "velocity vorticity"),
            ("scalar", "scalar"),
            ("scalar_gradient", "scalar gradient"),
            ("triangulation", "triangulation"),
        )
        u_text = self._field_summary(self.u_field, u_labels)
        if not self.u_field.selected():
            for flag, name in ((self.ngp, "NGP"), (self.cic, "CIC"), (self.tsc, "TSC"), (self.sph, "SPH")):
                if flag:
                    u_text = f"none since {name} interpolation"
                    break
            else:
                u_text = "none"

        a_labels = (
            ("density", "density"),
            ("velocity", "velocity"),
            ("velocity_gradient", "velocity gradient"),
            ("velocity_divergence", "velocity divergence"),
            ("velocity_shear", "velocity shear"),
            ("velocity_vorticity", "velocity vorticity"),
            ("velocity_std", "velocity standard deviation"),
            ("scalar", "scalar"),
            ("scalar_gradient", "scalar gradient"),
        )
        a_text = self._field_summary(self.a_field, a_labels) if self.a_field.selected() else "none"

        if self.cic:
            method = "CIC"
        elif self.ngp:
            method = "NGP"
        elif self.tsc:
            method = "TSC"
        elif self.sph:
            method = f"SPH {self.sph_neighbors} neighbors"
        else:
            method = "DTFE"

        in_type = INPUT_FILE_TYPES.get(self.input_file_type, "unknown")
        out_type = OUTPUT_FILE_TYPES.get(self.output_file_type, "unknown")
        units = "  Mpc"

        lines = [
            f"RUNNING: {self.program_options}",
            "",
            "The program will interpolate to grid the chosen field using the DTFE method with the "
            "following input parameters:",
            f"\t unaveraged field(s)    : {u_text}",
            f"\t averaged field(s)      : {a_text}",
            f"\t interpolation method   : {method}",
            f"\t input data file        : {self.input_filename}",
            f"\t input data file type   : {self.input_file_type} - {in_type}",
            f"\t input data blocks      : {_join(self.read_particle_data, '  ')}",
            f"\t input particle species : {_join(self.read_particle_species, '  ')}",
            f"\t output file            : {self.output_filename}",
            f"\t output file type       : {self.output_file_type} - {out_type}",
        ]
        if self.grid_size:
            scope = "for the box region selected by the user" if self.region_on else "for the full particle box"
            lines.append(f"\t grid size              : {_join(self.grid_size, '  ')}   {scope}")
        else:
            lines.append("\t grid size              : none specifed at the moment")
        if not self.box_coordinates.is_null_box():
            lines.append(f"\t box coordinates        : [{_join(self.box_coordinates, ', ')}]")
        if self.periodic:
            lines.append("\t computing the grid interpolation in a PERIODIC box")

        if self.region_on:
            units = "  Mpc" if self.region_mpc_on else "  box length"
            lines.append(
                "\t computing the grid interpolation only for the user specified region of coordinates:"
            )
            for axis in range(NO_DIM):
                lo, hi = self.region[2 * axis], self.region[2 * axis + 1]
                lines.append(f"\t\t {_AXIS_NAMES[axis]} extension : {_fmt(lo)}   {_fmt(hi)}{units}")

        if self.partition_on:
            lines.append(
                f"\t splitting the data in  : {_join(self.partition, '  ')}   separate data sets on which "
                "to apply the Delaunay triangulation."
            )
            if self.part_no >= 0:
                lines.append(
                    f"\t computing grid interpolation ONLY for data set {self.part_no} of the partitioned data"
                )

        if not self.padding_length.is_null_box():
            units = "  Mpc" if self.padding_mpc_on else "  box length"
            lines.append("\t padding length:")
            for axis in range(NO_DIM):
                lo, hi = self.padding_length[2 * axis], self.padding_length[2 * axis + 1]
                lines.append(f"\t\t {_AXIS_NAMES[axis]} axis : {_fmt(lo)}   {_fmt(hi)}{units}")
        else:
            lines.append(f"\t number padding particles: {_fmt(self.padding_particles)}")
        if self.dtfe and self.test_padded_boundaries:
            lines.append(
                "\t the DTFE computation will add DUMMY TEST particles to test the efficiency of the padding"
            )

        if self.a_field.selected() and self.dtfe:
            averaging = AVERAGING_METHODS.get(self.method, "unknown")
            lines.append(f"\t volume averaging method: {self.method} - {averaging}")
            lines.append(f"\t number sampling points : {self.no_points}")
            if self.method == 2:
                lines.append(f"\t random generator seed  : {self.random_seed}")
            if self.average_density > 0.0:
                lines.append(f"\t density scaling value  : {_fmt(self.average_density)}")

        if self.redshift_cone_on:
            names = (
                "[r_min, r_max, psi_min, psi_max]"
                if NO_DIM == 2
                else "[r_min, r_max, theta_min, theta_max, psi_min, psi_max]"
            )
            lines.append(
                "\t Computing the grid interpolation to a redshift cone grid of coordinates "
                f"{names} = [{_join(self.redshift_cone, ', ')}]"
            )
            lines.append(f"\t The origin of the light cone is (x,y,z) : ({_join(self.origin_position, ', ')})")

        lines.append(f"\t 1Mpc = {_fmt(self.mpc_value)} in units of input data.")
        if self.poisson > 0:
            lines.append(
                "\t Particle positions will be generated randomly. Particle number = "
                f"{self.poisson**NO_DIM}."
            )
        if self.transform_to_redshift_space_on:
            lines.append(
                "\t Transforming from position-space to redshift space using the velocity along the "
                f"direction :  ( {_join(self.transform_to_redshift_space, ', ')} )"
            )
        if not self.grid_size:
            lines.append("")
            lines.append(
                "~~~WARNING~~~ No grid size specified. Unless the input data file specifies the grid size "
                "for the output result, the program will end with and error message!"
            )
        return "\n".join(lines) + "\n"