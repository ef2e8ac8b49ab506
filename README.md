# dtfegrid

Building blocks for setting up field interpolation on a grid with the
Delaunay Tessellation Field Estimator (DTFE): command-line option
handling and checking, particle and vertex records, containers for the
interpolated fields (with sub-grid copying for partitioned runs), and
the splitting of a triangle or tetrahedron over the grid cells it
crosses.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Command line

```
dtfegrid particles.dat output_root -g 256 -f density_a velocity
```

The two positional arguments are the input particle file name and the
root name of the output files; both are required unless help is asked
for. `dtfegrid --help` (`-h`) prints a short summary of the options and
`dtfegrid --full_help` the detailed one.

The command reads the options, checks them (conflicting interpolation
methods, value counts, allowed ranges, option dependencies such as
`--partNo` needing `--partition`), and prints a summary of the settings
that would be used (nothing is printed with `-v 0`). Invalid options are
reported on standard error as `~~~ERROR~~~ ...` and the command exits
with status 1.

### Configuration files

Options can also be read from a file with `-c FILE` (`--config FILE`).
Each line holds one option by its long name, either `name = value` or,
for switches, just `name`; `#` starts a comment. Values of multi-valued
options are separated by spaces, and repeating such an option adds to
its values. Options given on the command line take precedence.

```
# example configuration
grid = 128
box = 0 100 0 100 0 100
field = density_a velocity_a
periodic
```

The file names may be given there as `inputFile = ...` and
`outputFile = ...`.

## Library use

```python
from dtfegrid.cli import parse_options
from dtfegrid.quantities import Quantities
from dtfegrid.volume_split import Simplex, VolumeSplit

options = parse_options(
    ["in.dat", "out", "-g", "32", "--box", "0", "1", "0", "1", "0", "1"],
    show_options=False,
)
options.update_entries(1000, False)   # number of particles, user sampling points?
print(options.padding_length.coords)

results = Quantities()
results.reserve_memory(options.grid_size, options.a_field)

splitter = VolumeSplit([0.0, 0.0], [4, 4], [1.0, 1.0])
triangle = Simplex.from_points([[0.5, 0.5], [2.5, 0.5], [0.5, 2.5]])
indices, contributions = splitter.find_intersection(triangle)
```

Modules:

- `dtfegrid.particles` – `ParticleData`, `SamplePoint`, `VertexData`,
  and the position ordering helpers `particle_sort_key`,
  `compare_particles` and `same_particle`.
- `dtfegrid.fields` – `Field`, the set of quantities selected for
  computation.
- `dtfegrid.quantities` – `Quantities`, the interpolated results:
  `reserve_memory`, `size` and `copy_from_subgrid`.
- `dtfegrid.volume_split` – `Vertex`, `Simplex` and `VolumeSplit`; for
  each grid cell overlapped by a simplex, `find_intersection` returns the
  overlap volume and its first moment.
- `dtfegrid.options` – `UserOptions`, `Box` and `OptionsError`;
  `UserOptions.update_entries` completes and checks the options once the
  box and particle count are known, `describe` gives the text summary.
- `dtfegrid.parser` – `build_parser`, `read_config_file`, `short_help`
  and `full_help`.
- `dtfegrid.cli` – `parse_options` and the `main` entry point of the
  `dtfegrid` command.

## What this package does not do

It does not compute the Delaunay triangulation or the DTFE, NGP, CIC,
TSC or SPH interpolation itself, does not read particle files or write
output files, and does not generate or sub-sample particles at random.
The `dtfegrid` command only reads, checks and reports the options of a
run; it does not perform one.