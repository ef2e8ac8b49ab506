[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dtfegrid"
version = "0.1.0"
description = "Option handling, particle containers and grid bookkeeping for Delaunay Tessellation Field Estimator interpolation"
requires-python = ">=3.10"
dependencies = []
keywords = ["DTFE", "Delaunay", "cosmology", "density field", "interpolation", "grid"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Astronomy",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
dtfegrid = "dtfegrid.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["dtfegrid"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
