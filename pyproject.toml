[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hiramap"
version = "0.1.0"
description = "Map unpacked electronics data onto detectors and calibrate it from JSON configuration"
requires-python = ">=3.10"
dependencies = []
keywords = ["nuclear physics", "detectors", "calibration", "data mapping", "daq"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hiramap"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
