[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gnsslab"
version = "1.2.0"
description = "GNSS data processing: RINEX observation and navigation reading, broadcast ephemeris orbits, cycle-slip detection, differencing and Kalman filtering"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["gnss", "gps", "beidou", "rinex", "ephemeris", "rtk", "kalman", "geodesy"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: GIS",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gnsslab"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
