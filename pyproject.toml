[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stpphawkes"
version = "0.1.0"
description = "Simulation, likelihoods and Bayesian MCMC estimation for temporal and spatio-temporal Hawkes processes"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "hawkes",
    "point process",
    "spatio-temporal",
    "mcmc",
    "bayesian",
    "simulation",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["stpphawkes"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
