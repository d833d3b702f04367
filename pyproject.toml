[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "amrsim"
version = "0.1.0"
description = "Individual-based stochastic simulation of bacterial infection, antibiotic use and antimicrobial resistance"
requires-python = ">=3.10"
dependencies = []
keywords = ["antimicrobial resistance", "epidemiology", "agent-based model", "simulation", "antibiotics"]
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
    "Topic :: Scientific/Engineering :: Medical Science Apps.",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["amrsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
