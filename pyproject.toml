[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pindakaas"
version = "0.1.0"
description = "Encoders that turn cardinality constraints into conjunctive normal form, with pseudo-Boolean expressions and DIMACS I/O"
requires-python = ">=3.10"
dependencies = []
keywords = ["sat", "cnf", "dimacs", "wcnf", "pseudo-boolean", "cardinality", "encoding"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pindakaas"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
