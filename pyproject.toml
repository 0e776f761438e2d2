[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "propagarotas"
version = "0.1.0"
description = "Discrete-event simulation of least-cost routing by information propagation between routers"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "routing",
    "distance-vector",
    "simulation",
    "discrete-event",
    "networking",
    "least-cost",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["propagarotas*"]

[tool.pytest.ini_options]
addopts = "-ra"
