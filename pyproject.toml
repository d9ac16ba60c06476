[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ossa"
version = "0.0.1"
description = "CRDTs, Merkle trees and eventual causal graphs for replicated stores."
requires-python = ">=3.10"
dependencies = ["cbor2"]
keywords = ["crdt", "merkle-tree", "causal-graph", "replication", "lww", "sha256", "base58"]
classifiers = [
    "Development Status :: 2 - Pre-Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ossa"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
