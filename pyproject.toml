[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "l2book"
version = "0.1.0"
description = "Rebuild level-2 order books from binary snapshot and incremental update files"
requires-python = ">=3.10"
dependencies = [
    "sortedcontainers",
]
keywords = ["order book", "market data", "level 2", "snapshot", "incremental"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Financial and Insurance Industry",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
l2book = "l2book.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["l2book"]

[tool.pytest.ini_options]
addopts = "-ra"
