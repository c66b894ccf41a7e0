[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "powertools"
version = "0.3.1"
description = "Refactoring helpers for source trees: import analysis, batch regex replacement, symbol renaming, transactional file edits and index staleness checks"
requires-python = ">=3.10"
dependencies = []
keywords = ["refactoring", "imports", "rename", "batch-replace", "code-navigation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["powertools"]

[tool.pytest.ini_options]
addopts = "-ra"
