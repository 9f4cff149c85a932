[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "flexondb"
version = "1.0.0"
description = "Schema-based, chunked binary database files (.fxdb) with a writer, readers and terminal helpers"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "database",
    "embedded-database",
    "binary-format",
    "schema",
    "storage",
    "fxdb",
]
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
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["flexondb"]

[tool.hatch.build.targets.sdist]
include = ["flexondb", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
