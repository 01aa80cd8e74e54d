[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "remotecache"
version = "0.1.0"
description = "Building blocks for a remote build cache: request parsing, ActionResult validation, blob splicing, hash-verified writes and server utilities."
requires-python = ">=3.10"
keywords = [
    "build-cache",
    "remote-cache",
    "bazel",
    "reapi",
    "content-addressable-storage",
    "action-cache",
    "sha256",
    "zstd",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "zstandard",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["remotecache"]

[tool.hatch.build.targets.sdist]
include = [
    "remotecache",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
