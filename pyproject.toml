[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "siegereplay"
version = "0.1.0"
description = "Read Rainbow Six Siege match replay (.rec) files and turn them into structured match data"
requires-python = ">=3.10"
keywords = ["rainbow six siege", "replay", "rec", "dissect", "match statistics", "esports"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: First Person Shooters",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "zstandard",
    "flask",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
siegereplay-server = "siegereplay.server:main"

[tool.hatch.build.targets.wheel]
packages = ["siegereplay"]

[tool.hatch.build.targets.sdist]
include = ["siegereplay", "tests", "README.md", "pyproject.toml"]

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
