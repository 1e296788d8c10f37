[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "t3dupgrade"
version = "0.1.0"
description = "Parse legacy T3D level exports and upgrade their actors to the newer T3D layout"
requires-python = ">=3.10"
dependencies = []
keywords = ["t3d", "level", "map", "converter", "game-development"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Environment :: Console",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: File Formats",
    "Topic :: Games/Entertainment",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
t3dupgrade = "t3dupgrade.importer:main"

[tool.hatch.build.targets.wheel]
packages = ["t3dupgrade"]

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
