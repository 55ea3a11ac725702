[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bldr"
version = "0.1.0"
description = "Load, validate and graph pkg.yaml build definitions and check their sources for updates"
requires-python = ">=3.10"
keywords = ["build", "pkg.yaml", "Pkgfile", "dependency graph", "dot", "checksums"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "pyyaml",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
bldr = "bldr.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["bldr"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
