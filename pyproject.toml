[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "yippee"
version = "12.0.4"
description = "Dependency graph resolution, version-constraint matching and shell completion caching for pacman and AUR packages"
requires-python = ">=3.10"
dependencies = []
keywords = ["pacman", "aur", "arch", "dependencies", "topological-sort", "package-manager"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["yippee"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
