"""Version constraints, dependency graphs, graph resolution and completion caching for pacman and AUR packages."""

__version__ = "12.0.4"