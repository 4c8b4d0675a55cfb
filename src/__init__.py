# src/__init__.py - v1
"""ppsequencer - dependency graph and build sequencing for Power-Platform projects."""

from ppsequencer.version import __version__

__all__ = ["__version__"]
