# src/__init__.py - v1
"""En Pensent: temporal signature matching and hybrid trajectory prediction."""

from enpensent.version import __version__

__all__ = ["__version__"]
