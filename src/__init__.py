# src/__init__.py — v1
"""Clinical document extraction, caching and compliance scoring."""

from clincerta.version import __version__

__all__ = ["__version__"]
