"""Accessibility Fixer package metadata."""

from ._version import __version__

__all__ = ["__version__"]
