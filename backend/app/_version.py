"""
Version import for the Accessibility Fixer backend.

Single source of truth: a11yfixer/_version.py
"""

from a11yfixer._version import __version__, __release_date__
