"""Offline fuzzy search over the PyPI package index."""

__version__ = "0.1.0"
