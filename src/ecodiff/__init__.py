"""Pairwise community difference metrics for ecological abundance tables."""

__version__ = "0.1.0"

__all__ = ["__version__"]
