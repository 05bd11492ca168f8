"""Randomized, constraint-satisfying charity selection."""

__version__ = "0.1.0"
