"""Dependency policy evaluation for resolved dependency graphs."""

__version__ = "0.1.0"
