"""Symposium - round-based debate coordinator."""

__version__ = "0.1.0"
