"""Coalesce — universal code translation through a shared intermediate representation."""

__version__ = "0.1.0"
