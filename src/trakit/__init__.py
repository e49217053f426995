"""Trakit - a lightweight content-addressable version control system.

Trakit stages files into a deduplicated object store, snapshots them into
immutable commits keyed by their own digest, and restores prior snapshots.
"""

__version__ = "0.1.0"
__author__ = "Trakit Contributors"

__all__ = ["__version__", "__author__"]
