"""Caching proxy for carimbo runtime modules and source release bundles."""

__version__ = "0.1.0"
