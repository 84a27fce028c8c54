"""Bulk review of estimated photo locations against a movement timeline."""

__all__ = ["__version__"]

__version__ = "0.1.0"
