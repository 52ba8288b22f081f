"""
Infrastructure Layer

This module provides the object storage services of the toolkit.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
