"""
Utility functions for quantummesh.

Includes logging setup and performance profiling utilities.
"""

from .logging_setup import configure_logging, setup_logger, get_logger

__all__ = [
    "configure_logging",
    "setup_logger",
    "get_logger",
]
