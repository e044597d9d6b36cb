"""
Utility functions.
"""
from catalog.utils.logger import setup_logging

__all__ = [
    "setup_logging",
]
