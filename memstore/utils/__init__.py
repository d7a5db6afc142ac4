"""
Utilities package for memstore.

Exports shared helpers for logging, locking and profiling. Keep this package
lightweight and free of domain-specific logic.
"""

from memstore.utils.locks import ReadWriteLock
from memstore.utils.logging import configure_logging, get_logger
from memstore.utils.profiler import ProfileStats, profile_block

__all__ = [
    "ReadWriteLock",
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
