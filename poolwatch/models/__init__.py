"""
Shared Data Models
==================

This package contains dataclasses used across the project.
"""

from .pool import PoolRecord
from .ticker import AlphaTicker

__all__ = [
    "PoolRecord",
    "AlphaTicker",
]
