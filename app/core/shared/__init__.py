"""
Shared utilities module

Domain-agnostic helpers reused by every bounded context.
"""

from .keyed_lock import KeyedLock
from .side_effects import SideEffectRunner

__all__ = [
    "KeyedLock",
    "SideEffectRunner",
]
