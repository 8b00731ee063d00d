"""
Default backing store for coaching entities.

Keeps all five collections in process memory and can seed them with the
academy's demo roster.
"""

from .memory import InMemoryCoachingRepository

__all__ = ["InMemoryCoachingRepository"]
