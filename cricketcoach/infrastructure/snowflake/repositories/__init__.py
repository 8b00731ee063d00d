"""
Repository pattern implementations for Snowflake.

Repositories translate between domain models and database representations.
"""

from .coaching import SnowflakeCoachingRepository, SnowflakeConfig

__all__ = ["SnowflakeCoachingRepository", "SnowflakeConfig"]
