"""
Infrastructure layer - backing stores and external service integrations.

Each subdirectory wraps one concern:
- persistence: In-memory coaching repository and demo roster
- snowflake: Durable coaching repository on Snowflake
- storage: Object storage (R2/S3) for video files

These wrappers translate between external formats and our domain models.
"""
