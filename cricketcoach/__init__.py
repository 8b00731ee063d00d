"""
Cricket Coach - assessment tracking for a batting academy.

This package contains the complete application:
- core: Framework-agnostic assessment store rules and performance engine
- infrastructure: Backing stores and object storage integrations
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
