"""
FastAPI dependency injection.

Dependencies provide instances of repositories, services, clients, and
configuration to route handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be overridden in tests
- Configuration is centralized
- Resource lifecycle (connections, clients) is managed properly

Each dependency is a function that FastAPI calls when needed.
"""

import logging
import threading
from typing import Annotated, Generator

from fastapi import Depends

from ..config.settings import Settings, get_settings
from ..core.coaching.assessments import AssessmentManager, PlayerLocks
from ..core.coaching.repository import CoachingRepository
from ..infrastructure.persistence.demo_data import load_demo_roster
from ..infrastructure.persistence.memory import InMemoryCoachingRepository
from ..infrastructure.snowflake.client import get_snowflake_connection
from ..infrastructure.snowflake.repositories.coaching import (
    SnowflakeCoachingRepository,
    SnowflakeConfig,
)
from ..infrastructure.storage.client import StorageClient, StorageConfig, create_storage_client

logger = logging.getLogger(__name__)

# Shared in-memory instances (data persists across requests in mock mode)
_memory_repository = None
_mock_storage_client = None
_shared_instances_lock = threading.Lock()

# One lock registry per process, whatever the backing store
_player_locks = PlayerLocks()


# ---------------------------------------------------------------------------
# Repository and Services
# ---------------------------------------------------------------------------

def get_repository(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[CoachingRepository, None, None]:
    """
    Provide the coaching repository.

    This is a generator function (yields instead of returns) because
    with Snowflake we need to manage the connection lifecycle:
    1. Create connection
    2. Create repository
    3. Yield repository (FastAPI injects it)
    4. Close connection (cleanup after request)

    In mock mode, the same in-memory repository is reused across
    requests so that data persists for the life of the process.
    """
    if settings.snowflake_mock_mode:
        yield _shared_memory_repository(settings)
    else:
        config = SnowflakeConfig(
            account=settings.snowflake_account,
            user=settings.snowflake_user,
            password=settings.snowflake_password or None,
            private_key_path=settings.snowflake_private_key_path,
            private_key_base64=settings.snowflake_private_key_base64,
            database=settings.snowflake_database,
            schema=settings.snowflake_schema,
            warehouse=settings.snowflake_warehouse,
            role=settings.snowflake_role,
        )

        with get_snowflake_connection(config) as conn:
            logger.debug("Created SnowflakeCoachingRepository")
            yield SnowflakeCoachingRepository(conn)


def _shared_memory_repository(settings: Settings) -> InMemoryCoachingRepository:
    """
    Build (and optionally seed) the process-wide in-memory repository once.

    Sync dependencies run in FastAPI's thread pool, so the first
    requests can arrive concurrently.
    """
    global _memory_repository

    with _shared_instances_lock:
        if _memory_repository is None:
            repository = InMemoryCoachingRepository()
            if settings.seed_demo_data:
                load_demo_roster(repository)
            _memory_repository = repository
            logger.info("Created shared in-memory coaching repository")
        return _memory_repository


def get_assessment_manager(
    repository: Annotated[CoachingRepository, Depends(get_repository)],
) -> AssessmentManager:
    """
    Provide an AssessmentManager bound to this request's repository.

    The manager is cheap to build; the per-player locks it relies on are
    shared process-wide.
    """
    return AssessmentManager(repository, locks=_player_locks)


def get_storage_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> StorageClient:
    """
    Provide storage client for video uploads and playback URLs.

    Returns either R2 client or mock client based on settings.

    In mock mode, we reuse the same client across requests
    so that uploaded videos persist during the testing session.
    """
    global _mock_storage_client

    if settings.r2_mock_mode:
        with _shared_instances_lock:
            if _mock_storage_client is None:
                _mock_storage_client = create_storage_client(mock_mode=True)
                logger.info("Created shared mock storage client for session")
            return _mock_storage_client

    config = StorageConfig(
        access_key_id=settings.r2_access_key_id,
        secret_access_key=settings.r2_secret_access_key,
        bucket_name=settings.r2_bucket_name,
        endpoint_url=settings.r2_endpoint,
    )
    logger.debug("Created R2 storage client")
    return create_storage_client(config=config)


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
RepositoryDep = Annotated[CoachingRepository, Depends(get_repository)]
AssessmentManagerDep = Annotated[AssessmentManager, Depends(get_assessment_manager)]
StorageClientDep = Annotated[StorageClient, Depends(get_storage_client)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
