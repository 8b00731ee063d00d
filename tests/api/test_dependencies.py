"""Tests for the shared instances handed out by the API dependencies."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from cricketcoach.api import dependencies
from cricketcoach.config.settings import Settings


@pytest.fixture
def fresh_instances(monkeypatch):
    monkeypatch.setattr(dependencies, "_memory_repository", None)
    monkeypatch.setattr(dependencies, "_mock_storage_client", None)


class TestSharedMemoryRepository:
    """The first requests of a process may resolve the repository concurrently."""

    def test_concurrent_first_use_builds_one_seeded_repository(self, fresh_instances):
        settings = Settings(snowflake_mock_mode=True, seed_demo_data=True)
        workers = 8
        start = threading.Barrier(workers)

        def resolve():
            start.wait()
            return dependencies._shared_memory_repository(settings)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            repositories = list(pool.map(lambda _: resolve(), range(workers)))

        assert all(r is repositories[0] for r in repositories)
        assert len(repositories[0].players.all()) == 4

    def test_get_repository_reuses_the_shared_instance(self, fresh_instances):
        settings = Settings(snowflake_mock_mode=True, seed_demo_data=False)

        first = next(dependencies.get_repository(settings))
        second = next(dependencies.get_repository(settings))

        assert first is second
        assert first.players.all() == []


class TestSharedStorageClient:

    def test_concurrent_first_use_builds_one_mock_client(self, fresh_instances):
        settings = Settings(r2_mock_mode=True)
        workers = 8
        start = threading.Barrier(workers)

        def resolve():
            start.wait()
            return dependencies.get_storage_client(settings)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            clients = list(pool.map(lambda _: resolve(), range(workers)))

        assert all(c is clients[0] for c in clients)
