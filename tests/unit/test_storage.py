"""Unit tests for the video storage clients."""

import asyncio
from unittest.mock import patch

import pytest

from cricketcoach.infrastructure.storage.client import (
    MockStorageClient,
    R2StorageClient,
    StorageConfig,
    StorageError,
    build_video_path,
    create_storage_client,
    guess_content_type,
)


class TestVideoPaths:

    def test_path_groups_by_player_and_keeps_extension(self):
        path = build_video_path(3, "Nets Session.MOV")

        prefix, name = path.rsplit("/", 1)
        assert prefix == "videos/3"
        assert name.endswith(".mov")

    def test_same_filename_gets_distinct_paths(self):
        assert build_video_path(1, "clip.mp4") != build_video_path(1, "clip.mp4")

    def test_missing_extension_defaults_to_mp4(self):
        assert build_video_path(1, "clip").endswith(".mp4")

    def test_content_type_from_extension(self):
        assert guess_content_type("videos/1/a.webm") == "video/webm"
        assert guess_content_type("videos/1/a.unknown") == "video/mp4"


class TestMockStorageClient:

    @pytest.fixture
    def storage(self) -> MockStorageClient:
        return MockStorageClient()

    def test_upload_then_download(self, storage):
        path = asyncio.run(storage.upload_video(b"frames", player_id=1, filename="a.mp4"))

        assert asyncio.run(storage.download_video(path)) == b"frames"

    def test_presigned_url_is_mock_scheme(self, storage):
        path = asyncio.run(storage.upload_video(b"frames", player_id=1, filename="a.mp4"))

        url = asyncio.run(storage.get_presigned_url(path, expiry_seconds=60))

        assert url == f"mock://storage/{path}?expires=60"

    def test_missing_path_raises_storage_error(self, storage):
        with pytest.raises(StorageError):
            asyncio.run(storage.download_video("videos/1/missing.mp4"))

    def test_delete_removes_video(self, storage):
        path = asyncio.run(storage.upload_video(b"frames", player_id=1, filename="a.mp4"))

        asyncio.run(storage.delete_video(path))

        with pytest.raises(StorageError):
            asyncio.run(storage.get_presigned_url(path))


class TestR2StorageClient:

    @pytest.fixture
    def config(self) -> StorageConfig:
        return StorageConfig(
            access_key_id="key",
            secret_access_key="secret",
            bucket_name="cricketcoach-videos",
            endpoint_url="https://account.r2.cloudflarestorage.com",
        )

    def test_upload_puts_object_under_player_prefix(self, config):
        with patch("boto3.client") as make_client:
            storage = R2StorageClient(config)
            path = asyncio.run(storage.upload_video(b"frames", player_id=2, filename="a.mov"))

        kwargs = make_client.return_value.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "cricketcoach-videos"
        assert kwargs["Key"] == path
        assert kwargs["ContentType"] == "video/quicktime"
        assert path.startswith("videos/2/")

    def test_boto_failure_becomes_storage_error(self, config):
        with patch("boto3.client") as make_client:
            make_client.return_value.put_object.side_effect = RuntimeError("denied")
            storage = R2StorageClient(config)

            with pytest.raises(StorageError, match="denied"):
                asyncio.run(storage.upload_video(b"frames", player_id=2, filename="a.mp4"))


class TestFactory:

    def test_mock_mode_returns_mock_client(self):
        assert isinstance(create_storage_client(mock_mode=True), MockStorageClient)

    def test_real_mode_requires_config(self):
        with pytest.raises(ValueError):
            create_storage_client()
