"""
Object storage client for batting videos.

Supports Cloudflare R2 (S3-compatible) with mock mode for local development.
Using R2 instead of S3 because:
- No egress fees (important for video playback)
- Same S3 API means we could swap to actual S3 if needed

The coaching core never sees video bytes. Uploads go here, and only the
returned locator is stored on the Video entity.

Mock mode stores videos in memory, enabling API testing without
provisioning actual object storage.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import uuid4

logger = logging.getLogger(__name__)

VIDEO_CONTENT_TYPES = {
    'mp4': 'video/mp4',
    'mov': 'video/quicktime',
    'avi': 'video/x-msvideo',
    'webm': 'video/webm',
}


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


@dataclass
class StorageConfig:
    """
    Configuration for R2/S3-compatible storage.

    Using a dataclass instead of raw parameters means:
    - Configuration is explicit and documented
    - Simple to create test configurations
    """
    access_key_id: str
    secret_access_key: str
    bucket_name: str
    endpoint_url: str
    region: str = "auto"  # R2 uses 'auto' for region


def build_video_path(player_id: int, filename: str) -> str:
    """
    Storage locator for a new upload: videos/{player_id}/{uuid}.{ext}

    The random part keeps two uploads with the same filename apart.
    """
    ext = filename.rsplit('.', 1)[-1].lower() if '.' in filename else 'mp4'
    return f"videos/{player_id}/{uuid4().hex}.{ext}"


def guess_content_type(storage_path: str) -> str:
    ext = storage_path.rsplit('.', 1)[-1].lower()
    return VIDEO_CONTENT_TYPES.get(ext, 'video/mp4')


class StorageClient(Protocol):
    """
    Protocol for object storage operations.

    Using a protocol means tests can provide mocks and we can
    swap storage backends without changing dependent code.
    """

    async def upload_video(
        self,
        video_data: bytes,
        player_id: int,
        filename: str,
    ) -> str:
        """Upload video file and return its storage locator."""
        ...

    async def download_video(
        self,
        storage_path: str,
    ) -> bytes:
        """Download video data by storage locator."""
        ...

    async def get_presigned_url(
        self,
        storage_path: str,
        expiry_seconds: int = 3600,
    ) -> str:
        """Generate temporary playback URL."""
        ...

    async def delete_video(
        self,
        storage_path: str,
    ) -> None:
        """Delete a stored video."""
        ...


class R2StorageClient:
    """
    Cloudflare R2 object storage client.

    Uses boto3 because R2 is S3-compatible. This abstraction means
    we could swap to actual S3, MinIO, or other S3-compatible storage
    with minimal changes.

    All methods are async to match the Protocol even though boto3 is
    synchronous.
    """

    def __init__(self, config: StorageConfig) -> None:
        """
        Initialize R2 client with boto3.

        boto3 is imported here (not at module level) because mock mode
        doesn't need it.
        """
        try:
            import boto3
            from botocore.config import Config
        except ImportError:
            raise ImportError(
                "boto3 is required for R2 storage. Install with: pip install boto3"
            )

        self._config = config

        # R2 requires v4 signatures and has specific endpoint patterns
        boto_config = Config(
            signature_version='s3v4',
            s3={'addressing_style': 'path'},
        )

        self._s3_client = boto3.client(
            's3',
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
            config=boto_config,
        )

        logger.info(
            "Initialized R2 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url,
            }
        )

    async def upload_video(
        self,
        video_data: bytes,
        player_id: int,
        filename: str,
    ) -> str:
        """
        Upload a video file to R2 storage.

        Grouping by player in the path keeps a player's clips together
        and makes bulk cleanup a prefix delete.
        """
        storage_path = build_video_path(player_id, filename)

        try:
            self._s3_client.put_object(
                Bucket=self._config.bucket_name,
                Key=storage_path,
                Body=video_data,
                ContentType=guess_content_type(storage_path),
                Metadata={
                    'player-id': str(player_id),
                    'original-filename': filename,
                }
            )
        except Exception as e:
            logger.error(
                "Failed to upload video",
                extra={"player_id": player_id, "error": str(e)}
            )
            raise StorageError(f"Video upload failed: {e}")

        logger.info(
            "Uploaded video",
            extra={
                "player_id": player_id,
                "size_bytes": len(video_data),
                "storage_path": storage_path,
            }
        )
        return storage_path

    async def download_video(self, storage_path: str) -> bytes:
        """Download video data from R2."""
        try:
            response = self._s3_client.get_object(
                Bucket=self._config.bucket_name,
                Key=storage_path,
            )
            return response['Body'].read()
        except Exception as e:
            logger.error(
                "Failed to download video",
                extra={"storage_path": storage_path, "error": str(e)}
            )
            raise StorageError(f"Video download failed: {e}")

    async def get_presigned_url(
        self,
        storage_path: str,
        expiry_seconds: int = 3600,
    ) -> str:
        """
        Generate a temporary playback URL.

        The browser streams straight from R2, so video bytes never pass
        through the API.
        """
        try:
            return self._s3_client.generate_presigned_url(
                'get_object',
                Params={
                    'Bucket': self._config.bucket_name,
                    'Key': storage_path,
                },
                ExpiresIn=expiry_seconds,
            )
        except Exception as e:
            logger.error(
                "Failed to generate presigned URL",
                extra={"storage_path": storage_path, "error": str(e)}
            )
            raise StorageError(f"Presigned URL generation failed: {e}")

    async def delete_video(self, storage_path: str) -> None:
        """Delete a stored video."""
        try:
            self._s3_client.delete_object(
                Bucket=self._config.bucket_name,
                Key=storage_path,
            )
        except Exception as e:
            logger.error(
                "Failed to delete video",
                extra={"storage_path": storage_path, "error": str(e)}
            )
            raise StorageError(f"Video delete failed: {e}")

        logger.info("Deleted video", extra={"storage_path": storage_path})


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockStorageClient:
    """
    In-memory storage for local development.

    Videos are stored in a dictionary and "URLs" are mock URIs.
    Not suitable for production, but perfect for development and testing.
    """

    def __init__(self) -> None:
        self._videos: dict[str, bytes] = {}
        logger.info("Initialized mock storage client (in-memory)")

    async def upload_video(
        self,
        video_data: bytes,
        player_id: int,
        filename: str,
    ) -> str:
        """Store video in memory."""
        storage_path = build_video_path(player_id, filename)
        self._videos[storage_path] = video_data

        logger.debug(
            "Stored video in mock storage",
            extra={
                "player_id": player_id,
                "size_bytes": len(video_data),
                "storage_path": storage_path,
            }
        )
        return storage_path

    async def download_video(self, storage_path: str) -> bytes:
        """Retrieve video from memory."""
        if storage_path not in self._videos:
            raise StorageError(f"Video not found: {storage_path}")
        return self._videos[storage_path]

    async def get_presigned_url(
        self,
        storage_path: str,
        expiry_seconds: int = 3600,
    ) -> str:
        """Return a mock URL for a stored video."""
        if storage_path not in self._videos:
            raise StorageError(f"Video not found: {storage_path}")
        return f"mock://storage/{storage_path}?expires={expiry_seconds}"

    async def delete_video(self, storage_path: str) -> None:
        """Drop a video from memory."""
        if self._videos.pop(storage_path, None) is None:
            raise StorageError(f"Video not found: {storage_path}")


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> StorageClient:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return mock client for testing

    Returns:
        StorageClient implementation (R2 or Mock)
    """
    if mock_mode:
        return MockStorageClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return R2StorageClient(config)
