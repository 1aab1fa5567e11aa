"""File storage service for local filesystem and S3 storage."""

import asyncio
import logging
import os
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from gameshare.config import settings

logger = logging.getLogger(__name__)

# S3 error codes worth retrying
TRANSIENT_S3_ERRORS = {
    "Throttling",
    "ThrottlingException",
    "SlowDown",
    "RequestTimeout",
    "InternalError",
    "ServiceUnavailable",
}


class StorageService:
    """Base class for blob storage backends.

    Keys are ``{prefix}/{random}.{extension}``; callers persist the key and
    resolve a public URL with ``get_url``.
    """

    def _generate_key(self, prefix: str, extension: str) -> str:
        """Generate a unique storage key."""
        unique_id = uuid.uuid4().hex[:12]
        return f"{prefix}/{unique_id}.{extension}"

    def get_url(self, key: str) -> str:
        raise NotImplementedError

    async def upload_file(
        self,
        data: bytes,
        prefix: str,
        extension: str,
        content_type: str | None = None,
    ) -> tuple[str, str]:
        """Upload a file and return (url, key)."""
        raise NotImplementedError

    async def delete_file(self, key: str) -> bool:
        raise NotImplementedError

    async def get_file(self, key: str) -> bytes | None:
        raise NotImplementedError

    async def file_exists(self, key: str) -> bool:
        raise NotImplementedError

    async def get_size(self, key: str) -> int | None:
        raise NotImplementedError

    async def get_modified(self, key: str) -> datetime | None:
        raise NotImplementedError

    async def list_files(self, prefix: str = "") -> list[str]:
        raise NotImplementedError


class LocalStorageService(StorageService):
    """Stores blobs under a local directory, served at ``/uploads``."""

    def __init__(self, upload_dir: str | Path | None = None) -> None:
        self.upload_dir = Path(upload_dir or settings.storage_path)
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def get_url(self, key: str) -> str:
        return f"/uploads/{key}"

    async def upload_file(
        self,
        data: bytes,
        prefix: str,
        extension: str,
        content_type: str | None = None,
    ) -> tuple[str, str]:
        """Upload a file and return (url, key).

        Args:
            data: File content as bytes
            prefix: Path prefix (e.g., "games")
            extension: File extension without dot (e.g., "jpg", "png")
            content_type: MIME type (unused for local files)

        Returns:
            Tuple of (public_url, storage_key)
        """
        key = self._generate_key(prefix, extension)
        file_path = self.upload_dir / key

        # Create parent directories (sync is OK here - just creates dirs)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(file_path, "wb") as f:
            await f.write(data)

        return self.get_url(key), key

    async def delete_file(self, key: str) -> bool:
        """Delete a file by key.

        Returns True if file was deleted, False if not found.
        """
        file_path = self.upload_dir / key
        if await aiofiles.os.path.exists(file_path):
            await aiofiles.os.remove(file_path)
            return True
        return False

    async def get_file(self, key: str) -> bytes | None:
        """Get file contents by key."""
        file_path = self.upload_dir / key
        if await aiofiles.os.path.exists(file_path):
            async with aiofiles.open(file_path, "rb") as f:
                return await f.read()
        return None

    async def file_exists(self, key: str) -> bool:
        """Check if a file exists."""
        return await aiofiles.os.path.exists(self.upload_dir / key)

    async def get_size(self, key: str) -> int | None:
        """Get file size in bytes, or None if missing."""
        file_path = self.upload_dir / key
        if await aiofiles.os.path.exists(file_path):
            return (await aiofiles.os.stat(file_path)).st_size
        return None

    async def get_modified(self, key: str) -> datetime | None:
        """Get the last modification time (UTC), or None if missing."""
        file_path = self.upload_dir / key
        if await aiofiles.os.path.exists(file_path):
            return datetime.fromtimestamp((await aiofiles.os.stat(file_path)).st_mtime, UTC)
        return None

    async def list_files(self, prefix: str = "") -> list[str]:
        """List all storage keys under a prefix (e.g., "games/")."""
        keys: list[str] = []
        base_path = self.upload_dir / prefix if prefix else self.upload_dir

        if not base_path.exists():
            return keys

        for root, _dirs, files in os.walk(base_path):
            for filename in files:
                file_path = Path(root) / filename
                keys.append(file_path.relative_to(self.upload_dir).as_posix())

        return keys


def _is_transient(exc: BaseException) -> bool:
    """Whether an S3 failure is worth retrying."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code") in TRANSIENT_S3_ERRORS
    return isinstance(exc, BotoCoreError)


_s3_retry = retry(
    retry=retry_if_exception(_is_transient),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, max=4),
    reraise=True,
)


class S3StorageService(StorageService):
    """Stores blobs in an S3 bucket.

    boto3 is synchronous, so every call runs in a worker thread.
    """

    def __init__(
        self,
        bucket: str,
        region: str,
        public_url: str = "",
        client: Any | None = None,
    ) -> None:
        self.bucket = bucket
        self.region = region
        self.public_url = public_url.rstrip("/") or f"https://{bucket}.s3.{region}.amazonaws.com"
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client("s3", region_name=self.region)
        return self._client

    def get_url(self, key: str) -> str:
        return f"{self.public_url}/{key}"

    @_s3_retry
    async def upload_file(
        self,
        data: bytes,
        prefix: str,
        extension: str,
        content_type: str | None = None,
    ) -> tuple[str, str]:
        """Upload a file and return (url, key)."""
        key = self._generate_key(prefix, extension)
        extra: dict[str, Any] = {}
        if content_type:
            extra["ContentType"] = content_type

        await asyncio.to_thread(
            self.client.put_object, Bucket=self.bucket, Key=key, Body=data, **extra
        )
        logger.debug(f"Uploaded s3://{self.bucket}/{key} ({len(data)} bytes)")
        return self.get_url(key), key

    async def _head(self, key: str) -> dict[str, Any] | None:
        try:
            return await asyncio.to_thread(self.client.head_object, Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in {"404", "NoSuchKey", "NotFound"}:
                return None
            raise

    @_s3_retry
    async def delete_file(self, key: str) -> bool:
        """Delete an object by key.

        Returns True if the object was deleted, False if not found.
        """
        if await self._head(key) is None:
            return False
        await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=key)
        return True

    @_s3_retry
    async def get_file(self, key: str) -> bytes | None:
        try:
            response = await asyncio.to_thread(
                self.client.get_object, Bucket=self.bucket, Key=key
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in {"404", "NoSuchKey", "NotFound"}:
                return None
            raise
        return await asyncio.to_thread(response["Body"].read)

    @_s3_retry
    async def file_exists(self, key: str) -> bool:
        return await self._head(key) is not None

    @_s3_retry
    async def get_size(self, key: str) -> int | None:
        head = await self._head(key)
        return head["ContentLength"] if head else None

    @_s3_retry
    async def get_modified(self, key: str) -> datetime | None:
        head = await self._head(key)
        return head["LastModified"] if head else None

    @_s3_retry
    async def list_files(self, prefix: str = "") -> list[str]:
        """List all object keys under a prefix."""

        def _list() -> list[str]:
            paginator = self.client.get_paginator("list_objects_v2")
            keys: list[str] = []
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
            return keys

        return await asyncio.to_thread(_list)


def get_storage() -> StorageService:
    """Build the storage backend selected in settings."""
    if settings.storage_backend == "s3":
        return S3StorageService(
            bucket=settings.s3_bucket,
            region=settings.s3_region,
            public_url=settings.s3_public_url,
        )
    return LocalStorageService()


# Global storage service instance
storage = get_storage()
