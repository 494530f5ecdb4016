"""Blob store access.

This module provides:
- StorageError: a failed blob store call
- ObjectStore: Protocol for the two operations the resource needs
- BotoObjectStore: Real implementation using boto3
- MockObjectStore: In-memory implementation for testing
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pivnet_resource.core.errors import ResourceError
from pivnet_resource.core.result import Err, Ok, Result

if TYPE_CHECKING:
    from pivnet_resource.concourse.models import Source

__all__ = [
    "StorageError",
    "ObjectStore",
    "BotoObjectStore",
    "MockObjectStore",
]


@dataclass(frozen=True, slots=True)
class StorageError:
    bucket: str
    key: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (s3://{self.bucket}/{self.key})"

    def to_resource_error(self) -> ResourceError:
        return ResourceError(kind="storage_failed", message=str(self))


@runtime_checkable
class ObjectStore(Protocol):
    def upload_file(self, bucket: str, key: str, path: Path) -> Result[None, StorageError]:
        """Upload a local file to ``s3://bucket/key``."""
        ...

    def delete_file(self, bucket: str, key: str) -> Result[None, StorageError]:
        """Delete ``s3://bucket/key``. Deleting a missing key is not an error."""
        ...


class BotoObjectStore:
    """Object store backed by a boto3 S3 client."""

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_source(cls, source: Source) -> BotoObjectStore:
        # Imported here so check and in never pay for boto3's import time.
        import boto3
        from botocore.config import Config

        client = boto3.client(
            "s3",
            aws_access_key_id=source.access_key_id,
            aws_secret_access_key=source.secret_access_key,
            aws_session_token=source.session_token,
            region_name=source.region,
            endpoint_url=source.s3_endpoint,
            verify=not source.skip_ssl_verification,
            config=Config(s3={"addressing_style": "path"}),
        )
        return cls(client)

    def upload_file(self, bucket: str, key: str, path: Path) -> Result[None, StorageError]:
        from boto3.exceptions import S3UploadFailedError
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            self._client.upload_file(str(path), bucket, key)
        except (S3UploadFailedError, ClientError, BotoCoreError) as e:
            return Err(StorageError(bucket=bucket, key=key, message=str(e)))
        except OSError as e:
            return Err(StorageError(bucket=bucket, key=key, message=f"IO error: {e}"))
        return Ok(None)

    def delete_file(self, bucket: str, key: str) -> Result[None, StorageError]:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            self._client.delete_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            return Err(StorageError(bucket=bucket, key=key, message=str(e)))
        return Ok(None)


class MockObjectStore:
    """In-memory object store for testing.

    Usage:
        store = MockObjectStore()
        store.upload_file("bucket", "product_files/x/file.tgz", path)
        assert store.objects[("bucket", "product_files/x/file.tgz")] == path.read_bytes()
    """

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.deleted: list[tuple[str, str]] = []
        self.upload_error: str | None = None

    def upload_file(self, bucket: str, key: str, path: Path) -> Result[None, StorageError]:
        if self.upload_error is not None:
            return Err(StorageError(bucket=bucket, key=key, message=self.upload_error))
        try:
            self.objects[(bucket, key)] = path.read_bytes()
        except OSError as e:
            return Err(StorageError(bucket=bucket, key=key, message=f"IO error: {e}"))
        return Ok(None)

    def delete_file(self, bucket: str, key: str) -> Result[None, StorageError]:
        self.objects.pop((bucket, key), None)
        self.deleted.append((bucket, key))
        return Ok(None)
