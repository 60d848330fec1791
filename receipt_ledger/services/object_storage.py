"""
Object storage for uploaded receipt files.

S3 is used when S3_BUCKET_NAME is configured; otherwise files are kept in
process memory so the service runs locally without AWS.
"""

from typing import Dict, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from ..core.config import settings
from ..core.errors import UpstreamUnavailable


class ObjectStorage(Protocol):
    def put(self, key: str, data: bytes, content_type: str) -> None: ...

    def get(self, key: str) -> bytes: ...


class S3ObjectStorage:
    """Stores receipt files in an S3 bucket."""

    def __init__(self, bucket_name: str, client: Optional[object] = None):
        """
        Args:
            bucket_name: Target bucket
            client: boto3 S3 client (created from settings if None)
        """
        self.bucket_name = bucket_name
        self.client = client or boto3.client(
            "s3",
            region_name=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )

    def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self.client.put_object(Bucket=self.bucket_name, Key=key, Body=data, ContentType=content_type)
        except (ClientError, BotoCoreError) as e:
            logger.error("Error uploading to S3", key=key, error=str(e))
            raise UpstreamUnavailable("s3", str(e)) from e
        logger.info("Uploaded receipt to S3", bucket=self.bucket_name, key=key, size_bytes=len(data))

    def get(self, key: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=key)
            return response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            logger.error("Error getting object from S3", key=key, error=str(e))
            raise UpstreamUnavailable("s3", str(e)) from e


class InMemoryObjectStorage:
    """Keeps receipt files in a dict (for local runs and tests)."""

    def __init__(self):
        self._objects: Dict[str, tuple[bytes, str]] = {}

    def put(self, key: str, data: bytes, content_type: str) -> None:
        self._objects[key] = (data, content_type)

    def get(self, key: str) -> bytes:
        if key not in self._objects:
            raise UpstreamUnavailable("object storage", f"No object stored under {key}")
        return self._objects[key][0]


def create_object_storage() -> ObjectStorage:
    if settings.s3_bucket_name:
        return S3ObjectStorage(settings.s3_bucket_name)

    logger.warning(
        "S3_BUCKET_NAME not configured - keeping uploaded receipts in memory"
    )
    return InMemoryObjectStorage()
