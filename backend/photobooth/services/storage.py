"""Object storage for original and generated images."""
import logging
import time
import uuid
from typing import Any, Optional, Protocol

import boto3
from botocore.config import Config

from photobooth.core.config import Settings

logger = logging.getLogger(__name__)

PUBLIC_READ_ACL = "public-read"


class BlobStore(Protocol):
    """Writes bytes under a key and returns their public URL."""

    def upload(self, key: str, data: bytes, content_type: str) -> str:
        ...


def extension_for(content_type: str) -> str:
    """File extension from a MIME type: ``image/jpeg`` -> ``jpeg``."""
    subtype = content_type.split(";", 1)[0].partition("/")[2]
    return subtype.split("+", 1)[0].strip().lower() or "bin"


def make_object_key(variant: str, kind: str, content_type: str) -> str:
    """Collision-resistant key: ``{variant}-{kind}-{epoch_ms}-{random}.{ext}``.

    Args:
        variant: Variant name, e.g. ``yearbook``.
        kind: ``original`` or ``generated``.
        content_type: MIME type of the stored bytes.
    """
    millis = int(time.time() * 1000)
    return f"{variant}-{kind}-{millis}-{uuid.uuid4().hex[:8]}.{extension_for(content_type)}"


class S3BlobStore:
    """BlobStore backed by an S3-compatible bucket."""

    def __init__(
        self,
        bucket: str,
        client: Any,
        public_base_url: str = "",
        public_read: bool = True,
    ) -> None:
        self.bucket = bucket
        self.client = client
        self.public_base_url = public_base_url.rstrip("/")
        self.public_read = public_read

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3BlobStore":
        session = boto3.session.Session(
            aws_access_key_id=settings.blob_access_key_id or None,
            aws_secret_access_key=settings.blob_secret_access_key or None,
        )
        client = session.client(
            "s3",
            endpoint_url=settings.blob_endpoint_url or None,
            config=Config(region_name=settings.blob_region),
        )
        base_url = settings.blob_public_base_url or _default_base_url(settings)
        return cls(
            bucket=settings.blob_bucket,
            client=client,
            public_base_url=base_url,
            public_read=settings.blob_public_read,
        )

    def upload(self, key: str, data: bytes, content_type: str) -> str:
        """Write ``data`` under ``key`` and return its public URL."""
        extra: dict[str, str] = {"ContentType": content_type}
        if self.public_read:
            extra["ACL"] = PUBLIC_READ_ACL
        self.client.put_object(Bucket=self.bucket, Key=key, Body=data, **extra)
        logger.debug("Uploaded %s (%d bytes) to %s", key, len(data), self.bucket)
        return self.public_url(key)

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"


def _default_base_url(settings: Settings) -> str:
    endpoint: Optional[str] = settings.blob_endpoint_url.rstrip("/") or None
    if endpoint:
        return f"{endpoint}/{settings.blob_bucket}"
    return f"https://{settings.blob_bucket}.s3.{settings.blob_region}.amazonaws.com"
