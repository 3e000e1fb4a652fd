"""Blob storage for uploaded videos and thumbnails.

``S3ObjectStore`` talks to AWS S3 or any S3-compatible endpoint (MinIO,
localstack) through boto3. Object keys are random so that user-supplied file
names can never overwrite or address existing objects.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any, Optional, Protocol
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from videohost.core.config import settings
from videohost.core.errors import UploadError
from videohost.metrics import OBJECT_STORE_UPLOAD_DURATION_SECONDS

logger = logging.getLogger(__name__)

_EXTENSION_RE = re.compile(r"^[A-Za-z0-9]{1,10}$")


class ObjectStore(Protocol):
    async def upload(
        self, data: bytes, content_type: Optional[str], filename: Optional[str]
    ) -> str:
        """Store *data* and return a publicly resolvable URL."""
        ...


def generate_object_key(filename: Optional[str]) -> str:
    """Return ``<random hex>[.<ext>]`` for an uploaded file.

    Only the extension of the original name survives, and only when it is a
    short alphanumeric token.
    """

    key = uuid4().hex
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[1]
        if _EXTENSION_RE.match(ext):
            key = f"{key}.{ext.lower()}"
    return key


class S3ObjectStore:
    def __init__(
        self,
        client: Any,
        bucket: str,
        *,
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
        acl: Optional[str] = "public-read",
    ) -> None:
        self._client = client
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url
        self.acl = acl

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def _put(self, key: str, data: bytes, content_type: Optional[str]) -> None:
        params: dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": data,
            "ContentLength": len(data),
            "ContentType": content_type or "application/octet-stream",
        }
        if self.acl:
            params["ACL"] = self.acl
        self._client.put_object(**params)

    async def upload(
        self, data: bytes, content_type: Optional[str], filename: Optional[str]
    ) -> str:
        key = generate_object_key(filename)
        start = time.perf_counter()
        try:
            # boto3 is blocking; keep it off the event loop.
            await asyncio.to_thread(self._put, key, data, content_type)
        except (BotoCoreError, ClientError) as exc:
            logger.error("Upload of %s to bucket %s failed: %s", key, self.bucket, exc)
            raise UploadError("An exception occurred while uploading the file") from exc
        finally:
            OBJECT_STORE_UPLOAD_DURATION_SECONDS.observe(time.perf_counter() - start)

        url = self.public_url(key)
        logger.info("Stored %d bytes as %s", len(data), key)
        return url


_object_store: Optional[S3ObjectStore] = None


def get_object_store() -> S3ObjectStore:
    global _object_store
    if _object_store is None:
        client = boto3.client(
            "s3",
            region_name=settings.S3_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        )
        _object_store = S3ObjectStore(
            client,
            settings.S3_BUCKET_NAME,
            region=settings.S3_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            public_base_url=settings.S3_PUBLIC_BASE_URL,
            acl=settings.S3_OBJECT_ACL,
        )
    return _object_store
