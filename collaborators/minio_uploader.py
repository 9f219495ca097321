"""
Processed-image uploads to an S3-compatible store through the MinIO client.

The MinIO client is synchronous; uploads run in a worker thread.
The returned URL is either public (MINIO_PUBLIC_BASE_URL/<bucket>/<key>)
or a presigned GET URL when no public base is configured.
"""
from __future__ import annotations

import asyncio
import io
import logging
from datetime import timedelta
from typing import Optional

from minio import Minio
from minio.error import S3Error

from collaborators.base import ImageUploader

logger = logging.getLogger(__name__)


class MinioImageUploader(ImageUploader):

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        secure: bool = False,
        public_base_url: Optional[str] = None,
        url_expiry: timedelta = timedelta(hours=24),
    ) -> None:
        self.name = f"minio/{bucket}"
        self.client = Minio(endpoint, access_key=access_key, secret_key=secret_key, secure=secure)
        self.bucket_name = bucket
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.url_expiry = url_expiry
        self.initialized = False

    async def upload_image(self, image_bytes: bytes, key: str, content_type: str) -> str:
        return await asyncio.to_thread(self._upload, image_bytes, key, content_type)

    def ensure_bucket(self) -> None:
        """Create the bucket on first use."""
        if self.initialized:
            return
        try:
            if not self.client.bucket_exists(self.bucket_name):
                logger.info("Creating bucket: %s", self.bucket_name)
                self.client.make_bucket(self.bucket_name)
            self.initialized = True
        except S3Error as exc:
            logger.error("Failed to initialize bucket %s: %s", self.bucket_name, exc)
            raise RuntimeError(f"Storage initialization failed: {exc}") from exc

    def _upload(self, image_bytes: bytes, key: str, content_type: str) -> str:
        self.ensure_bucket()
        try:
            self.client.put_object(
                self.bucket_name,
                key,
                io.BytesIO(image_bytes),
                length=len(image_bytes),
                content_type=content_type,
            )
        except S3Error as exc:
            logger.error("Upload of %s failed: %s", key, exc)
            raise RuntimeError(f"Upload failed: {exc}") from exc

        logger.info("[%s] Uploaded %s (%d bytes)", self.name, key, len(image_bytes))
        return self.url_for(key)

    def url_for(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{self.bucket_name}/{key}"
        return self.client.presigned_get_object(self.bucket_name, key, expires=self.url_expiry)
