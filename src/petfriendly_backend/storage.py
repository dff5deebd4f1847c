"""
Storage for uploaded pet photos.

When a bucket is configured (``storage.s3_bucket`` / ``S3_BUCKET_NAME``) images
are uploaded to S3 and referenced by a presigned URL. Otherwise they are
written below ``storage.upload_dir`` and served by the application under
``/uploads``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .utils import ensure_directory, image_extension, sanitize_label

logger = logging.getLogger(__name__)

UPLOADS_URL_PREFIX = "/uploads"
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class StorageError(RuntimeError):
    """Raised when an image cannot be persisted."""


class ImageStorage:
    def __init__(
        self,
        upload_dir: Path,
        s3_bucket: str = "",
        presign_expiration: int = 604800,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ):
        self.upload_dir = Path(upload_dir)
        self.s3_bucket = s3_bucket or ""
        self.presign_expiration = presign_expiration
        self.max_upload_bytes = max_upload_bytes
        self._s3_client = None
        ensure_directory(self.upload_dir)

    @property
    def uses_s3(self) -> bool:
        return bool(self.s3_bucket)

    def _get_s3_client(self):
        if self._s3_client is None:
            self._s3_client = boto3.client("s3")
        return self._s3_client

    @staticmethod
    def build_key(pet_id: str, filename: Optional[str]) -> str:
        """Return ``pets/<pet_id>/<random>-<label><ext>`` for an uploaded file."""
        extension = image_extension(filename)
        label = sanitize_label(Path(filename or "").stem, "image")
        return f"pets/{pet_id}/{uuid4().hex[:12]}-{label}{extension}"

    def save(self, pet_id: str, filename: Optional[str], data: bytes, content_type: Optional[str] = None) -> str:
        """Persist ``data`` and return the URL clients should use to fetch it."""
        key = self.build_key(pet_id, filename)
        if self.uses_s3:
            return self._save_s3(key, data, content_type)
        return self._save_local(key, data)

    def _save_local(self, key: str, data: bytes) -> str:
        destination = self.upload_dir / key
        ensure_directory(destination.parent)
        destination.write_bytes(data)
        logger.info(f"Stored image locally at {destination}")
        return f"{UPLOADS_URL_PREFIX}/{key}"

    def _save_s3(self, key: str, data: bytes, content_type: Optional[str]) -> str:
        client = self._get_s3_client()
        extra = {"ContentType": content_type} if content_type else {}
        try:
            logger.info(f"Uploading image to s3://{self.s3_bucket}/{key}")
            client.put_object(Bucket=self.s3_bucket, Key=key, Body=data, **extra)
            url = client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.s3_bucket, "Key": key},
                ExpiresIn=self.presign_expiration,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 upload failed: {e}")
            raise StorageError(f"Could not store image: {e}") from e
        logger.info(f"Generated presigned URL for {key} (expires in {self.presign_expiration}s)")
        return url
