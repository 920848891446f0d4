"""
S3 object storage for project documents.
Issues presigned upload URLs and builds public URLs for stored keys.
"""
import os
import re
from typing import Optional
from uuid import uuid4

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

from artify.core.config import config
from artify.core.logging import get_logger
from artify.models.schemas import UploadLocation

logger = get_logger("storage")


def split_filename(filename: str) -> tuple[str, str]:
    """Return (stem, extension) with the extension lower-cased and without the dot."""
    base = os.path.basename(filename or "")
    stem, ext = os.path.splitext(base)
    return stem, ext.lstrip(".").lower()


def generate_key(filename: str) -> str:
    """
    Build a collision-resistant object key from the original filename,
    e.g. ``'Final Cut.MP4'`` -> ``'3f2a...-final-cut.mp4'``.
    """
    stem, ext = split_filename(filename)
    slug = re.sub(r"[^a-z0-9]+", "-", stem.lower()).strip("-") or "file"
    key = f"{uuid4().hex}-{slug}"
    return f"{key}.{ext}" if ext else key


def public_url(key: str, bucket: Optional[str] = None, region: Optional[str] = None) -> str:
    bucket = bucket or config.UPLOAD_BUCKET
    region = region or config.AWS_REGION
    return f"https://{bucket}.s3.{region}.amazonaws.com/{key}"


class ObjectStorage:
    """Thin wrapper over the S3 client used by the document endpoints."""

    def __init__(self, bucket: Optional[str] = None, region: Optional[str] = None, client=None):
        self.bucket = bucket or config.UPLOAD_BUCKET
        self.region = region or config.AWS_REGION
        # S3 client with custom signature version for presigned URLs
        self.client = client or boto3.client(
            's3',
            region_name=self.region,
            config=BotoConfig(signature_version='s3v4'),
        )

    def presigned_put_url(self, key: str, content_type: Optional[str] = None, bucket: Optional[str] = None) -> str:
        params = {'Bucket': bucket or self.bucket, 'Key': key}
        if content_type:
            params['ContentType'] = content_type
        try:
            url = self.client.generate_presigned_url(
                'put_object',
                Params=params,
                ExpiresIn=config.UPLOAD_URL_EXPIRY,
            )
        except ClientError as e:
            logger.error(f"Error generating upload URL for {key}: {e}")
            raise
        logger.info(f"Generated upload URL for {key}")
        return url

    def request_upload_location(self, filename: str, content_type: Optional[str] = None) -> UploadLocation:
        """Pick a fresh key for ``filename`` and sign a PUT URL for it."""
        _, extension = split_filename(filename)
        key = generate_key(filename)
        return UploadLocation(
            key=key,
            bucket=self.bucket,
            region=self.region,
            extension=extension,
            upload_url=self.presigned_put_url(key, content_type),
        )


_storage: Optional[ObjectStorage] = None


def get_object_storage() -> ObjectStorage:
    global _storage
    if _storage is None:
        _storage = ObjectStorage()
    return _storage
