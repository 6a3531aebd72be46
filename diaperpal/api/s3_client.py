"""S3 client for uploading changing station photos.

Uses boto3 with asyncio.to_thread to avoid blocking the event loop.
Photos are stored at: restrooms/<restroom_id>/photos/<photo_id>.<ext>
"""
import asyncio
import logging
import time
import uuid

import boto3
from botocore.exceptions import ClientError

from diaperpal.metrics import (
    S3_UPLOADS_TOTAL,
    S3_UPLOAD_DURATION_SECONDS,
)

logger = logging.getLogger(__name__)

CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class S3Client:
    """Async-friendly S3 client for station photo storage."""

    def __init__(
        self,
        bucket: str,
        region: str,
        access_key_id: str,
        secret_access_key: str,
    ):
        self.bucket = bucket
        self.region = region
        self._s3 = boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )

    @staticmethod
    def is_supported_content_type(content_type: str) -> bool:
        return content_type in CONTENT_TYPE_EXTENSIONS

    def public_url(self, s3_key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{s3_key}"

    async def upload_photo_bytes(
        self,
        restroom_id: str,
        photo_bytes: bytes,
        content_type: str = "image/jpeg",
    ) -> tuple[str, str, str]:
        """Upload photo bytes to S3.

        Args:
            restroom_id: Restroom the photo belongs to
            photo_bytes: Raw photo bytes
            content_type: MIME type of the photo

        Returns:
            Tuple of (photo_id, s3_key, s3_url)

        Raises:
            ValueError: if the content type is not an accepted image type
            ClientError: if the upload fails
        """
        ext = CONTENT_TYPE_EXTENSIONS.get(content_type)
        if ext is None:
            raise ValueError(f"Unsupported content type: {content_type}")

        photo_id = str(uuid.uuid4())
        s3_key = f"restrooms/{restroom_id}/photos/{photo_id}.{ext}"
        s3_url = self.public_url(s3_key)

        start_time = time.perf_counter()
        try:
            await asyncio.to_thread(
                self._s3.put_object,
                Bucket=self.bucket,
                Key=s3_key,
                Body=photo_bytes,
                ContentType=content_type,
            )
            duration = time.perf_counter() - start_time
            S3_UPLOAD_DURATION_SECONDS.observe(duration)
            S3_UPLOADS_TOTAL.labels(status="success").inc()
            logger.debug(f"[S3Client] Uploaded {s3_key} ({len(photo_bytes)} bytes)")
            return photo_id, s3_key, s3_url

        except ClientError as e:
            duration = time.perf_counter() - start_time
            S3_UPLOAD_DURATION_SECONDS.observe(duration)
            S3_UPLOADS_TOTAL.labels(status="error").inc()
            logger.error(f"[S3Client] Failed to upload {s3_key}: {e}")
            raise
