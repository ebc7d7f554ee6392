"""S3-compatible storage backend (hosted provider S3 endpoint or AWS S3)."""

from __future__ import annotations

import structlog

from pictoria.errors import UpstreamError

from .base import StorageBackend

logger = structlog.get_logger(__name__)


class S3StorageBackend(StorageBackend):
    """
    boto3 backend for the hosted storage provider's S3 endpoint.

    - S3v4 signatures
    - Presigned URLs so the training provider downloads datasets directly
    """

    def __init__(
        self,
        endpoint_url: str,
        access_key: str,
        secret_key: str,
        region: str = "us-east-1",
    ) -> None:
        import boto3
        from botocore.config import Config

        self._client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            config=Config(
                signature_version="s3v4",
                s3={"addressing_style": "path"},
            ),
        )
        logger.info("s3_backend.initialized", endpoint=endpoint_url, region=region)

    def upload_bytes(
        self,
        data: bytes,
        object_key: str,
        bucket: str,
        content_type: str = "application/octet-stream",
    ) -> str:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            self._client.put_object(
                Bucket=bucket,
                Key=object_key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamError("storage.upload", f"Failed to upload {object_key}: {exc}", retryable=True) from exc
        logger.debug("s3.uploaded_bytes", key=object_key, bucket=bucket, size=len(data))
        return object_key

    def delete_object(self, object_key: str, bucket: str) -> None:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            self._client.delete_object(Bucket=bucket, Key=object_key)
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamError("storage.delete", f"Failed to delete {object_key}: {exc}", retryable=True) from exc
        logger.debug("s3.deleted", key=object_key, bucket=bucket)

    def get_presigned_url(self, object_key: str, bucket: str, expiry: int = 3600) -> str | None:
        if not self.object_exists(object_key, bucket):
            logger.warning("s3.presign_missing_object", key=object_key, bucket=bucket)
            return None
        url = self._client.generate_presigned_url(
            "get_object",
            Params={"Bucket": bucket, "Key": object_key},
            ExpiresIn=expiry,
        )
        logger.debug("s3.presigned_url_generated", key=object_key, bucket=bucket, expiry=expiry)
        return url

    def object_exists(self, object_key: str, bucket: str) -> bool:
        from botocore.exceptions import ClientError

        try:
            self._client.head_object(Bucket=bucket, Key=object_key)
            return True
        except ClientError:
            return False
