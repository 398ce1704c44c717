from typing import Optional

import boto3
from botocore.exceptions import ClientError

from .config import DOCX_CONTENT_TYPE, Settings
from .errors import StoreFailure
from .log import get_logger

logger = get_logger(__name__)

_MISSING_CODES = ("404", "NoSuchKey", "NotFound")


# ---------------------------------------------------------------------
# Object storage for generated exam documents (S3 / R2 compatible)
# ---------------------------------------------------------------------

class DocumentStorage:
    def __init__(self, settings: Settings, client=None):
        self.bucket = settings.storage_bucket
        self.public_base_url = settings.public_base_url
        self._settings = settings
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self._settings.storage_region,
                endpoint_url=self._settings.storage_endpoint,
                aws_access_key_id=self._settings.storage_access_key,
                aws_secret_access_key=self._settings.storage_secret_key,
            )
        return self._client

    def exists(self, key: str) -> bool:
        """
        Check whether the object is already cached
        """
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            code = (e.response.get("Error") or {}).get("Code")
            if code in _MISSING_CODES:
                return False
            logger.error("head_object failed for %s: %s", key, e)
            raise StoreFailure(f"Storage error: {e}")

    def upload(self, key: str, body: bytes, content_type: Optional[str] = None) -> None:
        """Write the object, replacing any previous version"""
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type or DOCX_CONTENT_TYPE,
            )
        except ClientError as e:
            logger.error("put_object failed for %s: %s", key, e)
            raise StoreFailure(f"Storage error: {e}")

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"
