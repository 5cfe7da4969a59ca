"""S3FileService keeps statement uploads and generated workbooks in an S3 bucket.

Keys are the same relative keys the local backend uses (``uploads/<job>.pdf``,
``outputs/<job>.xlsx``), optionally under ``S3_PREFIX``.
"""

import boto3
from botocore.exceptions import ClientError

from extracto.core.settings import Settings, get_settings
from extracto.core.utils import get_logger
from extracto.services.spreadsheet import XLSX_MEDIA_TYPE

logger = get_logger("extracto.storage.s3")

CONTENT_TYPES = {".pdf": "application/pdf", ".xlsx": XLSX_MEDIA_TYPE}
_MISSING_CODES = {"404", "NoSuchKey", "NoSuchBucket", "NotFound"}


def _is_missing(exc: ClientError) -> bool:
    return str(exc.response.get("Error", {}).get("Code")) in _MISSING_CODES


class S3FileService:
    """Storage backend for job files on S3 or an S3-compatible server."""

    def __init__(self, settings: Settings | None = None, client: object | None = None) -> None:
        """Connect to the bucket named in settings, creating it when it does not exist."""
        settings = settings or get_settings()
        self.s3 = client or boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL,
            aws_access_key_id=settings.S3_ACCESS_KEY,
            aws_secret_access_key=settings.S3_SECRET_KEY,
        )
        self.bucket = settings.S3_BUCKET
        self.prefix = settings.S3_PREFIX.strip("/")
        self.ensure_bucket()

    def _key(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else str(key)

    def ensure_bucket(self) -> None:
        """Create the bucket if it is missing; other errors (e.g. access denied) propagate."""
        try:
            self.s3.head_bucket(Bucket=self.bucket)
        except ClientError as exc:
            if not _is_missing(exc):
                raise
            logger.info(f"Creating bucket {self.bucket}")
            self.s3.create_bucket(Bucket=self.bucket)

    def upload_fileobj(self, key: str, data: bytes) -> None:
        """Store ``data`` under ``key`` with a content type taken from its extension."""
        extra = {}
        for suffix, content_type in CONTENT_TYPES.items():
            if key.endswith(suffix):
                extra["ContentType"] = content_type
        self.s3.put_object(Bucket=self.bucket, Key=self._key(key), Body=data, **extra)

    def download_fileobj(self, key: str) -> bytes:
        """Read the object stored under ``key``; raises FileNotFoundError if missing."""
        try:
            obj = self.s3.get_object(Bucket=self.bucket, Key=self._key(key))
        except ClientError as exc:
            if _is_missing(exc):
                raise FileNotFoundError(key) from exc
            raise
        return obj["Body"].read()

    def file_exists(self, key: str) -> bool:
        """Check whether an object is stored under ``key``."""
        try:
            self.s3.head_object(Bucket=self.bucket, Key=self._key(key))
        except ClientError as exc:
            if _is_missing(exc):
                return False
            raise
        return True
