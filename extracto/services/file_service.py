"""File storage for conversion jobs, backed by S3 or the local jobs directory."""

import uuid
from typing import Protocol

from extracto.core.settings import Settings, get_settings
from extracto.services.local_file_service import LocalFileService
from extracto.services.s3_file_service import S3FileService


class StorageBackend(Protocol):
    """Operations a storage backend must provide."""

    def upload_fileobj(self, key: str, data: bytes) -> None: ...

    def download_fileobj(self, key: str) -> bytes: ...

    def file_exists(self, key: str) -> bool: ...


class FileService:
    """Service for file operations over a pluggable storage backend."""

    def __init__(self, backend: StorageBackend) -> None:
        """Initialize FileService with a storage backend instance."""
        self.backend = backend

    def save_file(self, key: str, data: bytes) -> None:
        """Save a file under the given key."""
        self.backend.upload_fileobj(key, data)

    def get_file(self, key: str) -> bytes:
        """Retrieve a file by key."""
        return self.backend.download_fileobj(key)

    def file_exists(self, key: str) -> bool:
        """Check if a file exists by key."""
        return self.backend.file_exists(key)


def make_file_service(settings: Settings | None = None) -> FileService:
    """Build a FileService for the configured ``storage_backend``."""
    settings = settings or get_settings()
    if settings.storage_backend == "s3":
        return FileService(S3FileService(settings))
    return FileService(LocalFileService(settings))


def save_upload(file_service: FileService, data: bytes, suffix: str = ".pdf") -> tuple[str, str, str]:
    """Store an uploaded statement and return job_id, input key, and output key."""
    job_id = str(uuid.uuid4())
    in_key = f"uploads/{job_id}{suffix}"
    out_key = f"outputs/{job_id}.xlsx"
    file_service.save_file(in_key, data)
    return job_id, in_key, out_key
