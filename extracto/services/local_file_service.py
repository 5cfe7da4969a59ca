"""LocalFileService stores job files under the jobs directory on local disk."""

from pathlib import Path

from extracto.core.settings import Settings, get_settings
from extracto.core.utils import ensure_dir


class LocalFileService:
    """Service for local file operations with the same interface as S3FileService."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize LocalFileService rooted at the configured jobs directory."""
        settings = settings or get_settings()
        self.root = Path(settings.jobs_dir)
        ensure_dir(self.root)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root.resolve()):
            raise ValueError(f"Key escapes storage root: {key}")
        return path

    def upload_fileobj(self, key: str, data: bytes) -> None:
        """Write ``data`` under the given key."""
        path = self._path(key)
        ensure_dir(path.parent)
        path.write_bytes(data)

    def download_fileobj(self, key: str) -> bytes:
        """Read the file stored under ``key``; raises FileNotFoundError if missing."""
        return self._path(key).read_bytes()

    def file_exists(self, key: str) -> bool:
        """Check if a file exists under ``key``."""
        return self._path(key).is_file()
