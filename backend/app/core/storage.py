"""
Storage for uploaded raw files.

Uploaded files are kept on the local filesystem so they can be listed and
deleted later. Configure the location via UPLOAD_DIR.
"""
import time
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from app.core.config import get_settings
from app.core.sanitization import sanitize_filename
from app.core.schemas import UploadedFile

logger = logging.getLogger(__name__)


class UploadStore(ABC):
    """Abstract base class for upload stores."""

    @abstractmethod
    def save(self, filename: str, content: bytes) -> Path:
        """Store content under a unique name derived from filename. Returns the stored path."""

    @abstractmethod
    def list_files(self) -> List[UploadedFile]:
        """List stored files, oldest first."""

    @abstractmethod
    def delete(self, filename: str) -> bool:
        """Delete a stored file. Returns True if it existed."""


class LocalDiskStore(UploadStore):
    """Uploads stored as '<epoch-ms>-<name>' in a single directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _resolve(self, filename: str) -> Path:
        # Only bare names inside the upload directory are addressable
        return self.directory / sanitize_filename(filename)

    def save(self, filename: str, content: bytes) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        stored_name = f"{int(time.time() * 1000)}-{sanitize_filename(filename)}"
        path = self.directory / stored_name
        path.write_bytes(content)
        logger.info(f"Stored upload as {stored_name} ({len(content)} bytes)")
        return path

    def list_files(self) -> List[UploadedFile]:
        if not self.directory.exists():
            return []

        files = []
        for path in sorted(self.directory.iterdir()):
            if not path.is_file():
                continue
            stat = path.stat()
            files.append(UploadedFile(
                file_name=path.name,
                upload_time=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                size=stat.st_size,
                path=str(path),
            ))
        return files

    def delete(self, filename: str) -> bool:
        path = self._resolve(filename)
        if not path.is_file():
            return False
        path.unlink()
        logger.info(f"Deleted upload {path.name}")
        return True


_store_instance: Optional[UploadStore] = None


def get_store() -> UploadStore:
    """Get the configured upload store (singleton)."""
    global _store_instance
    if _store_instance is None:
        _store_instance = LocalDiskStore(get_settings().upload_path)
    return _store_instance


def reset_store():
    """Reset the store instance (for testing)."""
    global _store_instance
    _store_instance = None
