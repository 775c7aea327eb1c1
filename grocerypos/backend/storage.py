"""
Filesystem object storage for product images.
"""
import logging
from pathlib import Path

from grocerypos.backend.errors import StorageError

logger = logging.getLogger(__name__)


class ObjectStorage:
    """Buckets are directories under ``root_dir``; objects are served from ``public_base_url``."""

    def __init__(self, root_dir: str, public_base_url: str):
        self.root = Path(root_dir)
        self.public_base_url = public_base_url.rstrip("/")

    def _object_path(self, bucket: str, name: str) -> Path:
        if not name or "/" in name or "\\" in name or name.startswith("."):
            raise StorageError(f"Invalid object name: {name!r}")
        return self.root / bucket / name

    async def upload(self, bucket: str, name: str, data: bytes) -> str:
        """Store a new object and return its name. Existing objects are never overwritten."""
        path = self._object_path(bucket, name)
        if path.exists():
            raise StorageError("The resource already exists")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to upload {bucket}/{name}: {e}")
            raise StorageError("Failed to upload file") from e

        logger.info(f"Uploaded {bucket}/{name} ({len(data)} bytes)")
        return name

    def get_public_url(self, bucket: str, name: str) -> str:
        return f"{self.public_base_url}/{bucket}/{name}"
