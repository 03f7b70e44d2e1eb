"""
File storage abstraction.

Provides the object-store contract used by the walk service: upload bytes
under a key, hand back a public URL for that key.
Currently uses local filesystem served from the /media mount.
"""
import logging
from pathlib import Path
from typing import Optional

from settings import settings

logger = logging.getLogger(__name__)


class FileStorage:
    """
    Local file storage implementation.

    Objects are organized as:
    - media/walks/{walk_id}/{uuid}-{name}  - Uploaded photos and videos
    - media/walks/{walk_id}/recap.png      - Rendered recap image
    """

    def __init__(self, media_root: Optional[str] = None, public_base_url: Optional[str] = None):
        self.media_root = Path(media_root or settings.MEDIA_ROOT)
        self.media_root.mkdir(parents=True, exist_ok=True)
        self.public_base_url = (
            public_base_url if public_base_url is not None else settings.MEDIA_PUBLIC_BASE_URL
        ).rstrip("/")

    def resolve(self, path: str) -> Path:
        """Map an object key to its file, refusing keys outside the media root."""
        root = self.media_root.resolve()
        target = (root / path).resolve()
        if target != root and root not in target.parents:
            raise ValueError(f"Storage path escapes media root: {path}")
        return target

    def upload_bytes(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        """
        Store raw bytes under the given key.

        Args:
            path: Object key, e.g. "walks/{walk_id}/{filename}"
            data: Bytes to store
            content_type: MIME type (kept for parity with hosted stores)

        Returns:
            The object key
        """
        target = self.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("[storage] stored %s (%d bytes, %s)", path, len(data), content_type or "n/a")
        return path

    def get_public_url(self, path: str) -> str:
        """Public URL for a stored object."""
        return f"{self.public_base_url}/{path.lstrip('/')}"

    def read_bytes(self, path: str) -> bytes:
        return self.resolve(path).read_bytes()

    def exists(self, path: str) -> bool:
        """Check if an object exists."""
        return self.resolve(path).exists()

    def delete(self, path: str) -> None:
        """Remove an object; missing objects are ignored."""
        self.resolve(path).unlink(missing_ok=True)
        logger.info("[storage] deleted %s", path)
