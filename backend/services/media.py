"""
Media upload service.

Stores uploaded photos/videos and the rendered recap under per-walk keys and
returns the references persisted on the walk.
"""
import logging
import re
import uuid
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Callable, Optional

from PIL import Image
from pillow_heif import register_heif_opener as _register_heif

from domain.models import MediaType, WalkMedia
from services.remote_images import RemoteImageError, decode_image, fetch_image
from storage.file_storage import FileStorage

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^\w.\-]+", re.ASCII)
HEIC_TYPES = ("image/heic", "image/heif", "image/heic-sequence", "image/heif-sequence")
RECAP_FILENAME = "recap.png"


def register_heif_opener() -> bool:
    """Register the HEIF/HEIC opener with Pillow (iPhone photos)."""
    _register_heif()
    return True


def infer_media_type(content_type: Optional[str]) -> MediaType:
    return MediaType.VIDEO if (content_type or "").startswith("video/") else MediaType.IMAGE


def safe_file_name(name: Optional[str]) -> str:
    """Replace runs of characters outside [A-Za-z0-9_.-] with a single underscore."""
    return _UNSAFE_CHARS.sub("_", name or "file") or "file"


def walk_media_path(walk_id: str, filename: str) -> str:
    return f"walks/{walk_id}/{filename}"


def is_heic_file(filename: Optional[str], content_type: Optional[str] = None) -> bool:
    """Check if a file is a HEIC/HEIF image by extension or MIME type."""
    if filename and Path(filename).suffix.lower() in (".heic", ".heif"):
        return True
    return bool(content_type) and content_type.lower() in HEIC_TYPES


def convert_heic_to_jpeg(file_bytes: bytes, quality: int = 90) -> bytes:
    """
    Convert HEIC/HEIF image bytes to JPEG.

    Raises:
        OSError/ValueError if the bytes cannot be decoded
    """
    img = Image.open(BytesIO(file_bytes))
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    output = BytesIO()
    img.save(output, format="JPEG", quality=quality, optimize=True)
    return output.getvalue()


def _change_extension(filename: str, new_ext: str) -> str:
    return str(Path(filename).with_suffix(new_ext)) if Path(filename).suffix else filename + new_ext


def upload_media(
    storage: FileStorage,
    walk_id: str,
    filename: Optional[str],
    content_type: Optional[str],
    data: bytes,
    now: Optional[datetime] = None,
) -> WalkMedia:
    """
    Store one uploaded file for a walk and describe it.

    HEIC photos are converted to JPEG first so every stored image can be
    decoded by the recap renderer.
    """
    media_type = infer_media_type(content_type)
    original_name = filename or ""

    if media_type == MediaType.IMAGE and is_heic_file(original_name, content_type):
        try:
            data = convert_heic_to_jpeg(data)
            original_name = _change_extension(original_name or "photo", ".jpg")
            content_type = "image/jpeg"
        except (OSError, ValueError) as exc:
            # keep the original bytes; the recap will show a placeholder for it
            logger.warning("[media] HEIC conversion failed for %s: %s", filename, exc)

    stored_name = f"{uuid.uuid4()}-{safe_file_name(original_name or media_type.value)}"
    path = walk_media_path(walk_id, stored_name)
    stored_type = content_type or ("video/mp4" if media_type == MediaType.VIDEO else "image/jpeg")
    storage.upload_bytes(path, data, stored_type)

    created = now or datetime.now(timezone.utc)
    return WalkMedia(
        url=storage.get_public_url(path),
        path=path,
        type=media_type,
        content_type=content_type or "",
        name=original_name or stored_name,
        size=len(data),
        created_at=created.isoformat(),
    )


def upload_recap_image(storage: FileStorage, walk_id: str, png_bytes: bytes) -> str:
    """Store the rendered recap at a fixed per-walk key and return its public URL."""
    path = walk_media_path(walk_id, RECAP_FILENAME)
    storage.upload_bytes(path, png_bytes, "image/png")
    return storage.get_public_url(path)


def make_media_fetcher(storage: FileStorage) -> Callable[[str], Image.Image]:
    """
    Image fetcher for the renderers that reads this service's own media
    straight from storage and falls back to HTTP for everything else.
    """
    prefix = storage.public_base_url + "/"

    def fetch(url: str) -> Image.Image:
        if url.startswith(prefix):
            path = url[len(prefix):]
            try:
                return decode_image(storage.read_bytes(path))
            except (OSError, ValueError) as exc:
                raise RemoteImageError(f"Failed to read stored media {path}: {exc}") from exc
        return fetch_image(url)

    return fetch
