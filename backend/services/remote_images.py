"""
Remote image fetching for the recap and share-card renderers, plus the
allow-list used by the same-origin media proxy.
"""
from __future__ import annotations

import logging
from io import BytesIO
from typing import Iterable, Optional
from urllib.parse import quote

import requests
from PIL import Image, ImageOps, UnidentifiedImageError

from settings import settings

logger = logging.getLogger(__name__)
_session = requests.Session()

MEDIA_PROXY_PATH = "/api/media-proxy"


class RemoteImageError(Exception):
    """A remote image could not be fetched or decoded."""


def fetch_bytes(url: str, timeout: Optional[float] = None) -> requests.Response:
    """GET a URL, raising RemoteImageError on transport or HTTP failure."""
    try:
        resp = _session.get(url, timeout=timeout or settings.HTTP_TIMEOUT)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise RemoteImageError(f"Failed to fetch {url}: {exc}") from exc
    return resp


def decode_image(data: bytes) -> Image.Image:
    """Decode image bytes to an upright RGB image."""
    try:
        img = Image.open(BytesIO(data))
        img = ImageOps.exif_transpose(img)
        return img.convert("RGB")
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise RemoteImageError(f"Failed to decode image: {exc}") from exc


def fetch_image(url: str, timeout: Optional[float] = None) -> Image.Image:
    """Fetch and decode a remote image."""
    resp = fetch_bytes(url, timeout=timeout)
    return decode_image(resp.content)


def is_allowed_media_url(url: str, prefixes: Optional[Iterable[str]] = None) -> bool:
    """True when url starts with one of the allow-listed storage prefixes."""
    if not url:
        return False
    if prefixes is not None:
        allowed = tuple(prefixes)
    else:
        allowed = settings.MEDIA_PROXY_ALLOWED_PREFIXES
        if settings.MEDIA_PUBLIC_BASE_URL.startswith(("http://", "https://")):
            allowed += (settings.MEDIA_PUBLIC_BASE_URL + "/",)
    return any(url.startswith(prefix) for prefix in allowed)


def maybe_proxy_url(url: str) -> str:
    """Route allow-listed storage URLs through the same-origin media proxy."""
    if url and is_allowed_media_url(url):
        return f"{MEDIA_PROXY_PATH}?url={quote(url, safe='')}"
    return url
