"""
Same-origin media proxy for allow-listed storage hosts.
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from services.remote_images import RemoteImageError, fetch_bytes, is_allowed_media_url

logger = logging.getLogger(__name__)

router = APIRouter()

PROXY_CACHE_CONTROL = "public, max-age=3600"


@router.get("/media-proxy")
def media_proxy(url: Optional[str] = None):
    """Stream bytes from an allow-listed storage URL back to the browser."""
    if not url:
        raise HTTPException(status_code=400, detail="Missing url")
    if not is_allowed_media_url(url):
        raise HTTPException(status_code=403, detail="Blocked host")

    try:
        upstream = fetch_bytes(url)
    except RemoteImageError as exc:
        logger.warning("[proxy] upstream failed: %s", exc)
        raise HTTPException(status_code=502, detail="Upstream fetch failed") from exc

    return Response(
        content=upstream.content,
        media_type=upstream.headers.get("content-type", "application/octet-stream"),
        headers={"Cache-Control": PROXY_CACHE_CONTROL},
    )
