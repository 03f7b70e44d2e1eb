"""
Static route map images from the Mapbox Static Images API.

The route is sent as a GeoJSON LineString overlay and Mapbox fits the
viewport to it ("auto").
"""
from __future__ import annotations

import json
import logging
from typing import Optional, Sequence
from urllib.parse import quote

from PIL import Image

from domain.models import RoutePoint
from services.remote_images import fetch_image
from settings import settings

logger = logging.getLogger(__name__)

MAPBOX_STATIC_BASE = "https://api.mapbox.com/styles/v1"
MAPBOX_MAX_DIMENSION = 1280
ROUTE_STROKE_COLOR = "#111111"
ROUTE_STROKE_OPACITY = 0.9
MAP_PADDING_PX = 60


def build_static_map_url(
    points: Sequence[RoutePoint],
    width: int,
    height: int,
    token: Optional[str] = None,
    stroke_width: int = 5,
    style: Optional[str] = None,
) -> Optional[str]:
    """
    Build a Static Images URL for the route, or None when it cannot be drawn
    (no access token configured or fewer than two points).
    """
    token = token if token is not None else settings.MAPBOX_TOKEN
    if not token:
        return None
    if not points or len(points) < 2:
        return None

    # Mapbox expects [lng, lat]
    coords = [[p.lng, p.lat] for p in points]
    feature = {
        "type": "Feature",
        "properties": {
            "stroke": ROUTE_STROKE_COLOR,
            "stroke-width": stroke_width,
            "stroke-opacity": ROUTE_STROKE_OPACITY,
        },
        "geometry": {"type": "LineString", "coordinates": coords},
    }
    overlay = "geojson(" + quote(json.dumps(feature, separators=(",", ":")), safe="") + ")"
    w = max(1, min(int(width), MAPBOX_MAX_DIMENSION))
    h = max(1, min(int(height), MAPBOX_MAX_DIMENSION))
    style = style or settings.MAPBOX_STYLE
    return (
        f"{MAPBOX_STATIC_BASE}/{style}/static/{overlay}/auto/{w}x{h}"
        f"?padding={MAP_PADDING_PX}&access_token={quote(token, safe='')}"
    )


def fetch_static_map(points: Sequence[RoutePoint], width: int, height: int) -> Optional[Image.Image]:
    """
    Fetch the rendered route map. Returns None when no URL can be built;
    fetch/decode failures propagate as RemoteImageError.
    """
    url = build_static_map_url(points, width, height)
    if url is None:
        logger.info("[map] static map skipped (token or route missing, %d points)", len(points))
        return None
    return fetch_image(url)
