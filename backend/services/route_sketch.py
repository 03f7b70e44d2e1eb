"""
Schematic route sketch drawn locally with Pillow.

Used where a tile-backed map is not worth a network round trip (share
cards): the polyline is projected north-up into the box with start/end dots.
"""
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from domain.models import RoutePoint

UPSCALE_FACTOR = 2
SKETCH_PADDING_PX = 10
SKETCH_BACKGROUND = (255, 255, 255, 15)
ROUTE_COLOR = (255, 255, 255, 242)
MARKER_COLOR = (255, 255, 255, 230)
ROUTE_WIDTH = 5
MARKER_RADIUS = 7


def project_points(
    points: Sequence[RoutePoint],
    width: int,
    height: int,
    padding: int = SKETCH_PADDING_PX,
) -> List[Tuple[float, float]]:
    """Map lat/lng onto canvas pixels; north is up, each axis stretched to fit."""
    if not points:
        return []
    min_lat = min(p.lat for p in points)
    max_lat = max(p.lat for p in points)
    min_lng = min(p.lng for p in points)
    max_lng = max(p.lng for p in points)
    lat_span = max(1e-9, max_lat - min_lat)
    lng_span = max(1e-9, max_lng - min_lng)
    inner_w = width - padding * 2
    inner_h = height - padding * 2
    return [
        (
            padding + (p.lng - min_lng) / lng_span * inner_w,
            padding + (1 - (p.lat - min_lat) / lat_span) * inner_h,
        )
        for p in points
    ]


def route_sketch(points: Sequence[RoutePoint], size: Tuple[int, int], radius: int = 16) -> Optional[Image.Image]:
    """RGBA sketch of the route, or None when there is no line to draw."""
    if not points or len(points) < 2:
        return None
    width, height = size
    s = UPSCALE_FACTOR
    img = Image.new("RGBA", (width * s, height * s), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img, "RGBA")
    draw.rounded_rectangle((0, 0, width * s - 1, height * s - 1), radius=radius * s, fill=SKETCH_BACKGROUND)

    coords = [(x * s, y * s) for x, y in project_points(points, width, height)]
    draw.line(coords, fill=ROUTE_COLOR, width=ROUTE_WIDTH * s, joint="curve")
    r = MARKER_RADIUS * s
    for x, y in (coords[0], coords[-1]):
        draw.ellipse((x - r, y - r, x + r, y + r), fill=MARKER_COLOR)

    return img.resize((width, height), resample=Image.Resampling.LANCZOS)
