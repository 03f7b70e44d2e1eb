"""
Share cards for a walk: the Open Graph preview image, the not-found card and
the error card returned in place of a recap that could not be rendered.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from PIL import Image, ImageDraw

from domain.models import MediaType, Walk, WalkMedia
from services.recap_image import (
    BACKGROUND,
    EMPTY_VALUE,
    LABEL_COLOR,
    MUTED_COLOR,
    NOTICE_COLOR,
    PANEL_FILL,
    TEXT_COLOR,
    draw_placeholder,
    fit_line,
    load_font,
    paste_rounded,
    safe_fetch,
    text_width,
    wrap_text,
)
from services.remote_images import fetch_image
from services.route_sketch import route_sketch

logger = logging.getLogger(__name__)

OG_WIDTH = 1200
OG_HEIGHT = 630
ERROR_WIDTH = 1080
ERROR_HEIGHT = 600
OG_PAD = 36
OG_MAX_MEDIA = 3
BRAND_LABEL = "SmartWalk"
TILE_OUTLINE = (255, 255, 255, 26)
ERROR_TEXT_COLOR = (252, 165, 165, 255)


def share_title(walk: Optional[Walk]) -> str:
    if walk is None:
        return "Dog Walk Recap"
    return f"{walk.dogs or 'Dog Walk'} — Walk Recap"


def share_description(walk: Optional[Walk]) -> str:
    """One-line summary used in page meta tags."""
    if walk is None:
        return "Route, photos, and details from the walk."
    parts = [
        f"Duration: {walk.duration_minutes} min",
        f"Distance: {walk.distance_miles:.2f} mi",
    ]
    if walk.temperature_f is not None:
        parts.append(f"Temp: {walk.temperature_f}°F")
    if walk.weather_summary:
        parts.append(walk.weather_summary)
    return " • ".join(parts)


def _stat_tiles(walk: Walk) -> List[tuple]:
    temp = f"{walk.temperature_f}°F" if walk.temperature_f is not None else EMPTY_VALUE
    return [
        ("Duration", f"{walk.duration_minutes} min", 1),
        ("Distance", f"{walk.distance_miles:.2f} mi", 1),
        ("Temp", temp, 1),
        ("Weather", walk.weather_summary or EMPTY_VALUE, 2),
    ]


def _draw_tile(draw: ImageDraw.ImageDraw, box, radius: int = 16) -> None:
    draw.rounded_rectangle(box, radius=radius, fill=PANEL_FILL, outline=TILE_OUTLINE, width=1)


def _draw_centered(draw: ImageDraw.ImageDraw, box, text: str, font, fill) -> None:
    w = text_width(font, text)
    x = box[0] + (box[2] - box[0] - w) / 2
    y = box[1] + (box[3] - box[1] - font.size) / 2
    draw.text((x, y), text, font=font, fill=fill)


def render_open_graph_card(
    walk: Walk,
    fetch: Optional[Callable[[str], Image.Image]] = None,
) -> Image.Image:
    """1200x630 preview card: stats, a route sketch and up to three media tiles."""
    fetch = fetch or fetch_image
    canvas = Image.new("RGB", (OG_WIDTH, OG_HEIGHT), BACKGROUND)
    draw = ImageDraw.Draw(canvas, "RGBA")
    pad = OG_PAD

    # Header
    title_font = load_font(46, bold=True)
    draw.text((pad, pad), fit_line(walk.dogs or "Dog Walk", title_font, 900), font=title_font, fill=TEXT_COLOR)
    draw.text((pad, pad + 58), "Dog Walk Recap", font=load_font(22), fill=MUTED_COLOR)
    brand_font = load_font(18)
    draw.text(
        (OG_WIDTH - pad - text_width(brand_font, BRAND_LABEL), pad + 62),
        BRAND_LABEL,
        font=brand_font,
        fill=LABEL_COLOR,
    )

    body_top = pad + 104
    body_bottom = OG_HEIGHT - pad
    left_w = 600
    gap = 12

    # Stat tiles
    tiles = _stat_tiles(walk)
    units = sum(flex for _, _, flex in tiles)
    unit_w = (left_w - gap * (len(tiles) - 1)) / units
    x = pad
    label_font = load_font(16, bold=True)
    value_font = load_font(24, bold=True)
    for label, value, flex in tiles:
        w = int(unit_w * flex)
        box = (int(x), body_top, int(x) + w, body_top + 70)
        _draw_tile(draw, box)
        draw.text((box[0] + 14, box[1] + 12), label, font=label_font, fill=LABEL_COLOR)
        draw.text((box[0] + 14, box[1] + 34), fit_line(value, value_font, w - 28), font=value_font, fill=TEXT_COLOR)
        x += w + gap

    # Route box
    route_box = (pad, body_top + 84, pad + left_w, body_bottom)
    _draw_tile(draw, route_box, radius=18)
    draw.text((route_box[0] + 14, route_box[1] + 12), "Route", font=load_font(20, bold=True), fill=TEXT_COLOR)
    sketch_box = (route_box[0] + 14, route_box[1] + 44, route_box[2] - 14, route_box[3] - 14)
    sketch_size = (sketch_box[2] - sketch_box[0], sketch_box[3] - sketch_box[1])
    sketch = route_sketch(walk.route_points, sketch_size)
    if sketch is not None:
        canvas.paste(sketch, sketch_box[:2], sketch)
    else:
        draw_placeholder(draw, sketch_box, 16)
        _draw_centered(draw, sketch_box, "No route recorded", load_font(22), NOTICE_COLOR)

    # Media collage
    right_x = pad + left_w + 18
    right_box = (right_x, body_top, OG_WIDTH - pad, body_bottom)
    draw.text((right_box[0], right_box[1]), "Photos & Videos", font=load_font(20, bold=True), fill=TEXT_COLOR)
    collage_box = (right_box[0], right_box[1] + 36, right_box[2], right_box[3])
    _draw_media_tiles(canvas, draw, walk.media[:OG_MAX_MEDIA], collage_box, fetch)

    return canvas


def _draw_media_tiles(canvas, draw, media: List[WalkMedia], box, fetch) -> None:
    if not media:
        _draw_tile(draw, box, radius=18)
        _draw_centered(draw, box, "No media uploaded", load_font(22, bold=True), NOTICE_COLOR)
        return
    gap = 12
    tile_w = (box[2] - box[0] - gap * (len(media) - 1)) // len(media)
    for i, item in enumerate(media):
        x0 = box[0] + i * (tile_w + gap)
        tile = (x0, box[1], x0 + tile_w, box[3])
        if item.type == MediaType.VIDEO:
            _draw_tile(draw, tile, radius=18)
            _draw_centered(draw, tile, "VIDEO", load_font(24, bold=True), NOTICE_COLOR)
            continue
        img = safe_fetch(fetch, item.url, label=f"share media {i + 1}")
        if img is None:
            _draw_tile(draw, tile, radius=18)
            continue
        paste_rounded(canvas, img, tile, 18)


def render_not_found_card() -> Image.Image:
    canvas = Image.new("RGB", (OG_WIDTH, OG_HEIGHT), BACKGROUND)
    draw = ImageDraw.Draw(canvas, "RGBA")
    _draw_centered(draw, (0, 0, OG_WIDTH, OG_HEIGHT), "Walk not found", load_font(48, bold=True), TEXT_COLOR)
    return canvas


def render_error_card(message: str) -> Image.Image:
    """Readable stand-in for a recap that failed before drawing started."""
    canvas = Image.new("RGB", (ERROR_WIDTH, ERROR_HEIGHT), BACKGROUND)
    draw = ImageDraw.Draw(canvas, "RGBA")
    pad = 48
    max_w = ERROR_WIDTH - pad * 2
    draw.text((pad, pad), "Recap Image Error", font=load_font(44, bold=True), fill=TEXT_COLOR)
    draw.text((pad, pad + 66), "The recap image could not be rendered.", font=load_font(24), fill=MUTED_COLOR)
    msg_font = load_font(20)
    y = pad + 120
    for line in wrap_text(message or "Unknown error", msg_font, max_w, 12):
        draw.text((pad, y), line, font=msg_font, fill=ERROR_TEXT_COLOR)
        y += 26
    draw.text(
        (pad, ERROR_HEIGHT - pad - 18),
        "Common cause: the walk does not exist or the database is unreachable.",
        font=load_font(18),
        fill=LABEL_COLOR,
    )
    logger.info("[share] rendered error card: %s", message)
    return canvas
