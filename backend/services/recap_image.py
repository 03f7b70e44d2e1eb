"""
Recap image compositor.

Renders the shareable walk recap: a fixed-size portrait bitmap with a header,
the route map, a stats/notes panel and a photo grid. Every remote image (map
and photos) is fetched independently; a failed fetch degrades only its own
slot to a placeholder, never the whole render.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache
from io import BytesIO
from typing import Callable, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from domain.models import RoutePoint, WeatherNow
from services.pay import format_money
from services.remote_images import fetch_image
from services.static_map import fetch_static_map
from settings import settings

logger = logging.getLogger(__name__)

Box = Tuple[int, int, int, int]
Color = Tuple[int, int, int, int]
ImageFetcher = Callable[[str], Image.Image]
MapFetcher = Callable[[Sequence[RoutePoint], int, int], Optional[Image.Image]]

ELLIPSIS = "…"
EMPTY_VALUE = "—"

BACKGROUND = (11, 11, 12)
TEXT_COLOR: Color = (255, 255, 255, 255)
LABEL_COLOR: Color = (255, 255, 255, 166)
MUTED_COLOR: Color = (255, 255, 255, 179)
NOTICE_COLOR: Color = (255, 255, 255, 191)
FOOTER_COLOR: Color = (255, 255, 255, 128)
PANEL_FILL: Color = (255, 255, 255, 15)
PLACEHOLDER_FILL: Color = (0, 0, 0, 64)

MAP_UNAVAILABLE_TEXT = "Map unavailable (missing token or route)"
MAP_FAILED_TEXT = "Map unavailable"
NO_PHOTOS_TEXT = "No photos uploaded"


class RecapRenderError(Exception):
    """The recap could not be encoded."""


@dataclass
class RecapInput:
    """Everything the compositor draws; no storage or network handles."""
    walk_id: str
    dogs: str
    duration_minutes: int
    distance_miles: float
    weather: Optional[WeatherNow] = None
    notes: str = ""
    created_at_label: str = ""
    route_points: List[RoutePoint] = field(default_factory=list)
    photo_urls: List[str] = field(default_factory=list)
    amount_due: Optional[Decimal] = None


@dataclass
class RecapSections:
    header: Box
    map: Box
    stats: Box
    photos: Box
    grid: Box
    footer: Box


@dataclass
class RecapLayout:
    """
    Canvas size and section metrics. Section boxes are derived from these in
    sections(); the photo panel takes whatever height remains.
    """
    width: int = 1080
    height: int = 1920
    pad: int = 48
    header_h: int = 170
    header_gap: int = 10
    map_h: int = 540
    stats_h: int = 300
    section_gap: int = 24
    footer_h: int = 30
    panel_radius: int = 28
    panel_inset: int = 28
    grid_pad: int = 22
    grid_label_h: int = 70
    cell_gap: int = 16
    cell_radius: int = 20
    notes_max_lines: int = 3
    notes_line_h: int = 38
    max_photos: int = 6

    def sections(self) -> RecapSections:
        left = self.pad
        right = self.width - self.pad
        header = (left, self.pad, right, self.pad + self.header_h)
        map_top = header[3] + self.header_gap
        map_box = (left, map_top, right, map_top + self.map_h)
        stats_top = map_box[3] + self.section_gap
        stats = (left, stats_top, right, stats_top + self.stats_h)
        photos_top = stats[3] + self.section_gap
        footer_top = self.height - self.pad - self.footer_h
        photos = (left, photos_top, right, footer_top)
        grid = (
            photos[0] + self.grid_pad,
            photos[1] + self.grid_label_h,
            photos[2] - self.grid_pad,
            photos[3] - self.grid_pad,
        )
        footer = (left, footer_top, right, self.height - self.pad)
        if grid[3] <= grid[1]:
            raise ValueError("Canvas too short for the photo grid")
        return RecapSections(header=header, map=map_box, stats=stats, photos=photos, grid=grid, footer=footer)


# ============================================
# Fonts and text
# ============================================

@lru_cache(maxsize=64)
def load_font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont:
    """Load the recap font at a pixel size, falling back to Pillow's bundled font."""
    path = settings.RECAP_BOLD_FONT_PATH if bold else settings.RECAP_FONT_PATH
    try:
        return ImageFont.truetype(path, size)
    except OSError:
        logger.debug("[recap] font %s not found; using default", path)
        return ImageFont.load_default(size=size)


def text_width(font: ImageFont.ImageFont, text: str) -> float:
    return font.getlength(text)


def ellipsize(text: str, font: ImageFont.ImageFont, max_width: float) -> str:
    """Trim text until text + ellipsis fits max_width."""
    candidate = text.rstrip()
    while candidate and text_width(font, candidate + ELLIPSIS) > max_width:
        candidate = candidate[:-1].rstrip()
    return candidate + ELLIPSIS


def fit_line(text: str, font: ImageFont.ImageFont, max_width: float) -> str:
    if text_width(font, text) <= max_width:
        return text
    return ellipsize(text, font, max_width)


def wrap_text(text: str, font: ImageFont.ImageFont, max_width: float, max_lines: int) -> List[str]:
    """
    Greedy word wrap capped at max_lines.

    When words remain after the last allowed line, that line is ended with an
    ellipsis (trimmed so the ellipsis still fits). Single words wider than
    max_width are cut the same way.
    """
    words = (text or "").split()
    if not words or max_lines <= 0:
        return []

    lines: List[str] = []
    line = ""
    for word in words:
        test = f"{line} {word}" if line else word
        if line and text_width(font, test) > max_width:
            lines.append(fit_line(line, font, max_width))
            if len(lines) == max_lines:
                lines[-1] = ellipsize(line, font, max_width)
                return lines
            line = word
        else:
            line = test
    lines.append(fit_line(line, font, max_width))
    return lines


def fit_font(
    text: str,
    max_width: float,
    start_size: int,
    min_size: int,
    bold: bool = True,
    step: int = 2,
) -> ImageFont.ImageFont:
    """Largest font between min_size and start_size whose rendering of text fits."""
    size = start_size
    font = load_font(size, bold)
    while size > min_size and text_width(font, text) > max_width:
        size = max(min_size, size - step)
        font = load_font(size, bold)
    return font


# ============================================
# Geometry helpers
# ============================================

def cover_crop_box(src_size: Tuple[int, int], dst_size: Tuple[int, int]) -> Box:
    """
    Centre crop box (left, top, right, bottom) in source pixels that has the
    destination's aspect ratio, so scaling it fills the destination exactly.
    """
    sw, sh = src_size
    dw, dh = dst_size
    if sw <= 0 or sh <= 0 or dw <= 0 or dh <= 0:
        raise ValueError(f"Invalid sizes for cover crop: {src_size} -> {dst_size}")
    src_ratio = sw / sh
    dst_ratio = dw / dh
    if src_ratio > dst_ratio:
        # source is wider: trim left/right
        crop_w = max(1, min(sw, round(sh * dst_ratio)))
        left = (sw - crop_w) // 2
        return (left, 0, left + crop_w, sh)
    crop_h = max(1, min(sh, round(sw / dst_ratio)))
    top = (sh - crop_h) // 2
    return (0, top, sw, top + crop_h)


def cover_fit(img: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """Scale img to fill size, preserving aspect ratio and cropping overflow."""
    box = cover_crop_box(img.size, size)
    return img.crop(box).resize(size, resample=Image.Resampling.LANCZOS)


def photo_grid_shape(count: int) -> Tuple[int, int]:
    """(columns, rows) for a photo count; 5 and 6 share the 3x2 grid."""
    if count <= 0:
        return (0, 0)
    if count <= 3:
        return (count, 1)
    if count == 4:
        return (2, 2)
    return (3, 2)


def grid_cells(box: Box, cols: int, rows: int, gap: int) -> List[Box]:
    """Row-major cell boxes of a cols x rows grid filling box."""
    if cols <= 0 or rows <= 0:
        return []
    x0, y0, x1, y1 = box
    cell_w = (x1 - x0 - gap * (cols - 1)) // cols
    cell_h = (y1 - y0 - gap * (rows - 1)) // rows
    cells = []
    for r in range(rows):
        for c in range(cols):
            x = x0 + c * (cell_w + gap)
            y = y0 + r * (cell_h + gap)
            cells.append((x, y, x + cell_w, y + cell_h))
    return cells


def rounded_mask(size: Tuple[int, int], radius: int) -> Image.Image:
    w, h = size
    mask = Image.new("L", size, 0)
    r = max(0, min(radius, w // 2, h // 2))
    ImageDraw.Draw(mask).rounded_rectangle((0, 0, w - 1, h - 1), radius=r, fill=255)
    return mask


def paste_rounded(canvas: Image.Image, img: Image.Image, box: Box, radius: int) -> None:
    """Cover-fit img into box and clip it to a rounded rectangle."""
    x0, y0, x1, y1 = box
    size = (x1 - x0, y1 - y0)
    fitted = cover_fit(img.convert("RGB"), size)
    canvas.paste(fitted, (x0, y0), rounded_mask(size, radius))


def draw_placeholder(draw: ImageDraw.ImageDraw, box: Box, radius: int) -> None:
    draw.rounded_rectangle(box, radius=radius, fill=PLACEHOLDER_FILL)


def safe_fetch(fetch: Callable[..., Optional[Image.Image]], *args, label: str = "image") -> Optional[Image.Image]:
    """Run a fetch, logging and swallowing failures so the slot can degrade."""
    try:
        return fetch(*args)
    except Exception as exc:
        logger.warning("[recap] %s fetch failed: %s", label, exc)
        return None


# ============================================
# Sections
# ============================================

def stats_columns(data: RecapInput) -> List[Tuple[str, str]]:
    """Label/value pairs for the stats row; Pay only when an amount is known."""
    weather = data.weather
    if weather is not None and (weather.temperature_f is not None or weather.summary):
        temp = f"{weather.temperature_f}°F" if weather.temperature_f is not None else EMPTY_VALUE
        weather_text = f"{temp}  {weather.summary}".strip()
    else:
        weather_text = EMPTY_VALUE
    columns = [
        ("Duration", f"{data.duration_minutes} min"),
        ("Distance", f"{data.distance_miles:.2f} mi"),
        ("Weather", weather_text),
    ]
    if data.amount_due is not None:
        columns.append(("Pay", format_money(data.amount_due)))
    return columns


def _draw_header(draw: ImageDraw.ImageDraw, data: RecapInput, box: Box) -> None:
    x, y = box[0], box[1]
    max_w = box[2] - box[0]
    title_font = load_font(76, bold=True)
    draw.text((x, y), "Walk Recap", font=title_font, fill=TEXT_COLOR)
    sub_font = load_font(44, bold=True)
    dogs = (data.dogs or "").strip() or "Dogs"
    draw.text((x, y + 84), fit_line(dogs, sub_font, max_w), font=sub_font, fill=TEXT_COLOR)
    if data.created_at_label:
        label_font = load_font(28)
        draw.text((x, y + 140), fit_line(data.created_at_label, label_font, max_w), font=label_font, fill=MUTED_COLOR)


def _draw_map(
    canvas: Image.Image,
    draw: ImageDraw.ImageDraw,
    data: RecapInput,
    box: Box,
    layout: RecapLayout,
    map_fetch: MapFetcher,
) -> bool:
    draw.rounded_rectangle(box, radius=layout.panel_radius, fill=PANEL_FILL)
    width, height = box[2] - box[0], box[3] - box[1]
    notice = None
    map_img = None
    try:
        map_img = map_fetch(data.route_points, width, height)
        if map_img is None:
            notice = MAP_UNAVAILABLE_TEXT
    except Exception as exc:
        logger.warning("[recap] map fetch failed for walk %s: %s", data.walk_id, exc)
        notice = MAP_FAILED_TEXT

    if map_img is not None:
        paste_rounded(canvas, map_img, box, layout.panel_radius)
        return True
    font = load_font(32, bold=True)
    draw.text(
        (box[0] + 24, box[1] + 56),
        fit_line(notice or MAP_FAILED_TEXT, font, width - 48),
        font=font,
        fill=NOTICE_COLOR,
    )
    return False


def _draw_stats(draw: ImageDraw.ImageDraw, data: RecapInput, box: Box, layout: RecapLayout) -> None:
    draw.rounded_rectangle(box, radius=layout.panel_radius, fill=PANEL_FILL)
    inset = layout.panel_inset
    left = box[0] + inset
    inner_w = box[2] - box[0] - inset * 2
    columns = stats_columns(data)
    col_w = inner_w // len(columns)
    label_font = load_font(26, bold=True)
    value_max_w = col_w - 12

    row_y = box[1] + 24
    for i, (label, value) in enumerate(columns):
        cx = left + i * col_w
        draw.text((cx, row_y), label, font=label_font, fill=LABEL_COLOR)
        value_font = fit_font(value, value_max_w, start_size=44, min_size=26)
        draw.text((cx, row_y + 34), fit_line(value, value_font, value_max_w), font=value_font, fill=TEXT_COLOR)

    notes_y = box[1] + 124
    draw.text((left, notes_y), "Notes", font=label_font, fill=LABEL_COLOR)
    notes_font = load_font(30)
    notes = (data.notes or "").strip()
    lines = wrap_text(notes, notes_font, inner_w, layout.notes_max_lines) or [EMPTY_VALUE]
    for i, line in enumerate(lines):
        draw.text((left, notes_y + 36 + i * layout.notes_line_h), line, font=notes_font, fill=TEXT_COLOR)


def _draw_photos(
    canvas: Image.Image,
    draw: ImageDraw.ImageDraw,
    data: RecapInput,
    sections: RecapSections,
    layout: RecapLayout,
    fetch: ImageFetcher,
) -> int:
    box = sections.photos
    draw.rounded_rectangle(box, radius=layout.panel_radius, fill=PANEL_FILL)
    label_font = load_font(28, bold=True)
    draw.text((box[0] + layout.panel_inset, box[1] + 24), "Photos", font=label_font, fill=MUTED_COLOR)

    urls = [u for u in (data.photo_urls or []) if u][: layout.max_photos]
    if not urls:
        font = load_font(32, bold=True)
        draw.text((sections.grid[0], sections.grid[1] + 40), NO_PHOTOS_TEXT, font=font, fill=NOTICE_COLOR)
        return 0

    cols, rows = photo_grid_shape(len(urls))
    drawn = 0
    for i, cell in enumerate(grid_cells(sections.grid, cols, rows, layout.cell_gap)):
        img = safe_fetch(fetch, urls[i], label=f"photo {i + 1}") if i < len(urls) else None
        if img is None:
            draw_placeholder(draw, cell, layout.cell_radius)
            continue
        paste_rounded(canvas, img, cell, layout.cell_radius)
        drawn += 1
    return drawn


def _draw_footer(draw: ImageDraw.ImageDraw, data: RecapInput, box: Box) -> None:
    font = load_font(20)
    text = f"ID: {data.walk_id}"
    w = text_width(font, text)
    draw.text((box[2] - w, box[1] + 6), text, font=font, fill=FOOTER_COLOR)


def compose_recap(
    data: RecapInput,
    layout: Optional[RecapLayout] = None,
    fetch: Optional[ImageFetcher] = None,
    map_fetch: Optional[MapFetcher] = None,
) -> Image.Image:
    """Compose the recap bitmap. Remote failures only degrade their own slot."""
    layout = layout or RecapLayout()
    fetch = fetch or fetch_image
    map_fetch = map_fetch or fetch_static_map
    sections = layout.sections()

    canvas = Image.new("RGB", (layout.width, layout.height), BACKGROUND)
    draw = ImageDraw.Draw(canvas, "RGBA")

    _draw_header(draw, data, sections.header)
    has_map = _draw_map(canvas, draw, data, sections.map, layout, map_fetch)
    _draw_stats(draw, data, sections.stats, layout)
    photos = _draw_photos(canvas, draw, data, sections, layout, fetch)
    _draw_footer(draw, data, sections.footer)

    logger.info(
        "[recap] composed walk=%s size=%dx%d map=%s photos=%d/%d",
        data.walk_id,
        layout.width,
        layout.height,
        has_map,
        photos,
        min(len(data.photo_urls or []), layout.max_photos),
    )
    return canvas


def encode_png(img: Image.Image) -> bytes:
    try:
        buf = BytesIO()
        img.save(buf, format="PNG", optimize=True)
        return buf.getvalue()
    except (OSError, ValueError) as exc:
        raise RecapRenderError(f"PNG export failed: {exc}") from exc


def render_recap_png(
    data: RecapInput,
    layout: Optional[RecapLayout] = None,
    fetch: Optional[ImageFetcher] = None,
    map_fetch: Optional[MapFetcher] = None,
) -> bytes:
    """Compose and encode the recap as PNG bytes."""
    return encode_png(compose_recap(data, layout=layout, fetch=fetch, map_fetch=map_fetch))
