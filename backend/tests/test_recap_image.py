from decimal import Decimal
from io import BytesIO

import pytest
from PIL import Image

from domain.models import RoutePoint, WeatherNow
from services.recap_image import (
    BACKGROUND,
    EMPTY_VALUE,
    ELLIPSIS,
    MAP_FAILED_TEXT,
    MAP_UNAVAILABLE_TEXT,
    NO_PHOTOS_TEXT,
    RecapInput,
    RecapLayout,
    compose_recap,
    cover_crop_box,
    grid_cells,
    load_font,
    photo_grid_shape,
    render_recap_png,
    stats_columns,
    text_width,
    wrap_text,
)
from services.remote_images import RemoteImageError


def _input(**overrides) -> RecapInput:
    data = dict(
        walk_id="walk-123",
        dogs="Biscuit & Pepper",
        duration_minutes=42,
        distance_miles=1.234,
        weather=WeatherNow(temperature_f=71, summary="Overcast"),
        notes="Good walk. Pepper found a stick.",
        created_at_label="Oct 19, 2026 09:30 AM",
        route_points=[RoutePoint(41.0, -87.0), RoutePoint(41.001, -87.001)],
        photo_urls=[],
    )
    data.update(overrides)
    return RecapInput(**data)


def _solid_fetch(colors):
    def fetch(url):
        if url not in colors:
            raise RemoteImageError(f"no such photo {url}")
        return Image.new("RGB", (400, 300), colors[url])

    return fetch


def _no_map(points, w, h):
    return None


def _center(box):
    return ((box[0] + box[2]) // 2, (box[1] + box[3]) // 2)


def test_default_sections():
    s = RecapLayout().sections()
    assert s.header == (48, 48, 1032, 218)
    assert s.map == (48, 228, 1032, 768)
    assert s.stats == (48, 792, 1032, 1092)
    assert s.photos == (48, 1116, 1032, 1842)
    assert s.grid == (70, 1186, 1010, 1820)
    assert s.footer == (48, 1842, 1032, 1872)


def test_sections_reject_short_canvas():
    with pytest.raises(ValueError):
        RecapLayout(height=1200).sections()


@pytest.mark.parametrize(
    "count,shape",
    [(0, (0, 0)), (1, (1, 1)), (2, (2, 1)), (3, (3, 1)), (4, (2, 2)), (5, (3, 2)), (6, (3, 2))],
)
def test_photo_grid_shape(count, shape):
    assert photo_grid_shape(count) == shape


def test_grid_cells_row_major():
    cells = grid_cells((0, 0, 316, 216), cols=3, rows=2, gap=8)
    assert len(cells) == 6
    assert cells[0] == (0, 0, 100, 104)
    assert cells[1] == (108, 0, 208, 104)
    assert cells[3] == (0, 112, 100, 216)


def test_cover_crop_box():
    assert cover_crop_box((2000, 1000), (100, 100)) == (500, 0, 1500, 1000)
    assert cover_crop_box((1000, 2000), (200, 100)) == (0, 750, 1000, 1250)
    with pytest.raises(ValueError):
        cover_crop_box((0, 10), (10, 10))


def test_wrap_text_caps_lines_with_ellipsis():
    font = load_font(30)
    text = " ".join(["walking"] * 60)
    lines = wrap_text(text, font, 400, 3)
    assert len(lines) == 3
    assert lines[-1].endswith(ELLIPSIS)
    assert all(text_width(font, line) <= 400 for line in lines)


def test_wrap_text_short_and_empty():
    font = load_font(30)
    assert wrap_text("short note", font, 900, 3) == ["short note"]
    assert wrap_text("   ", font, 900, 3) == []


def test_stats_columns():
    cols = stats_columns(_input())
    assert cols == [
        ("Duration", "42 min"),
        ("Distance", "1.23 mi"),
        ("Weather", "71°F  Overcast"),
    ]
    assert stats_columns(_input(weather=None))[2] == ("Weather", EMPTY_VALUE)
    assert stats_columns(_input(amount_due=Decimal("17.5")))[-1] == ("Pay", "$17.50")


def test_compose_size_and_background_without_remote_content():
    img = compose_recap(_input(), fetch=_solid_fetch({}), map_fetch=_no_map)
    assert img.size == (1080, 1920)
    assert img.getpixel((5, 5)) == BACKGROUND


def test_compose_places_photos_row_major():
    urls = [f"p{i}" for i in range(6)]
    colors = {
        "p0": (255, 0, 0),
        "p1": (0, 255, 0),
        "p5": (0, 0, 255),
    }
    layout = RecapLayout()
    img = compose_recap(_input(photo_urls=urls), layout=layout, fetch=_solid_fetch(colors), map_fetch=_no_map)

    cells = grid_cells(layout.sections().grid, 3, 2, layout.cell_gap)
    assert img.getpixel(_center(cells[0])) == (255, 0, 0)
    assert img.getpixel(_center(cells[1])) == (0, 255, 0)
    assert img.getpixel(_center(cells[5])) == (0, 0, 255)
    # failed fetches become placeholders rather than failing the render
    assert img.getpixel(_center(cells[2])) not in colors.values()


def test_compose_caps_photos_at_six():
    fetched = []

    def fetch(url):
        fetched.append(url)
        return Image.new("RGB", (10, 10), (200, 200, 200))

    compose_recap(_input(photo_urls=[f"p{i}" for i in range(9)]), fetch=fetch, map_fetch=_no_map)
    assert fetched == [f"p{i}" for i in range(6)]


def test_compose_draws_map():
    def map_fetch(points, w, h):
        assert (w, h) == (984, 540)
        return Image.new("RGB", (w, h), (0, 0, 255))

    img = compose_recap(_input(), fetch=_solid_fetch({}), map_fetch=map_fetch)
    assert img.getpixel(_center(RecapLayout().sections().map)) == (0, 0, 255)


def test_render_recap_png():
    png = render_recap_png(_input(notes=""), fetch=_solid_fetch({}), map_fetch=_no_map)
    assert png[:8] == b"\x89PNG\r\n\x1a\n"
    assert Image.open(BytesIO(png)).size == (1080, 1920)


@pytest.fixture
def drawn_text(monkeypatch):
    """Record every string drawn onto any canvas."""
    from PIL import ImageDraw

    texts = []
    original = ImageDraw.ImageDraw.text

    def record(self, xy, text, *args, **kwargs):
        texts.append(text)
        return original(self, xy, text, *args, **kwargs)

    monkeypatch.setattr(ImageDraw.ImageDraw, "text", record)
    return texts


def test_failed_map_shows_notice_on_panel_fill(drawn_text):
    def broken_map(points, w, h):
        raise RemoteImageError("mapbox down")

    img = compose_recap(_input(), fetch=_solid_fetch({}), map_fetch=broken_map)

    assert MAP_FAILED_TEXT in drawn_text
    box = RecapLayout().sections().map
    center = img.getpixel(_center(box))
    lower_right = img.getpixel((box[2] - 60, box[3] - 60))
    # plain panel fill: lighter than the page, identical across the empty panel
    assert center == lower_right
    assert center != BACKGROUND
    assert sum(center) > sum(BACKGROUND)


def test_missing_map_shows_unavailable_notice(drawn_text):
    compose_recap(_input(), fetch=_solid_fetch({}), map_fetch=_no_map)
    assert MAP_UNAVAILABLE_TEXT in drawn_text
    assert MAP_FAILED_TEXT not in drawn_text


def test_five_photos_leave_sixth_cell_as_placeholder():
    urls = [f"p{i}" for i in range(5)]
    colors = {u: (255, 0, 0) for u in urls}
    layout = RecapLayout()
    sections = layout.sections()
    img = compose_recap(_input(photo_urls=urls), layout=layout, fetch=_solid_fetch(colors), map_fetch=_no_map)

    cells = grid_cells(sections.grid, 3, 2, layout.cell_gap)
    assert all(img.getpixel(_center(c)) == (255, 0, 0) for c in cells[:5])
    sixth = img.getpixel(_center(cells[5]))
    panel = img.getpixel((sections.photos[0] + 8, sections.grid[1] - 8))
    # placeholder darkens the photo panel
    assert sum(sixth) < sum(panel)


def test_zero_photos_shows_empty_notice(drawn_text):
    fetched = []

    def fetch(url):
        fetched.append(url)
        return Image.new("RGB", (10, 10))

    compose_recap(_input(photo_urls=[]), fetch=fetch, map_fetch=_no_map)
    assert NO_PHOTOS_TEXT in drawn_text
    assert fetched == []
