"""Render a recap PNG from a JSON walk fixture.

Usage:
    python -m scripts.render_recap_fixture --fixture walk.json [--out recap.png]

The fixture holds the walk fields (dogs, duration_minutes, route_points,
temperature_f, weather_summary, notes, hourly_rate, created_at) plus an
optional "photos" list of local file paths or http(s) URLs. Without
MAPBOX_TOKEN and photos the render needs no network.
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict

from PIL import Image

from domain.models import RoutePoint, WalkDraft
from services.recap_image import RecapLayout, render_recap_png
from services.remote_images import decode_image, fetch_image
from services.walks import build_walk, recap_input_for_walk

logger = logging.getLogger("render_recap_fixture")


def load_fixture(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def draft_from_fixture(data: Dict[str, Any]) -> WalkDraft:
    rate = data.get("hourly_rate")
    return WalkDraft(
        dogs=data.get("dogs", "Fixture Walk"),
        duration_minutes=int(data.get("duration_minutes", 0)),
        route_points=[RoutePoint.from_dict(p) for p in data.get("route_points", [])],
        hourly_rate=Decimal(str(rate)) if rate is not None else None,
        temperature_f=data.get("temperature_f"),
        weather_summary=data.get("weather_summary", ""),
        notes=data.get("notes", ""),
    )


def fixture_fetch(base_dir: Path):
    """Photos given as relative paths are read from disk next to the fixture."""

    def fetch(url: str) -> Image.Image:
        if url.startswith(("http://", "https://")):
            return fetch_image(url)
        return decode_image((base_dir / url).read_bytes())

    return fetch


def main() -> int:
    if not logger.handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    parser = argparse.ArgumentParser(description="Render a walk recap PNG from a JSON fixture.")
    parser.add_argument("--fixture", required=True, help="Path to the walk fixture JSON.")
    parser.add_argument("--out", default="recap.png", help="Output PNG path.")
    args = parser.parse_args()

    fixture_path = Path(args.fixture)
    data = load_fixture(fixture_path)

    created_at = data.get("created_at")
    now = datetime.fromisoformat(created_at) if created_at else datetime.now(timezone.utc)
    walk = build_walk(draft_from_fixture(data), now=now)

    recap = recap_input_for_walk(walk)
    recap.photo_urls = list(data.get("photos", []))[:RecapLayout.max_photos]
    png = render_recap_png(recap, fetch=fixture_fetch(fixture_path.parent))

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(png)
    logger.info("[recap] wrote %s (%d bytes, walk=%s, %.2f mi)", out, len(png), walk.id, walk.distance_miles)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
