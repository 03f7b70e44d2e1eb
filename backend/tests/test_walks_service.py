from datetime import datetime, timezone
from decimal import Decimal

import pytest

from domain.models import MediaType, RoutePoint, Walk, WalkDraft, WalkMedia
from services.geo import haversine_meters, meters_to_miles
from services.walks import build_walk, format_created_at, recap_input_for_walk

NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def utc_operator(monkeypatch):
    from settings import settings

    monkeypatch.setattr(settings, "TIMEZONE", "UTC")


def _media(i, media_type=MediaType.IMAGE):
    return WalkMedia(
        url=f"/media/walks/w1/{i}",
        path=f"walks/w1/{i}",
        type=media_type,
        content_type="",
        name=str(i),
        size=0,
        created_at="",
    )


def test_build_walk_computes_distance_and_pay():
    a, b = RoutePoint(41.0, -87.0), RoutePoint(41.001, -87.0)
    draft = WalkDraft(
        dogs="  Biscuit ",
        duration_minutes=30,
        route_points=[a, RoutePoint(41.0000001, -87.0), b],
        hourly_rate=Decimal("25"),
    )

    walk = build_walk(draft, now=NOW)

    assert walk.dogs == "Biscuit"
    assert walk.route_points == [a, b]
    assert walk.distance_miles == pytest.approx(meters_to_miles(haversine_meters(a, b)), abs=1e-4)
    assert walk.amount_due == Decimal("12.50")
    assert walk.created_at == NOW
    assert walk.media == []


def test_build_walk_falls_back_to_default_rate(monkeypatch):
    from settings import settings

    monkeypatch.setattr(settings, "DEFAULT_HOURLY_RATE", Decimal("20"))
    walk = build_walk(WalkDraft(dogs="Pepper", duration_minutes=45), now=NOW)
    assert walk.hourly_rate == Decimal("20")
    assert walk.amount_due == Decimal("15.00")


def test_build_walk_without_any_rate(monkeypatch):
    from settings import settings

    monkeypatch.setattr(settings, "DEFAULT_HOURLY_RATE", None)
    walk = build_walk(WalkDraft(dogs="Pepper", duration_minutes=45), now=NOW)
    assert walk.amount_due is None
    assert walk.distance_miles == 0.0


def test_format_created_at():
    assert format_created_at(NOW) == "Oct 19, 2026 09:30 AM"
    assert format_created_at(None) == ""


def test_recap_input_uses_first_six_images_only():
    media = [_media(i) for i in range(8)]
    media.insert(1, _media("clip", MediaType.VIDEO))
    walk = Walk(
        id="w1",
        dogs="Biscuit",
        duration_minutes=30,
        temperature_f=70,
        weather_summary="Clear",
        media=media,
        created_at=NOW,
    )

    data = recap_input_for_walk(walk)

    assert data.photo_urls == [f"/media/walks/w1/{i}" for i in range(6)]
    assert data.weather.temperature_f == 70
    assert data.created_at_label == "Oct 19, 2026 09:30 AM"


def test_format_created_at_uses_operator_timezone(monkeypatch):
    from settings import settings

    monkeypatch.setattr(settings, "TIMEZONE", "America/Chicago")
    afternoon_utc = datetime(2026, 10, 19, 14, 30, tzinfo=timezone.utc)
    assert format_created_at(afternoon_utc) == "Oct 19, 2026 09:30 AM"
