"""
Walk workflow: turn operator input into a stored walk and a walk into
compositor input.
"""
from datetime import datetime, timezone
from typing import Optional

from domain.models import Walk, WalkDraft
from services.geo import meters_to_miles, route_distance_meters, thin_points
from services.dashboard import operator_tz
from services.pay import compute_amount_due
from services.recap_image import RecapInput, RecapLayout
from settings import settings

CREATED_AT_FORMAT = "%b %d, %Y %I:%M %p"


def build_walk(draft: WalkDraft, now: Optional[datetime] = None) -> Walk:
    """
    Derive the stored walk from a draft.

    Distance comes from the thinned route; the amount due uses the draft's
    rate or the configured default rate.
    """
    points = thin_points(draft.route_points)
    miles = meters_to_miles(route_distance_meters(points))
    rate = draft.hourly_rate if draft.hourly_rate is not None else settings.DEFAULT_HOURLY_RATE
    return Walk(
        id=Walk.generate_id(),
        dogs=draft.dogs.strip(),
        duration_minutes=draft.duration_minutes,
        distance_miles=round(miles, 4),
        hourly_rate=rate,
        amount_due=compute_amount_due(draft.duration_minutes, rate),
        temperature_f=draft.temperature_f,
        weather_summary=draft.weather_summary.strip(),
        notes=draft.notes,
        route_points=points,
        media=[],
        created_at=now or datetime.now(timezone.utc),
    )


def format_created_at(created_at: Optional[datetime]) -> str:
    if created_at is None:
        return ""
    # labels show the operator's wall-clock time
    if created_at.tzinfo is not None:
        created_at = created_at.astimezone(operator_tz())
    return created_at.strftime(CREATED_AT_FORMAT)


def recap_input_for_walk(walk: Walk, max_photos: Optional[int] = None) -> RecapInput:
    limit = max_photos if max_photos is not None else RecapLayout.max_photos
    return RecapInput(
        walk_id=walk.id,
        dogs=walk.dogs,
        duration_minutes=walk.duration_minutes,
        distance_miles=walk.distance_miles,
        weather=walk.weather,
        notes=walk.notes,
        created_at_label=format_created_at(walk.created_at),
        route_points=list(walk.route_points),
        photo_urls=walk.image_urls[:limit],
        amount_due=walk.amount_due,
    )
