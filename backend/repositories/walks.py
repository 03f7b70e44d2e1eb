"""
Walk repository backed by SQLAlchemy/SQLite.
"""
from datetime import timezone
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session

from domain.models import RoutePoint, Walk, WalkMedia
from repositories.models import WalkORM


def _as_decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value)).quantize(Decimal("0.01"))


def _walk_from_orm(orm: WalkORM) -> Walk:
    created_at = orm.created_at
    # SQLite drops tzinfo on the way back out
    if created_at is not None and created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return Walk(
        id=orm.id,
        dogs=orm.dogs or "",
        duration_minutes=orm.duration_minutes or 0,
        distance_miles=orm.distance_miles or 0.0,
        hourly_rate=_as_decimal(orm.hourly_rate),
        amount_due=_as_decimal(orm.amount_due),
        temperature_f=orm.temperature_f,
        weather_summary=orm.weather_summary or "",
        notes=orm.notes or "",
        route_points=[RoutePoint.from_dict(p) for p in (orm.route_points or [])],
        media=[WalkMedia.from_dict(m) for m in (orm.media or [])],
        recap_image_url=orm.recap_image_url,
        created_at=created_at,
    )


class WalksRepository:
    """Create/read/update operations for walks."""

    def create_walk(self, session: Session, walk: Walk) -> Walk:
        orm = WalkORM(
            id=walk.id,
            dogs=walk.dogs,
            duration_minutes=walk.duration_minutes,
            distance_miles=walk.distance_miles,
            hourly_rate=walk.hourly_rate,
            amount_due=walk.amount_due,
            temperature_f=walk.temperature_f,
            weather_summary=walk.weather_summary,
            notes=walk.notes,
            route_points=[p.to_dict() for p in walk.route_points],
            media=[m.to_dict() for m in walk.media],
            recap_image_url=walk.recap_image_url,
            created_at=walk.created_at,
        )
        session.add(orm)
        session.commit()
        session.refresh(orm)
        return _walk_from_orm(orm)

    def get_walk(self, session: Session, walk_id: str) -> Optional[Walk]:
        orm = session.get(WalkORM, walk_id)
        if not orm:
            return None
        return _walk_from_orm(orm)

    def list_walks(self, session: Session, limit: Optional[int] = None) -> List[Walk]:
        query = session.query(WalkORM).order_by(WalkORM.created_at.desc())
        if limit:
            query = query.limit(limit)
        return [_walk_from_orm(w) for w in query.all()]

    def append_media(
        self, session: Session, walk_id: str, media: List[WalkMedia]
    ) -> Optional[Walk]:
        orm = session.get(WalkORM, walk_id)
        if not orm:
            return None
        # reassign so the JSON column is flagged dirty
        orm.media = list(orm.media or []) + [m.to_dict() for m in media]
        session.add(orm)
        session.commit()
        session.refresh(orm)
        return _walk_from_orm(orm)

    def set_recap_image_url(self, session: Session, walk_id: str, url: str) -> Optional[Walk]:
        orm = session.get(WalkORM, walk_id)
        if not orm:
            return None
        orm.recap_image_url = url
        session.add(orm)
        session.commit()
        session.refresh(orm)
        return _walk_from_orm(orm)
