"""
Core domain models for the walk recap service.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MediaType(str, Enum):
    """Kind of uploaded media, inferred from the MIME type."""
    IMAGE = "image"
    VIDEO = "video"


@dataclass(frozen=True)
class RoutePoint:
    """A single latitude/longitude sample of a walked route."""
    lat: float
    lng: float

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoutePoint":
        return cls(lat=float(data["lat"]), lng=float(data["lng"]))


@dataclass(frozen=True)
class WalkMedia:
    """
    Reference to one stored media object.

    Immutable once created; the walk only keeps the reference.
    """
    url: str
    path: str
    type: MediaType
    content_type: str
    name: str
    size: int
    created_at: str  # ISO-8601

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "path": self.path,
            "type": self.type.value,
            "content_type": self.content_type,
            "name": self.name,
            "size": self.size,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WalkMedia":
        return cls(
            url=data.get("url", ""),
            path=data.get("path", ""),
            type=MediaType(data.get("type") or MediaType.IMAGE.value),
            content_type=data.get("content_type", ""),
            name=data.get("name", ""),
            size=int(data.get("size") or 0),
            created_at=data.get("created_at", ""),
        )


@dataclass(frozen=True)
class WeatherNow:
    """Current weather snapshot attached to a walk."""
    temperature_f: Optional[int]
    summary: str = ""


@dataclass
class Walk:
    """
    One recorded dog-walking session.

    distance_miles and amount_due are computed server-side from the route
    and the rate; they are never taken from client input.
    """
    id: str
    dogs: str
    duration_minutes: int
    distance_miles: float = 0.0
    hourly_rate: Optional[Decimal] = None
    amount_due: Optional[Decimal] = None
    temperature_f: Optional[int] = None
    weather_summary: str = ""
    notes: str = ""
    route_points: List[RoutePoint] = field(default_factory=list)
    media: List[WalkMedia] = field(default_factory=list)
    recap_image_url: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)

    @staticmethod
    def generate_id() -> str:
        return str(uuid.uuid4())

    @property
    def weather(self) -> Optional[WeatherNow]:
        if self.temperature_f is None and not self.weather_summary:
            return None
        return WeatherNow(temperature_f=self.temperature_f, summary=self.weather_summary)

    @property
    def image_urls(self) -> List[str]:
        return [m.url for m in self.media if m.type == MediaType.IMAGE and m.url]


@dataclass
class WalkDraft:
    """Operator input for a new walk, before derived fields are computed."""
    dogs: str
    duration_minutes: int
    route_points: List[RoutePoint] = field(default_factory=list)
    hourly_rate: Optional[Decimal] = None
    temperature_f: Optional[int] = None
    weather_summary: str = ""
    notes: str = ""
