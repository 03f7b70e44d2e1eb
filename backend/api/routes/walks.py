"""
Walks API routes.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel, Field

from db import SessionLocal
from domain.models import RoutePoint, Walk, WalkDraft
from repositories import WalksRepository
from services.media import make_media_fetcher, upload_media, upload_recap_image
from services.recap_image import RecapRenderError, encode_png, render_recap_png
from services.remote_images import maybe_proxy_url
from services.share_card import render_error_card, render_not_found_card, render_open_graph_card
from services.walks import build_walk, recap_input_for_walk
from storage.file_storage import FileStorage

logger = logging.getLogger(__name__)

router = APIRouter()
storage = FileStorage()
walks_repo = WalksRepository()


class RoutePointModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class WalkCreate(BaseModel):
    dogs: str = Field(..., min_length=1)
    duration_minutes: int = Field(..., ge=0)
    route_points: List[RoutePointModel] = []
    hourly_rate: Optional[Decimal] = Field(None, ge=0)
    temperature_f: Optional[int] = None
    weather_summary: str = ""
    notes: str = ""


class MediaResponse(BaseModel):
    url: str
    display_url: str
    path: str
    type: str
    content_type: str
    name: str
    size: int
    created_at: str


class WalkResponse(BaseModel):
    id: str
    dogs: str
    duration_minutes: int
    distance_miles: float
    hourly_rate: Optional[Decimal] = None
    amount_due: Optional[Decimal] = None
    temperature_f: Optional[int] = None
    weather_summary: str
    notes: str
    route_points: List[RoutePointModel]
    media: List[MediaResponse]
    recap_image_url: Optional[str] = None
    share_url: str
    created_at: str


def walk_to_response(walk: Walk) -> WalkResponse:
    """Convert domain Walk to API response. Storage URLs go through the media proxy."""
    return WalkResponse(
        id=walk.id,
        dogs=walk.dogs,
        duration_minutes=walk.duration_minutes,
        distance_miles=walk.distance_miles,
        hourly_rate=walk.hourly_rate,
        amount_due=walk.amount_due,
        temperature_f=walk.temperature_f,
        weather_summary=walk.weather_summary,
        notes=walk.notes,
        route_points=[RoutePointModel(lat=p.lat, lng=p.lng) for p in walk.route_points],
        media=[
            MediaResponse(
                url=m.url,
                display_url=maybe_proxy_url(m.url),
                path=m.path,
                type=m.type.value,
                content_type=m.content_type,
                name=m.name,
                size=m.size,
                created_at=m.created_at,
            )
            for m in walk.media
        ],
        recap_image_url=walk.recap_image_url,
        share_url=f"/walk/{walk.id}",
        created_at=walk.created_at.isoformat() if walk.created_at else "",
    )


def _png_response(png: bytes, cache_control: str) -> Response:
    return Response(content=png, media_type="image/png", headers={"Cache-Control": cache_control})


@router.post("", response_model=WalkResponse, status_code=201)
async def create_walk(payload: WalkCreate):
    """Record a finished walk. Distance and amount due are computed here."""
    draft = WalkDraft(
        dogs=payload.dogs,
        duration_minutes=payload.duration_minutes,
        route_points=[RoutePoint(lat=p.lat, lng=p.lng) for p in payload.route_points],
        hourly_rate=payload.hourly_rate,
        temperature_f=payload.temperature_f,
        weather_summary=payload.weather_summary,
        notes=payload.notes,
    )
    walk = build_walk(draft)
    with SessionLocal() as session:
        saved = walks_repo.create_walk(session, walk)
    logger.info(
        "[walks] created %s dogs=%r points=%d miles=%.2f",
        saved.id,
        saved.dogs,
        len(saved.route_points),
        saved.distance_miles,
    )
    return walk_to_response(saved)


@router.get("", response_model=List[WalkResponse])
async def list_walks(limit: Optional[int] = None):
    """List walks, newest first."""
    with SessionLocal() as session:
        walks = walks_repo.list_walks(session, limit=limit)
    return [walk_to_response(w) for w in walks]


@router.get("/{walk_id}", response_model=WalkResponse)
async def get_walk(walk_id: str):
    """Get a walk by ID."""
    with SessionLocal() as session:
        walk = walks_repo.get_walk(session, walk_id)
    if not walk:
        raise HTTPException(status_code=404, detail="Walk not found")
    return walk_to_response(walk)


@router.post("/{walk_id}/media", response_model=WalkResponse)
async def upload_walk_media(walk_id: str, files: List[UploadFile] = File(...)):
    """Upload photos/videos and attach them to a walk."""
    with SessionLocal() as session:
        walk = walks_repo.get_walk(session, walk_id)
        if not walk:
            raise HTTPException(status_code=404, detail="Walk not found")

        uploaded = []
        try:
            for file in files:
                data = await file.read()
                uploaded.append(
                    upload_media(storage, walk_id, file.filename, file.content_type, data)
                )
        except (OSError, ValueError) as exc:
            # drop the partial batch so no stored file is left unreferenced
            logger.exception("[media] upload failed for walk %s", walk_id)
            for media in uploaded:
                storage.delete(media.path)
            raise HTTPException(status_code=500, detail="Media upload failed") from exc

        updated = walks_repo.append_media(session, walk_id, uploaded)
    logger.info("[media] attached %d file(s) to walk %s", len(uploaded), walk_id)
    return walk_to_response(updated)


@router.post("/{walk_id}/recap", response_model=WalkResponse)
def create_recap(walk_id: str):
    """Render the recap image, store it and remember its URL on the walk."""
    with SessionLocal() as session:
        walk = walks_repo.get_walk(session, walk_id)
        if not walk:
            raise HTTPException(status_code=404, detail="Walk not found")

        try:
            png = render_recap_png(recap_input_for_walk(walk), fetch=make_media_fetcher(storage))
        except RecapRenderError as exc:
            logger.exception("[recap] render failed for walk %s", walk_id)
            raise HTTPException(status_code=500, detail=str(exc)) from exc

        url = upload_recap_image(storage, walk_id, png)
        updated = walks_repo.set_recap_image_url(session, walk_id, url)
    return walk_to_response(updated)


@router.get("/{walk_id}/recap-image")
def get_recap_image(walk_id: str):
    """
    Render the recap on demand.

    Always answers with a PNG: when the walk cannot be loaded the body is an
    error card describing the failure.
    """
    try:
        with SessionLocal() as session:
            walk = walks_repo.get_walk(session, walk_id)
    except Exception as exc:
        logger.exception("[recap] could not load walk %s", walk_id)
        return _png_response(encode_png(render_error_card(str(exc))), "no-store")

    if not walk:
        return _png_response(encode_png(render_error_card(f"Walk {walk_id} not found")), "no-store")

    try:
        png = render_recap_png(recap_input_for_walk(walk), fetch=make_media_fetcher(storage))
    except RecapRenderError as exc:
        logger.exception("[recap] render failed for walk %s", walk_id)
        png = encode_png(render_error_card(str(exc)))
    return _png_response(png, "no-store")


@router.get("/{walk_id}/opengraph-image")
def get_opengraph_image(walk_id: str):
    """1200x630 link preview image."""
    with SessionLocal() as session:
        walk = walks_repo.get_walk(session, walk_id)
    if not walk:
        card = render_not_found_card()
    else:
        card = render_open_graph_card(walk, fetch=make_media_fetcher(storage))
    return _png_response(encode_png(card), "public, max-age=300")
