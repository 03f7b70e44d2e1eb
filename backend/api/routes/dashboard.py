"""
Dashboard route: pay-week earnings, month calendar and recent walks.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from api.routes.walks import WalkResponse, walk_to_response, walks_repo
from db import SessionLocal
from services.dashboard import month_calendar, operator_tz, pay_week_summary

router = APIRouter()

RECENT_WALKS_LIMIT = 50


class PayWeekResponse(BaseModel):
    start: str
    end: str
    walk_count: int
    total: Decimal


class CalendarDayResponse(BaseModel):
    date: str
    in_month: bool
    walk_count: int
    total: Decimal


class DashboardResponse(BaseModel):
    month: str
    pay_week: PayWeekResponse
    calendar: List[CalendarDayResponse]
    recent_walks: List[WalkResponse]


def parse_month(value: Optional[str], now: datetime) -> tuple:
    """Parse YYYY-MM into (year, month); defaults to the current month."""
    if not value:
        return now.year, now.month
    try:
        parsed = datetime.strptime(value, "%Y-%m")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="month must be YYYY-MM") from exc
    return parsed.year, parsed.month


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(month: Optional[str] = None):
    now = datetime.now(operator_tz())
    year, month_num = parse_month(month, now)

    with SessionLocal() as session:
        walks = walks_repo.list_walks(session)

    week = pay_week_summary(walks, now)
    days = month_calendar(walks, year, month_num)

    return DashboardResponse(
        month=f"{year:04d}-{month_num:02d}",
        pay_week=PayWeekResponse(
            start=week.start.isoformat(),
            end=week.end.isoformat(),
            walk_count=week.walk_count,
            total=week.total,
        ),
        calendar=[
            CalendarDayResponse(
                date=d.day.isoformat(),
                in_month=d.in_month,
                walk_count=d.walk_count,
                total=d.total,
            )
            for d in days
        ],
        recent_walks=[walk_to_response(w) for w in walks[:RECENT_WALKS_LIMIT]],
    )
