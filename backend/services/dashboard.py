"""
Dashboard aggregation: pay-week earnings and the monthly walk calendar.

Pay weeks run Friday 00:00 to the next Friday 00:00 in the operator's
timezone. Calendars are Sunday-start grids padded to whole weeks.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

import pytz

from domain.models import Walk
from settings import settings

FRIDAY = 4  # date.weekday()


def operator_tz() -> tzinfo:
    return pytz.timezone(settings.TIMEZONE)


def _localize(naive: datetime, tz: tzinfo) -> datetime:
    # pytz zones need localize() to pick the right offset
    localize = getattr(tz, "localize", None)
    return localize(naive) if localize else naive.replace(tzinfo=tz)


def _local(dt: datetime, tz: tzinfo) -> datetime:
    return dt.astimezone(tz) if dt.tzinfo else _localize(dt, tz)


def start_of_pay_week(now: datetime) -> datetime:
    """Most recent Friday 00:00 (today when today is Friday)."""
    days_since_friday = (now.weekday() - FRIDAY) % 7
    day = now.date() - timedelta(days=days_since_friday)
    midnight = datetime.combine(day, time.min)
    return _localize(midnight, now.tzinfo) if now.tzinfo else midnight


def end_of_pay_week(start: datetime) -> datetime:
    if start.tzinfo is None:
        return start + timedelta(days=7)
    return _localize(datetime.combine(start.date() + timedelta(days=7), time.min), start.tzinfo)


@dataclass
class PayWeekSummary:
    start: datetime
    end: datetime
    walk_count: int
    total: Decimal
    walks: List[Walk] = field(default_factory=list)


def pay_week_summary(walks: Iterable[Walk], now: Optional[datetime] = None) -> PayWeekSummary:
    tz = operator_tz()
    now = _local(now, tz) if now else datetime.now(tz)
    start = start_of_pay_week(now)
    end = end_of_pay_week(start)
    in_week = [w for w in walks if w.created_at and start <= _local(w.created_at, tz) < end]
    total = sum((w.amount_due or Decimal("0") for w in in_week), Decimal("0"))
    return PayWeekSummary(start=start, end=end, walk_count=len(in_week), total=total, walks=in_week)


@dataclass
class CalendarDay:
    day: date
    in_month: bool
    walk_count: int = 0
    total: Decimal = Decimal("0")


def month_calendar(walks: Iterable[Walk], year: int, month: int) -> List[CalendarDay]:
    """Sunday-start day grid covering the month, with per-day walk totals."""
    tz = operator_tz()
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    # date.weekday(): Monday=0 .. Sunday=6
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    end = last + timedelta(days=(5 - last.weekday()) % 7)

    by_day: Dict[date, CalendarDay] = {}
    cursor = start
    while cursor <= end:
        by_day[cursor] = CalendarDay(day=cursor, in_month=cursor.month == month)
        cursor += timedelta(days=1)

    for walk in walks:
        if not walk.created_at:
            continue
        entry = by_day.get(_local(walk.created_at, tz).date())
        if entry is None:
            continue
        entry.walk_count += 1
        entry.total += walk.amount_due or Decimal("0")

    return list(by_day.values())
