from __future__ import annotations

from datetime import date, datetime


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time; the single clock read, so tests can patch it."""
    return datetime.now()


def month_key(value: datetime) -> str:
    return value.strftime("%Y-%m")


def isoformat_or_none(value: datetime | None) -> str | None:
    return value.isoformat(timespec="seconds") if value else None
