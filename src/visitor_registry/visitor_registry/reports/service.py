from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import month_key, now_local, parse_iso_date
from ..core.constants import DEFAULT_TOP_VISITORS, DEFAULT_TREND_DAYS
from ..core.enums import Role, VisitorStatus
from ..core.exceptions import ValidationError
from ..core.permissions import Capability, authorize
from ..users.model import User
from ..users.repository import UserRepository
from ..visitors.model import HistoryCriteria, Visitor
from ..visitors.repository import VisitorRepository
from ..visitors.service import parse_status


@dataclass(frozen=True)
class MonthCount:
    month: str
    count: int


def _optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    value = (value or "").strip()
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} invalide (format AAAA-MM-JJ)")


def parse_history_criteria(args: Mapping[str, Any]) -> HistoryCriteria:
    """Build criteria from query parameters (status, start_date, end_date, search)."""
    raw_status = (args.get("status") or "").strip()
    start = _optional_date(args.get("start_date"), "start_date")
    end = _optional_date(args.get("end_date"), "end_date")
    if start and end and start > end:
        raise ValidationError("start_date doit précéder end_date")

    return HistoryCriteria(
        status=parse_status(raw_status) if raw_status else None,
        start_date=start,
        end_date=end,
        search=(args.get("search") or "").strip() or None,
    )


class StatisticsService:
    """Read-only aggregation over visitors for the dashboard and history views.

    The visitor table is small enough to aggregate in memory; all counts are
    computed from one repository read per call.
    """

    def __init__(
        self,
        visitors: VisitorRepository,
        users: UserRepository,
        *,
        top_visitors_limit: int = DEFAULT_TOP_VISITORS,
    ):
        self._visitors = visitors
        self._users = users
        self._top_limit = int(top_visitors_limit)

    def total_count(self) -> int:
        return len(self._visitors.list_all())

    def count_today(self, *, now: Optional[datetime] = None) -> int:
        today = (now or now_local()).date()
        return sum(1 for v in self._visitors.list_all() if v.created_at.date() == today)

    def count_this_month(self, *, now: Optional[datetime] = None) -> int:
        current = month_key(now or now_local())
        return sum(1 for v in self._visitors.list_all() if month_key(v.created_at) == current)

    def monthly_trend(self) -> list[MonthCount]:
        return self._monthly(self._visitors.list_all())

    def daily_trend(self, *, days: int = DEFAULT_TREND_DAYS, now: Optional[datetime] = None) -> list[dict]:
        return self._daily(self._visitors.list_all(), days=days, today=(now or now_local()).date())

    def status_breakdown(self) -> dict[str, int]:
        return self._by_status(self._visitors.list_all())

    def most_frequent_visitors(self, *, limit: Optional[int] = None) -> list[dict]:
        return self._frequent(self._visitors.list_all(), limit=limit if limit is not None else self._top_limit)

    def visits_per_agent(self) -> list[dict]:
        return self._per_agent(self._visitors.list_all())

    def summary(self, identity: User, *, now: Optional[datetime] = None) -> dict:
        authorize(identity, Capability.VIEW_REPORTS)
        now = now or now_local()
        visitors = self._visitors.list_all()
        today = now.date()
        current_month = month_key(now)

        return {
            "total_visitors": len(visitors),
            "visitors_today": sum(1 for v in visitors if v.created_at.date() == today),
            "visitors_this_month": sum(1 for v in visitors if month_key(v.created_at) == current_month),
            "status_breakdown": self._by_status(visitors),
            "monthly_trend": [{"month": m.month, "count": m.count} for m in self._monthly(visitors)],
            "daily_trend": self._daily(visitors, days=DEFAULT_TREND_DAYS, today=today),
            "most_frequent_visitors": self._frequent(visitors, limit=self._top_limit),
            "visits_per_agent": self._per_agent(visitors),
        }

    def history(self, identity: User, criteria: HistoryCriteria) -> Sequence[Visitor]:
        authorize(identity, Capability.VIEW_REPORTS)
        return self._visitors.find_history(criteria)

    @staticmethod
    def _monthly(visitors: Sequence[Visitor]) -> list[MonthCount]:
        counts = Counter(month_key(v.created_at) for v in visitors)
        return [MonthCount(month=m, count=counts[m]) for m in sorted(counts)]

    @staticmethod
    def _daily(visitors: Sequence[Visitor], *, days: int, today: date) -> list[dict]:
        counts = Counter(v.created_at.date() for v in visitors)
        first = today - timedelta(days=max(int(days), 1) - 1)
        out = []
        day = first
        while day <= today:
            out.append({"date": day.isoformat(), "count": counts.get(day, 0)})
            day += timedelta(days=1)
        return out

    @staticmethod
    def _by_status(visitors: Sequence[Visitor]) -> dict[str, int]:
        counts = Counter(v.status for v in visitors)
        return {s.value: counts.get(s, 0) for s in VisitorStatus}

    @staticmethod
    def _frequent(visitors: Sequence[Visitor], *, limit: int) -> list[dict]:
        visits: Counter[str] = Counter()
        latest: dict[str, Visitor] = {}
        for v in visitors:
            visits[v.cin] += 1
            seen = latest.get(v.cin)
            if seen is None or v.created_at > seen.created_at:
                latest[v.cin] = v

        ranked = sorted(visits.items(), key=lambda item: (-item[1], item[0]))
        return [
            {
                "cin": cin,
                "name": latest[cin].name,
                "visits": count,
                "last_visit": latest[cin].created_at.isoformat(timespec="seconds"),
            }
            for cin, count in ranked[:limit]
        ]

    def _per_agent(self, visitors: Sequence[Visitor]) -> list[dict]:
        by_user = Counter(v.registered_by for v in visitors)
        rows = [
            {"user_id": agent.user_id, "name": agent.name, "visits": by_user.get(agent.user_id, 0)}
            for agent in self._users.list_by_role(Role.AGENT)
        ]
        rows.sort(key=lambda r: (-r["visits"], r["name"]))
        return rows
