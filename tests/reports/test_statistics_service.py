from __future__ import annotations

from datetime import datetime

import pytest

from src.visitor_registry.visitor_registry.core.enums import Role, VisitorStatus
from src.visitor_registry.visitor_registry.core.exceptions import ValidationError
from src.visitor_registry.visitor_registry.reports.service import (
    MonthCount,
    StatisticsService,
    parse_history_criteria,
)
from src.visitor_registry.visitor_registry.visitors.model import Visitor


@pytest.fixture
def stats(visitors_repo, users_repo) -> StatisticsService:
    return StatisticsService(visitors_repo, users_repo, top_visitors_limit=3)


def test_monthly_trend_is_chronological(stats, visitors_repo):
    visitors_repo.seed(name="B", cin="B1", created_at=datetime(2024, 2, 10, 9, 0))
    for i, day in enumerate((5, 12, 28)):
        visitors_repo.seed(name="J", cin=f"J{i}", created_at=datetime(2024, 1, day, 9, 0))

    assert stats.monthly_trend() == [MonthCount("2024-01", 3), MonthCount("2024-02", 1)]


def test_counts_follow_the_server_clock(stats, visitors_repo, fixed_now):
    visitors_repo.seed(name="A", cin="C1", created_at=datetime(2024, 3, 15, 8, 0))
    visitors_repo.seed(name="B", cin="C2", created_at=datetime(2024, 3, 2, 8, 0))
    visitors_repo.seed(name="C", cin="C3", created_at=datetime(2024, 2, 29, 8, 0))
    visitors_repo.seed(name="D", cin="C4", created_at=datetime(2023, 3, 15, 8, 0))

    assert stats.total_count() == 4
    assert stats.count_today(now=fixed_now) == 1
    assert stats.count_this_month(now=fixed_now) == 2


def test_daily_trend_is_zero_filled(stats, visitors_repo, fixed_now):
    visitors_repo.seed(name="A", cin="D1", created_at=datetime(2024, 3, 15, 8, 0))
    visitors_repo.seed(name="B", cin="D2", created_at=datetime(2024, 3, 13, 8, 0))
    visitors_repo.seed(name="C", cin="D3", created_at=datetime(2024, 3, 13, 17, 0))

    trend = stats.daily_trend(days=3, now=fixed_now)

    assert trend == [
        {"date": "2024-03-13", "count": 2},
        {"date": "2024-03-14", "count": 0},
        {"date": "2024-03-15", "count": 1},
    ]


def test_status_breakdown_lists_every_status(stats, visitors_repo):
    visitors_repo.seed(name="A", cin="S1", created_at=datetime(2024, 1, 1), status=VisitorStatus.ENTERED)

    assert stats.status_breakdown() == {"Pending": 0, "Entered": 1, "Exited": 0}


class _ListVisitors:
    """Returns a fixed list, including repeated CINs a real table could hold after re-registration."""

    def __init__(self, visitors):
        self._visitors = visitors

    def list_all(self):
        return sorted(self._visitors, key=lambda v: v.created_at, reverse=True)


def _visitor(visitor_id: int, name: str, cin: str, created_at: datetime) -> Visitor:
    return Visitor(
        visitor_id=visitor_id,
        name=name,
        cin=cin,
        phone="0600000000",
        reason="Visite",
        status=VisitorStatus.EXITED,
        registered_by=1,
        created_at=created_at,
        updated_at=created_at,
    )


def test_most_frequent_visitors_group_by_cin(users_repo):
    repo = _ListVisitors(
        [
            _visitor(1, "Old Name", "X1", datetime(2024, 1, 1)),
            _visitor(2, "New Name", "X1", datetime(2024, 2, 1)),
            _visitor(3, "Z", "X2", datetime(2024, 1, 3)),
            _visitor(4, "Y", "X0", datetime(2024, 1, 4)),
            _visitor(5, "Y", "X0", datetime(2024, 1, 5)),
            _visitor(6, "W", "X3", datetime(2024, 1, 6)),
        ]
    )
    stats = StatisticsService(repo, users_repo)

    top = stats.most_frequent_visitors(limit=3)

    assert [(row["cin"], row["visits"]) for row in top] == [("X0", 2), ("X1", 2), ("X2", 1)]
    assert top[1]["name"] == "New Name"
    assert top[1]["last_visit"] == "2024-02-01T00:00:00"


def test_most_frequent_visitors_explicit_zero_limit_is_empty(users_repo):
    repo = _ListVisitors([_visitor(1, "A", "X1", datetime(2024, 1, 1))])
    stats = StatisticsService(repo, users_repo, top_visitors_limit=5)

    assert stats.most_frequent_visitors(limit=0) == []
    assert len(stats.most_frequent_visitors()) == 1


def test_visits_per_agent_excludes_admins_and_keeps_idle_agents(stats, visitors_repo, users_repo, admin, agent):
    idle = users_repo.add("Agent Idle", "idle@example.com", "idle123", Role.AGENT)
    visitors_repo.seed(name="A", cin="P1", created_at=datetime(2024, 1, 1), registered_by=agent.user_id)
    visitors_repo.seed(name="B", cin="P2", created_at=datetime(2024, 1, 1), registered_by=agent.user_id)
    visitors_repo.seed(name="C", cin="P3", created_at=datetime(2024, 1, 1), registered_by=admin.user_id)

    assert stats.visits_per_agent() == [
        {"user_id": agent.user_id, "name": "Agent Karim", "visits": 2},
        {"user_id": idle.user_id, "name": "Agent Idle", "visits": 0},
    ]


def test_summary_bundles_dashboard_figures(stats, visitors_repo, agent, fixed_now):
    visitors_repo.seed(name="A", cin="S1", created_at=datetime(2024, 3, 15, 9, 0), registered_by=agent.user_id)

    summary = stats.summary(agent, now=fixed_now)

    assert summary["total_visitors"] == 1
    assert summary["visitors_today"] == 1
    assert summary["visitors_this_month"] == 1
    assert summary["monthly_trend"] == [{"month": "2024-03", "count": 1}]
    assert summary["status_breakdown"]["Pending"] == 1
    assert len(summary["daily_trend"]) == 7
    assert summary["most_frequent_visitors"][0]["cin"] == "S1"
    assert summary["visits_per_agent"][0]["visits"] == 1


def test_history_filters_compose_newest_first(stats, visitors_repo, agent):
    visitors_repo.seed(name="Jan entered 1", cin="H1", created_at=datetime(2024, 1, 5), status=VisitorStatus.ENTERED)
    visitors_repo.seed(name="Jan entered 2", cin="H2", created_at=datetime(2024, 1, 31, 18, 0), status=VisitorStatus.ENTERED)
    visitors_repo.seed(name="Jan pending", cin="H3", created_at=datetime(2024, 1, 10), status=VisitorStatus.PENDING)
    visitors_repo.seed(name="Jan exited", cin="H4", created_at=datetime(2024, 1, 11), status=VisitorStatus.EXITED)
    visitors_repo.seed(name="Feb entered", cin="H5", created_at=datetime(2024, 2, 1), status=VisitorStatus.ENTERED)
    visitors_repo.seed(name="Dec entered", cin="H6", created_at=datetime(2023, 12, 31), status=VisitorStatus.ENTERED)

    criteria = parse_history_criteria({"status": "Entered", "start_date": "2024-01-01", "end_date": "2024-01-31"})

    assert [v.cin for v in stats.history(agent, criteria)] == ["H2", "H1"]


def test_history_search_matches_name_or_cin(stats, visitors_repo, agent):
    visitors_repo.seed(name="Omar Idrissi", cin="QA1", created_at=datetime(2024, 1, 1))
    visitors_repo.seed(name="Nadia", cin="OMX2", created_at=datetime(2024, 1, 2))
    visitors_repo.seed(name="Rachid", cin="RR3", created_at=datetime(2024, 1, 3))

    criteria = parse_history_criteria({"search": "om"})

    assert [v.cin for v in stats.history(agent, criteria)] == ["OMX2", "QA1"]


@pytest.mark.parametrize(
    "args",
    [
        {"status": "Lost"},
        {"start_date": "01/02/2024"},
        {"start_date": "2024-02-01", "end_date": "2024-01-01"},
    ],
)
def test_parse_history_criteria_rejects_bad_filters(args):
    with pytest.raises(ValidationError):
        parse_history_criteria(args)


def test_parse_history_criteria_ignores_blank_values():
    assert parse_history_criteria({"status": "", "search": "  ", "start_date": ""}).is_empty()
