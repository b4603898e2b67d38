from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..core.enums import VisitorStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import HistoryCriteria, Visitor, VisitorFields
from .repository import VisitorRepository

_SELECT_VISITORS = """
    SELECT v.visitor_id, v.name, v.cin, v.phone, v.reason, v.status,
           v.registered_by, v.created_at, v.updated_at,
           u.name AS registered_by_name
    FROM visitors v
    LEFT JOIN users u ON u.user_id = v.registered_by
"""


def _row_to_visitor(row: dict) -> Visitor:
    return Visitor(
        visitor_id=int(row["visitor_id"]),
        name=row["name"],
        cin=row["cin"],
        phone=row["phone"],
        reason=row["reason"],
        status=VisitorStatus(row["status"]),
        registered_by=int(row["registered_by"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        registered_by_name=row.get("registered_by_name"),
    )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class MySQLVisitorRepository(VisitorRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, visitor_id: int) -> Optional[Visitor]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT_VISITORS} WHERE v.visitor_id=%s", (int(visitor_id),))
            row = fetchone(cur)
            return _row_to_visitor(row) if row else None

    def get_by_cin(self, cin: str) -> Optional[Visitor]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT_VISITORS} WHERE v.cin=%s", (cin,))
            row = fetchone(cur)
            return _row_to_visitor(row) if row else None

    def list_all(self) -> Sequence[Visitor]:
        return self.find_history(HistoryCriteria())

    def find_history(self, criteria: HistoryCriteria) -> Sequence[Visitor]:
        clauses: list[str] = []
        params: list[object] = []

        if criteria.status is not None:
            clauses.append("v.status=%s")
            params.append(criteria.status.value)
        if criteria.start_date is not None:
            clauses.append("v.created_at >= %s")
            params.append(datetime.combine(criteria.start_date, datetime.min.time()))
        if criteria.end_date is not None:
            # half-open upper bound keeps the whole end day
            clauses.append("v.created_at < %s")
            params.append(datetime.combine(criteria.end_date + timedelta(days=1), datetime.min.time()))
        if criteria.search:
            pattern = f"%{_escape_like(criteria.search.lower())}%"
            clauses.append("(LOWER(v.name) LIKE %s OR LOWER(v.cin) LIKE %s)")
            params.extend([pattern, pattern])

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT_VISITORS} {where} ORDER BY v.created_at DESC, v.visitor_id DESC",
                tuple(params),
            )
            return [_row_to_visitor(r) for r in fetchall(cur)]

    def create_visitor(
        self,
        *,
        fields: VisitorFields,
        status: VisitorStatus,
        registered_by: int,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO visitors(name, cin, phone, reason, status, registered_by, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    fields.name,
                    fields.cin,
                    fields.phone,
                    fields.reason,
                    status.value,
                    int(registered_by),
                    created_at,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def update_visitor(
        self,
        *,
        visitor_id: int,
        fields: VisitorFields,
        status: Optional[VisitorStatus],
        updated_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE visitors
                SET name=%s, cin=%s, phone=%s, reason=%s, status=COALESCE(%s, status), updated_at=%s
                WHERE visitor_id=%s
                """,
                (
                    fields.name,
                    fields.cin,
                    fields.phone,
                    fields.reason,
                    status.value if status else None,
                    updated_at,
                    int(visitor_id),
                ),
            )
            return cur.rowcount > 0

    def update_status(self, *, visitor_id: int, status: VisitorStatus, updated_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE visitors SET status=%s, updated_at=%s WHERE visitor_id=%s",
                (status.value, updated_at, int(visitor_id)),
            )
            return cur.rowcount > 0

    def delete_by_id(self, visitor_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM visitors WHERE visitor_id=%s", (int(visitor_id),))
            return cur.rowcount > 0
