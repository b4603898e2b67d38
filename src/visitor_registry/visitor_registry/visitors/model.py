from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import isoformat_or_none
from ..core.enums import VisitorStatus


@dataclass(frozen=True)
class Visitor:
    """Domain entity: a registered visitor.

    ``registered_by_name`` is a read-model convenience filled by the
    repository join on ``users``; it is never written.
    """

    visitor_id: int
    name: str
    cin: str
    phone: str
    reason: str
    status: VisitorStatus
    registered_by: int
    created_at: datetime
    updated_at: datetime
    registered_by_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.visitor_id,
            "name": self.name,
            "cin": self.cin,
            "phone": self.phone,
            "reason": self.reason,
            "status": self.status.value,
            "registered_by": self.registered_by,
            "registered_by_name": self.registered_by_name,
            "created_at": isoformat_or_none(self.created_at),
            "updated_at": isoformat_or_none(self.updated_at),
        }


@dataclass(frozen=True)
class VisitorFields:
    """Validated, editable visitor fields (create and full update)."""

    name: str
    cin: str
    phone: str
    reason: str


@dataclass(frozen=True)
class HistoryCriteria:
    """History filters. Every filter is optional; set filters are ANDed.

    ``start_date``/``end_date`` are inclusive calendar days on ``created_at``.
    ``search`` is a case-insensitive substring of name or CIN.
    """

    status: Optional[VisitorStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    search: Optional[str] = None

    def matches(self, visitor: Visitor) -> bool:
        if self.status is not None and visitor.status != self.status:
            return False
        created_on = visitor.created_at.date()
        if self.start_date is not None and created_on < self.start_date:
            return False
        if self.end_date is not None and created_on > self.end_date:
            return False
        if self.search:
            needle = self.search.lower()
            if needle not in visitor.name.lower() and needle not in visitor.cin.lower():
                return False
        return True

    def is_empty(self) -> bool:
        return self.status is None and self.start_date is None and self.end_date is None and not self.search
