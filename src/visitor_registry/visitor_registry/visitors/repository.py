from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import VisitorStatus
from .model import HistoryCriteria, Visitor, VisitorFields


class VisitorRepository(Protocol):
    """Repository interface for Visitor rows (sole owner of the table)."""

    def get_by_id(self, visitor_id: int) -> Optional[Visitor]:
        raise NotImplementedError

    def get_by_cin(self, cin: str) -> Optional[Visitor]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Visitor]:
        """All visitors, newest first."""
        raise NotImplementedError

    def find_history(self, criteria: HistoryCriteria) -> Sequence[Visitor]:
        """Visitors matching ``criteria``, newest first, unpaginated."""
        raise NotImplementedError

    def create_visitor(
        self,
        *,
        fields: VisitorFields,
        status: VisitorStatus,
        registered_by: int,
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def update_visitor(
        self,
        *,
        visitor_id: int,
        fields: VisitorFields,
        status: Optional[VisitorStatus],
        updated_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def update_status(self, *, visitor_id: int, status: VisitorStatus, updated_at: datetime) -> bool:
        raise NotImplementedError

    def delete_by_id(self, visitor_id: int) -> bool:
        raise NotImplementedError
