from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_max_length, require_non_empty
from ..core.enums import VisitorStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.permissions import Capability, authorize
from ..users.model import User
from .model import Visitor, VisitorFields
from .repository import VisitorRepository

logger = logging.getLogger(__name__)

_FIELD_LIMITS = {"name": 255, "cin": 64, "phone": 64, "reason": 1000}


def parse_status(value: Any) -> VisitorStatus:
    try:
        return VisitorStatus.parse(value)
    except ValueError:
        allowed = ", ".join(s.value for s in VisitorStatus)
        raise ValidationError(f"Statut invalide (valeurs possibles : {allowed})")


def parse_visitor_fields(payload: Mapping[str, Any]) -> VisitorFields:
    """Validate the four required visitor fields of a request body."""
    values = {}
    for field, max_len in _FIELD_LIMITS.items():
        raw = payload.get(field)
        if isinstance(raw, int) and not isinstance(raw, bool):
            # phone/CIN sent as JSON numbers
            raw = str(raw)
        value = require_non_empty(raw, field)
        values[field] = require_max_length(value, field, max_len)
    return VisitorFields(**values)


class VisitorService:
    """Use cases: register visitors, edit them, track their presence status.

    Every operation checks its capability first; only admins hold
    UPDATE_VISITOR and DELETE_VISITOR. Status changes are deliberately not
    order-checked: staff may correct a status in any direction.
    """

    def __init__(self, visitors: VisitorRepository):
        self._visitors = visitors

    def list(self, identity: User) -> Sequence[Visitor]:
        authorize(identity, Capability.VIEW_VISITORS)
        return self._visitors.list_all()

    def get(self, identity: User, visitor_id: int) -> Visitor:
        authorize(identity, Capability.VIEW_VISITORS)
        return self._require(visitor_id)

    def create(self, identity: User, payload: Mapping[str, Any], *, now: Optional[datetime] = None) -> Visitor:
        authorize(identity, Capability.CREATE_VISITOR)
        fields = parse_visitor_fields(payload)

        if self._visitors.get_by_cin(fields.cin):
            raise ConflictError("Un visiteur avec ce CIN existe déjà")

        visitor_id = self._visitors.create_visitor(
            fields=fields,
            status=VisitorStatus.PENDING,
            registered_by=identity.user_id,
            created_at=now or now_local(),
        )
        logger.info("Visitor %s registered by user %s", visitor_id, identity.user_id)
        return self._require(visitor_id)

    def update(
        self,
        identity: User,
        visitor_id: int,
        payload: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> Visitor:
        authorize(identity, Capability.UPDATE_VISITOR)
        self._require(visitor_id)

        fields = parse_visitor_fields(payload)
        status = parse_status(payload["status"]) if payload.get("status") not in (None, "") else None

        other = self._visitors.get_by_cin(fields.cin)
        if other and other.visitor_id != int(visitor_id):
            raise ConflictError("Un visiteur avec ce CIN existe déjà")

        self._visitors.update_visitor(
            visitor_id=int(visitor_id),
            fields=fields,
            status=status,
            updated_at=now or now_local(),
        )
        logger.info("Visitor %s updated by user %s", visitor_id, identity.user_id)
        return self._require(visitor_id)

    def delete(self, identity: User, visitor_id: int) -> Visitor:
        authorize(identity, Capability.DELETE_VISITOR)
        visitor = self._require(visitor_id)

        if not self._visitors.delete_by_id(int(visitor_id)):
            raise NotFoundError("Visiteur introuvable")
        logger.info("Visitor %s deleted by user %s", visitor_id, identity.user_id)
        return visitor

    def update_status(
        self,
        identity: User,
        visitor_id: int,
        new_status: Any,
        *,
        now: Optional[datetime] = None,
    ) -> Visitor:
        authorize(identity, Capability.CHANGE_VISITOR_STATUS)
        status = parse_status(new_status)
        visitor = self._require(visitor_id)

        self._visitors.update_status(visitor_id=int(visitor_id), status=status, updated_at=now or now_local())
        logger.info(
            "Visitor %s status %s -> %s by user %s",
            visitor_id,
            visitor.status.value,
            status.value,
            identity.user_id,
        )
        return self._require(visitor_id)

    def _require(self, visitor_id: int) -> Visitor:
        visitor = self._visitors.get_by_id(int(visitor_id))
        if not visitor:
            raise NotFoundError("Visiteur introuvable")
        return visitor
