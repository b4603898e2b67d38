from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat_or_none
from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a staff account (admin or agent).

    Plain data object, no database access. Doubles as the resolved identity
    of an authenticated request.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "created_at": isoformat_or_none(self.created_at),
            "updated_at": isoformat_or_none(self.updated_at),
        }
