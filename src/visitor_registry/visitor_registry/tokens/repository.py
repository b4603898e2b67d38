from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import AccessToken


class TokenRepository(Protocol):
    """Token store: maps a token hash to the user it was issued for."""

    def create_token(self, *, user_id: int, token_hash: str, issued_at: datetime) -> int:
        raise NotImplementedError

    def get_by_hash(self, token_hash: str) -> Optional[AccessToken]:
        raise NotImplementedError

    def touch(self, token_id: int, *, used_at: datetime) -> None:
        raise NotImplementedError

    def revoke(self, token_hash: str) -> bool:
        """Delete the token; returns False when nothing matched."""
        raise NotImplementedError
