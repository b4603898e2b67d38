from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AccessToken:
    """A stored bearer token: only the SHA-256 hash of the plaintext is kept."""

    token_id: int
    user_id: int
    token_hash: str
    issued_at: datetime
    last_used_at: Optional[datetime] = None
