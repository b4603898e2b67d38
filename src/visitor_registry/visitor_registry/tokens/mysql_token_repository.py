from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import AccessToken
from .repository import TokenRepository


class MySQLTokenRepository(TokenRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_token(self, *, user_id: int, token_hash: str, issued_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO access_tokens(user_id, token_hash, issued_at) VALUES(%s,%s,%s)",
                (int(user_id), token_hash, issued_at),
            )
            return int(cur.lastrowid)

    def get_by_hash(self, token_hash: str) -> Optional[AccessToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT token_id, user_id, token_hash, issued_at, last_used_at
                FROM access_tokens
                WHERE token_hash=%s
                """,
                (token_hash,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return AccessToken(
                token_id=int(row["token_id"]),
                user_id=int(row["user_id"]),
                token_hash=row["token_hash"],
                issued_at=row["issued_at"],
                last_used_at=row.get("last_used_at"),
            )

    def touch(self, token_id: int, *, used_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE access_tokens SET last_used_at=%s WHERE token_id=%s",
                (used_at, int(token_id)),
            )

    def revoke(self, token_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM access_tokens WHERE token_hash=%s", (token_hash,))
            return cur.rowcount > 0
