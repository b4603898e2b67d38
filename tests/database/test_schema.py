from __future__ import annotations

from src.visitor_registry.visitor_registry import SCHEMA_PATH
from src.visitor_registry.visitor_registry.database.bootstrap import _iter_sql_statements, _strip_comments


def _create_table(name: str) -> str:
    sql = _strip_comments(SCHEMA_PATH.read_text(encoding="utf-8"))
    return next(s for s in _iter_sql_statements(sql) if f"CREATE TABLE IF NOT EXISTS {name}" in s)


def test_deleting_a_user_never_removes_visitor_history():
    visitors = _create_table("visitors")
    assert "REFERENCES users (user_id) ON DELETE RESTRICT" in visitors
    assert "CASCADE" not in visitors


def test_tokens_are_removed_with_their_user():
    tokens = _create_table("access_tokens")
    assert "REFERENCES users (user_id) ON DELETE CASCADE" in tokens
