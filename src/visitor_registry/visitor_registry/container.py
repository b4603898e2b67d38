from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .database.connection import DBConfig, DatabaseConnection
from .exports.service import VisitorExportService
from .reports.service import StatisticsService
from .tokens.mysql_token_repository import MySQLTokenRepository
from .tokens.repository import TokenRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService
from .visitors.mysql_visitor_repository import MySQLVisitorRepository
from .visitors.repository import VisitorRepository
from .visitors.service import VisitorService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    tokens_repo: TokenRepository
    visitors_repo: VisitorRepository

    auth_service: AuthService
    visitor_service: VisitorService
    statistics_service: StatisticsService
    export_service: VisitorExportService


def wire_container(
    *,
    users_repo: UserRepository,
    tokens_repo: TokenRepository,
    visitors_repo: VisitorRepository,
    conn: Optional[DatabaseConnection] = None,
    top_visitors_limit: int = 5,
    pdf_font_path: Optional[str] = None,
) -> Container:
    """Build services on top of any repository implementation (MySQL or in-memory)."""
    return Container(
        conn=conn,
        users_repo=users_repo,
        tokens_repo=tokens_repo,
        visitors_repo=visitors_repo,
        auth_service=AuthService(users_repo, tokens_repo),
        visitor_service=VisitorService(visitors_repo),
        statistics_service=StatisticsService(visitors_repo, users_repo, top_visitors_limit=top_visitors_limit),
        export_service=VisitorExportService(font_path=pdf_font_path),
    )


def build_container(
    *,
    db_config: dict,
    top_visitors_limit: int = 5,
    pdf_font_path: Optional[str] = None,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))
    return wire_container(
        users_repo=MySQLUserRepository(conn),
        tokens_repo=MySQLTokenRepository(conn),
        visitors_repo=MySQLVisitorRepository(conn),
        conn=conn,
        top_visitors_limit=top_visitors_limit,
        pdf_font_path=pdf_font_path,
    )
