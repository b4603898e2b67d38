"""Capability-based authorization.

Every service operation names the capability it needs and calls
:func:`authorize` before touching a repository.
"""
from __future__ import annotations

from enum import Enum
from typing import Protocol

from .enums import Role
from .exceptions import AuthorizationError


class Capability(str, Enum):
    VIEW_VISITORS = "view_visitors"
    CREATE_VISITOR = "create_visitor"
    CHANGE_VISITOR_STATUS = "change_visitor_status"
    UPDATE_VISITOR = "update_visitor"
    DELETE_VISITOR = "delete_visitor"
    VIEW_REPORTS = "view_reports"
    EXPORT_VISITORS = "export_visitors"


_AGENT_CAPABILITIES = frozenset(
    {
        Capability.VIEW_VISITORS,
        Capability.CREATE_VISITOR,
        Capability.CHANGE_VISITOR_STATUS,
        Capability.VIEW_REPORTS,
        Capability.EXPORT_VISITORS,
    }
)

ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.ADMIN: frozenset(Capability),
    Role.AGENT: _AGENT_CAPABILITIES,
}


class HasRole(Protocol):
    role: Role


def can(user: HasRole, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(user.role, frozenset())


def authorize(user: HasRole, capability: Capability) -> None:
    if not can(user, capability):
        raise AuthorizationError("Action réservée aux administrateurs")
