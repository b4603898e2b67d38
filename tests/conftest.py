from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.visitor_registry.visitor_registry.container import wire_container
from src.visitor_registry.visitor_registry.core.enums import Role, VisitorStatus
from src.visitor_registry.visitor_registry.core.exceptions import ConflictError
from src.visitor_registry.visitor_registry.tokens.model import AccessToken
from src.visitor_registry.visitor_registry.users.model import User
from src.visitor_registry.visitor_registry.visitors.model import HistoryCriteria, Visitor, VisitorFields

# Cheap hashes keep the suite fast; production uses werkzeug's default.
FAST_HASH = "pbkdf2:sha256:1000"


class InMemoryUsers:
    def __init__(self):
        self._by_id: dict[int, User] = {}
        self._id = 0

    def add(self, name: str, email: str, password: str, role: Role = Role.AGENT) -> User:
        user_id = self.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password, method=FAST_HASH),
            role=role,
            created_at=datetime(2024, 1, 1, 8, 0),
        )
        return self._by_id[user_id]

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._by_id.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._by_id.values() if u.email == email), None)

    def create_user(self, *, name, email, password_hash, role, created_at) -> int:
        if self.get_by_email(email):
            raise ConflictError("duplicate email")
        self._id += 1
        self._by_id[self._id] = User(
            user_id=self._id,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            created_at=created_at,
            updated_at=created_at,
        )
        return self._id

    def list_by_role(self, role: Role):
        return sorted((u for u in self._by_id.values() if u.role == role), key=lambda u: u.name)


class InMemoryTokens:
    def __init__(self):
        self._by_hash: dict[str, AccessToken] = {}
        self._id = 0

    def __len__(self) -> int:
        return len(self._by_hash)

    def create_token(self, *, user_id: int, token_hash: str, issued_at: datetime) -> int:
        self._id += 1
        self._by_hash[token_hash] = AccessToken(
            token_id=self._id,
            user_id=user_id,
            token_hash=token_hash,
            issued_at=issued_at,
        )
        return self._id

    def get_by_hash(self, token_hash: str) -> Optional[AccessToken]:
        return self._by_hash.get(token_hash)

    def touch(self, token_id: int, *, used_at: datetime) -> None:
        for h, t in list(self._by_hash.items()):
            if t.token_id == token_id:
                self._by_hash[h] = dataclasses.replace(t, last_used_at=used_at)

    def revoke(self, token_hash: str) -> bool:
        return self._by_hash.pop(token_hash, None) is not None


class InMemoryVisitors:
    def __init__(self, users: Optional[InMemoryUsers] = None):
        self._by_id: dict[int, Visitor] = {}
        self._users = users
        self._id = 0

    def __len__(self) -> int:
        return len(self._by_id)

    def seed(
        self,
        *,
        name: str,
        cin: str,
        created_at: datetime,
        status: VisitorStatus = VisitorStatus.PENDING,
        registered_by: int = 1,
        phone: str = "0600000000",
        reason: str = "Réunion",
    ) -> Visitor:
        visitor_id = self.create_visitor(
            fields=VisitorFields(name=name, cin=cin, phone=phone, reason=reason),
            status=status,
            registered_by=registered_by,
            created_at=created_at,
        )
        return self.get_by_id(visitor_id)

    def _with_user_name(self, v: Visitor) -> Visitor:
        user = self._users.get_by_id(v.registered_by) if self._users else None
        return dataclasses.replace(v, registered_by_name=user.name if user else None)

    def get_by_id(self, visitor_id: int) -> Optional[Visitor]:
        v = self._by_id.get(int(visitor_id))
        return self._with_user_name(v) if v else None

    def get_by_cin(self, cin: str) -> Optional[Visitor]:
        v = next((v for v in self._by_id.values() if v.cin == cin), None)
        return self._with_user_name(v) if v else None

    def list_all(self):
        return self.find_history(HistoryCriteria())

    def find_history(self, criteria: HistoryCriteria):
        items = [self._with_user_name(v) for v in self._by_id.values() if criteria.matches(v)]
        items.sort(key=lambda v: (v.created_at, v.visitor_id), reverse=True)
        return items

    def create_visitor(self, *, fields: VisitorFields, status, registered_by, created_at) -> int:
        if any(v.cin == fields.cin for v in self._by_id.values()):
            raise ConflictError("duplicate cin")
        self._id += 1
        self._by_id[self._id] = Visitor(
            visitor_id=self._id,
            name=fields.name,
            cin=fields.cin,
            phone=fields.phone,
            reason=fields.reason,
            status=status,
            registered_by=registered_by,
            created_at=created_at,
            updated_at=created_at,
        )
        return self._id

    def update_visitor(self, *, visitor_id, fields: VisitorFields, status, updated_at) -> bool:
        v = self._by_id.get(int(visitor_id))
        if not v:
            return False
        self._by_id[v.visitor_id] = dataclasses.replace(
            v,
            name=fields.name,
            cin=fields.cin,
            phone=fields.phone,
            reason=fields.reason,
            status=status or v.status,
            updated_at=updated_at,
        )
        return True

    def update_status(self, *, visitor_id, status, updated_at) -> bool:
        v = self._by_id.get(int(visitor_id))
        if not v:
            return False
        self._by_id[v.visitor_id] = dataclasses.replace(v, status=status, updated_at=updated_at)
        return True

    def delete_by_id(self, visitor_id: int) -> bool:
        return self._by_id.pop(int(visitor_id), None) is not None


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 15, 10, 30, 0)


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def tokens_repo() -> InMemoryTokens:
    return InMemoryTokens()


@pytest.fixture
def visitors_repo(users_repo) -> InMemoryVisitors:
    return InMemoryVisitors(users_repo)


@pytest.fixture
def admin(users_repo) -> User:
    return users_repo.add("Admin", "admin@example.com", "admin123", Role.ADMIN)


@pytest.fixture
def agent(users_repo) -> User:
    return users_repo.add("Agent Karim", "agent@example.com", "agent123", Role.AGENT)


@pytest.fixture
def container(users_repo, tokens_repo, visitors_repo):
    return wire_container(users_repo=users_repo, tokens_repo=tokens_repo, visitors_repo=visitors_repo)


@pytest.fixture
def app(monkeypatch, container):
    from src.visitor_registry.visitor_registry import create_app

    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


def _login_headers(client, email: str, password: str) -> dict:
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}


@pytest.fixture
def admin_headers(client, admin) -> dict:
    return _login_headers(client, "admin@example.com", "admin123")


@pytest.fixture
def agent_headers(client, agent) -> dict:
    return _login_headers(client, "agent@example.com", "agent123")
