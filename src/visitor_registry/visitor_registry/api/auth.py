from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import g, request

from ..users.model import User
from ..users.service import AuthService


def bearer_token() -> Optional[str]:
    """Token from ``Authorization: Bearer <token>``, or None."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def build_token_required(auth_service: AuthService):
    def token_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            g.current_user = auth_service.resolve_identity(token)
            g.access_token = token
            return view(*args, **kwargs)

        return wrapper

    return token_required


def current_user() -> User:
    return g.current_user
