from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import require_email, require_max_length, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH, TOKEN_BYTES
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ConflictError, ValidationError
from ..tokens.repository import TokenRepository
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedToken:
    """What login hands back to the client. ``token`` is never stored."""

    token: str
    user: User
    issued_at: datetime


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AuthService:
    """Use cases: register, login, logout, resolve the bearer token of a request."""

    def __init__(self, users: UserRepository, tokens: TokenRepository):
        self._users = users
        self._tokens = tokens

    def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> User:
        name = require_max_length(require_non_empty(name, "nom"), "nom", 255)
        email = require_max_length(require_email(email), "email", 255)
        require_min_length(password, "mot de passe", MIN_PASSWORD_LENGTH)

        try:
            user_role = Role((role or Role.AGENT.value).strip().lower())
        except (ValueError, AttributeError):
            raise ValidationError("Rôle invalide (admin ou agent)")

        if self._users.get_by_email(email):
            raise ConflictError("Cette adresse e-mail est déjà utilisée")

        now = now or now_local()
        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=user_role,
            created_at=now,
        )
        logger.info("Registered user %s (%s) as %s", user_id, email, user_role.value)

        user = self._users.get_by_id(user_id)
        if user is None:
            raise ValidationError("Création du compte impossible")
        return user

    def login(self, email: str, password: str, *, now: Optional[datetime] = None) -> IssuedToken:
        email = email.strip().lower() if isinstance(email, str) else ""
        user = self._users.get_by_email(email) if email else None

        try:
            ok = bool(user) and check_password_hash(user.password_hash, password or "")
        except (AttributeError, TypeError, ValueError):
            # placeholder or corrupted hashes
            ok = False

        if not ok:
            logger.warning("Failed login attempt for %r", email)
            raise AuthenticationError("Identifiants invalides")

        now = now or now_local()
        token = secrets.token_urlsafe(TOKEN_BYTES)
        self._tokens.create_token(user_id=user.user_id, token_hash=hash_token(token), issued_at=now)
        logger.info("User %s logged in", user.user_id)
        return IssuedToken(token=token, user=user, issued_at=now)

    def logout(self, token: Optional[str]) -> None:
        if not token:
            return
        if self._tokens.revoke(hash_token(token)):
            logger.info("Token revoked")

    def resolve_identity(self, token: Optional[str], *, now: Optional[datetime] = None) -> User:
        if not token:
            raise AuthenticationError("Authentification requise")

        stored = self._tokens.get_by_hash(hash_token(token))
        if stored is None:
            raise AuthenticationError("Jeton invalide ou révoqué")

        user = self._users.get_by_id(stored.user_id)
        if user is None:
            raise AuthenticationError("Utilisateur introuvable")

        self._tokens.touch(stored.token_id, used_at=now or now_local())
        return user
