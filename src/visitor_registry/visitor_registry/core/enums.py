from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Rôle d'un compte du personnel, base des autorisations."""

    ADMIN = "admin"
    AGENT = "agent"


class VisitorStatus(str, Enum):
    """Statut de présence d'un visiteur (valeur stockée en base)."""

    PENDING = "Pending"
    ENTERED = "Entered"
    EXITED = "Exited"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @classmethod
    def parse(cls, value: object) -> "VisitorStatus":
        """Accept the wire value or the French UI label, case-insensitively."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        status = _STATUS_ALIASES.get(key)
        if status is None:
            raise ValueError(f"Unknown visitor status: {value!r}")
        return status


_STATUS_LABELS = {
    VisitorStatus.PENDING: "En attente",
    VisitorStatus.ENTERED: "Entré",
    VisitorStatus.EXITED: "Sorti",
}

_STATUS_ALIASES = {
    **{s.value.lower(): s for s in VisitorStatus},
    **{label.lower(): s for s, label in _STATUS_LABELS.items()},
    "entre": VisitorStatus.ENTERED,
}
