from __future__ import annotations

from typing import Any

from flask import request

from ..core.exceptions import ValidationError


def json_body() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Corps JSON attendu")
    return payload
