from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    ExportError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first: ConflictError is a ValidationError.
_STATUS_BY_ERROR: list[tuple[type[DomainError], int, str]] = [
    (ConflictError, 409, "conflict"),
    (ValidationError, 400, "validation_error"),
    (AuthenticationError, 401, "unauthenticated"),
    (AuthorizationError, 403, "forbidden"),
    (NotFoundError, 404, "not_found"),
    (StorageError, 500, "storage_error"),
    (ExportError, 500, "export_error"),
]


def error_response(kind: str, message: str, status: int):
    resp = jsonify({"error": kind, "message": message})
    resp.status_code = status
    if status == 401:
        resp.headers["WWW-Authenticate"] = "Bearer"
    return resp


def status_for(exc: DomainError) -> tuple[int, str]:
    for error_type, status, kind in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status, kind
    return 500, "server_error"


def register(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status, kind = status_for(exc)
        if status >= 500:
            logger.error("%s: %s", type(exc).__name__, exc)
            message = "Erreur interne, veuillez réessayer plus tard"
            if isinstance(exc, ExportError):
                message = str(exc)
            return error_response(kind, message, status)
        return error_response(kind, str(exc), status)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return error_response(exc.name.lower().replace(" ", "_"), exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error")
        message = "Erreur interne, veuillez réessayer plus tard"
        if app.config.get("DEBUG"):
            message = f"{message}: {exc}"
        return error_response("server_error", message, 500)
