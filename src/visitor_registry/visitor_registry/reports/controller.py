from __future__ import annotations

from flask import Flask, jsonify, request

from ..api.auth import build_token_required, current_user
from ..common.datetime_utils import now_local
from ..container import Container
from ..core.exceptions import ValidationError
from ..core.permissions import Capability, authorize
from .service import parse_history_criteria

_EXPORT_MIMETYPES = {"csv": "text/csv", "pdf": "application/pdf"}


def register(app: Flask, container: Container) -> None:
    token_required = build_token_required(container.auth_service)
    stats = container.statistics_service

    @app.route("/visitor-stats", methods=["GET"], endpoint="visitor_stats")
    @token_required
    def visitor_stats():
        return jsonify(stats.summary(current_user()))

    @app.route("/visitor-history", methods=["GET"], endpoint="visitor_history")
    @token_required
    def visitor_history():
        criteria = parse_history_criteria(request.args)
        visitors = stats.history(current_user(), criteria)
        return jsonify({"total": len(visitors), "data": [v.to_dict() for v in visitors]})

    @app.route("/visitor-history/export", methods=["GET"], endpoint="visitor_history_export")
    @token_required
    def visitor_history_export():
        """Server-side export of the filtered history (same filters as /visitor-history)."""

        fmt = (request.args.get("format") or "csv").strip().lower()
        if fmt not in _EXPORT_MIMETYPES:
            raise ValidationError("Format d'export invalide (csv ou pdf)")

        authorize(current_user(), Capability.EXPORT_VISITORS)
        criteria = parse_history_criteria(request.args)
        visitors = stats.history(current_user(), criteria)

        if fmt == "pdf":
            body = container.export_service.to_pdf(visitors)
        else:
            body = container.export_service.to_csv(visitors)

        filename = f"visiteurs_{now_local().strftime('%Y%m%d_%H%M')}.{fmt}"
        return app.response_class(
            body,
            mimetype=_EXPORT_MIMETYPES[fmt],
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
