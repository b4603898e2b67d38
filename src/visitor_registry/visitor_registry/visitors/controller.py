from __future__ import annotations

from flask import Flask, jsonify

from ..api.auth import build_token_required, current_user
from ..api.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    token_required = build_token_required(container.auth_service)
    service = container.visitor_service

    @app.route("/visitors", methods=["GET"], endpoint="list_visitors")
    @token_required
    def list_visitors():
        visitors = service.list(current_user())
        return jsonify({"total": len(visitors), "data": [v.to_dict() for v in visitors]})

    @app.route("/visitors/<int:visitor_id>", methods=["GET"], endpoint="get_visitor")
    @token_required
    def get_visitor(visitor_id: int):
        return jsonify(service.get(current_user(), visitor_id).to_dict())

    @app.route("/visitors", methods=["POST"], endpoint="create_visitor")
    @token_required
    def create_visitor():
        visitor = service.create(current_user(), json_body())
        return jsonify(visitor.to_dict()), 201

    @app.route("/visitors/<int:visitor_id>", methods=["PUT"], endpoint="update_visitor")
    @token_required
    def update_visitor(visitor_id: int):
        visitor = service.update(current_user(), visitor_id, json_body())
        return jsonify(visitor.to_dict())

    @app.route("/visitors/<int:visitor_id>", methods=["DELETE"], endpoint="delete_visitor")
    @token_required
    def delete_visitor(visitor_id: int):
        visitor = service.delete(current_user(), visitor_id)
        return jsonify(
            {
                "message": "Visiteur supprimé avec succès",
                "deleted_id": visitor.visitor_id,
                "name": visitor.name,
            }
        )

    @app.route("/visitors/<int:visitor_id>/status", methods=["PUT"], endpoint="update_visitor_status")
    @token_required
    def update_visitor_status(visitor_id: int):
        payload = json_body()
        visitor = service.update_status(current_user(), visitor_id, payload.get("status"))
        return jsonify(visitor.to_dict())
