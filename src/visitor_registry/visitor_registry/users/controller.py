from __future__ import annotations

from flask import Flask, g, jsonify

from ..api.auth import build_token_required, current_user
from ..api.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    token_required = build_token_required(container.auth_service)

    @app.route("/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        payload = json_body()
        user = container.auth_service.register(
            name=payload.get("name"),
            email=payload.get("email"),
            password=payload.get("password"),
            role=payload.get("role"),
        )
        return jsonify({"message": "Compte créé avec succès", "user": user.to_public_dict()}), 201

    @app.route("/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        payload = json_body()
        issued = container.auth_service.login(payload.get("email"), payload.get("password"))
        return jsonify(
            {
                "token": issued.token,
                "token_type": "Bearer",
                "user": issued.user.to_public_dict(),
            }
        )

    @app.route("/auth/logout", methods=["POST"], endpoint="auth_logout")
    @token_required
    def auth_logout():
        container.auth_service.logout(g.access_token)
        return jsonify({"message": "Déconnexion réussie"})

    @app.route("/auth/user", methods=["GET"], endpoint="auth_user")
    @token_required
    def auth_user():
        return jsonify({"user": current_user().to_public_dict()})
