"""Visitor Registry package.

This package is organized by feature modules (users, tokens, visitors,
reports, exports) with a thin Flask JSON controller layer on top of
service/repository layers.
"""
from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS

from config import get_settings_module

from .api import errors as api_errors
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .database.connection import DBConfig
from .reports.controller import register as register_reports
from .users.controller import register as register_users
from .visitors.controller import register as register_visitors

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _configure_logging(level_name: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level_name).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Pass ``container`` to run on pre-built repositories (tests); otherwise
    the MySQL container is built from the selected settings module.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.json.sort_keys = False
    app.config["CORS_ORIGINS"] = list(getattr(settings, "CORS_ORIGINS", []))

    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info("settings=%s db=%s", settings_module, DBConfig.from_mapping(db_config).describe())

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)

        container = build_container(
            db_config=db_config,
            top_visitors_limit=int(getattr(settings, "TOP_VISITORS_LIMIT", 5)),
            pdf_font_path=getattr(settings, "PDF_FONT_PATH", None),
        )

    app.extensions["visitor_registry"] = container

    api_errors.register(app)
    register_users(app, container)
    register_visitors(app, container)
    register_reports(app, container)

    if app.config["CORS_ORIGINS"]:
        CORS(
            app,
            origins=app.config["CORS_ORIGINS"],
            allow_headers=["Authorization", "Content-Type"],
            methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            max_age=600,
        )

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "healthy", "service": "visitor-registry"})

    return app
