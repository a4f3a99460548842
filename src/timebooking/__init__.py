"""Time booking administration backend.

This package is organized by feature modules (users, bookings, statistics, ...)
with a thin Flask controller layer on top of service/repository layers.
"""
from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .bookings.controller import register as register_bookings
from .common.web import error_response
from .container import Container, build_container
from .core.constants import DEFAULT_STATISTICS_LIMIT
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .statistics.controller import register as register_statistics
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        container = build_container(
            db_config=db_config,
            statistics_limit=int(getattr(settings, "STATISTICS_LIMIT", DEFAULT_STATISTICS_LIMIT)),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(container.conn)
            logger.info("schema ready (tables=%s)", len(list_tables(container.conn)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(container.conn)
            ensure_demo_users(container.conn)
            logger.info("demo seed ready")

    app.extensions["timebooking"] = container

    register_users(app, container)
    register_bookings(app, container)
    register_statistics(app, container)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return error_response(e.description or e.name, e.code or 500)
        logger.exception("Unhandled error")
        return error_response("Internal server error", 500)

    return app
