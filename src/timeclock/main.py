from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.logger import configure_logging, get_logger
from .container import Container, EngineSettings, build_container
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, list_tables
from .hours.controller import register as register_hours

logger = get_logger(__name__)

_STATUS_BY_KIND = {
    "validation": 400,
    "authorization": 403,
    "not_found": 404,
    "conflict": 409,
    "invalid_state": 409,
}


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = _STATUS_BY_KIND.get(e.kind, 400)
        return jsonify({"success": False, "error": e.kind, "message": e.detail}), status


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    ``container`` lets tests inject services backed by in-memory repositories;
    otherwise one is built from the active settings module.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

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

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[2] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        engine_settings = EngineSettings(
            late_grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", 15)),
            early_exit_grace_minutes=int(getattr(settings, "EARLY_EXIT_GRACE_MINUTES", 0)),
            hours_targets=getattr(settings, "HOURS_TARGETS", None),
        )
        container = build_container(db_config=db_config, settings=engine_settings)

    _register_error_handlers(app)
    register_attendance(app, container)
    register_hours(app, container)

    return app
