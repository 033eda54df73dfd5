from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import build_container
from .core.constants import DEFAULT_MAX_UPLOAD_SIZE_MB, DEFAULT_SESSION_TTL_MINUTES
from .core.logging_setup import configure_logging
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig
from .reconciliation.controller import register as register_bulk_review

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["MAX_CONTENT_LENGTH"] = (
        int(getattr(settings, "MAX_UPLOAD_SIZE_MB", DEFAULT_MAX_UPLOAD_SIZE_MB)) * 1024 * 1024
    )

    logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(
        db_config=db_config,
        close_policy=getattr(settings, "BULK_CLOSE_POLICY", "any_success"),
        session_ttl_minutes=int(getattr(settings, "BULK_SESSION_TTL_MINUTES", DEFAULT_SESSION_TTL_MINUTES)),
    )

    register_bulk_review(app, container)

    return app
