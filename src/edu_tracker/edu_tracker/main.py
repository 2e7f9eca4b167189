from __future__ import annotations

import atexit
import importlib
import logging
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .admin.controller import register as register_admin
from .attendance.controller import register as register_attendance
from .container import build_container
from .reports.controller import register as register_reports
from .roster.controller import register as register_roster
from .sync.controller import register as register_sync
from .sync.repository import BlobStore

SETTINGS_KEYS = (
    "DEBUG",
    "TESTING",
    "DATA_DIR",
    "JSONBIN_BASE_URL",
    "PUSH_DEBOUNCE_SECONDS",
    "POLL_INTERVAL_SECONDS",
    "REQUEST_TIMEOUT_SECONDS",
    "GROQ_API_KEY",
    "LLM_MODEL",
    "LOG_LEVEL",
)

logger = logging.getLogger(__name__)


def create_app(overrides: Optional[Mapping[str, Any]] = None, *, blob_client: Optional[BlobStore] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    for key in SETTINGS_KEYS:
        if hasattr(settings, key):
            app.config[key] = getattr(settings, key)
    app.config.update(overrides or {})

    logging.basicConfig(
        level=str(app.config.get("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"settings={settings_module} data_dir={app.config.get('DATA_DIR')}")

    container = build_container(app_config=app.config, blob_client=blob_client)
    container.start()
    app.extensions["edu_tracker"] = container
    if not app.config.get("TESTING"):
        atexit.register(container.shutdown)

    register_attendance(app, container)
    register_admin(app, container)
    register_roster(app, container)
    register_reports(app, container)
    register_sync(app, container)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error")
        message = f"Internal error: {e}" if app.config.get("DEBUG") else "Internal error"
        return jsonify({"success": False, "message": message}), 500

    return app
