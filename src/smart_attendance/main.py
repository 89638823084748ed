from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .config import get_settings_module
from .container import Container, build_container
from .core.constants import DEFAULT_QR_MAX_FRAMES, DEFAULT_SESSION_DAYS
from .common.http import register_error_handlers
from .database.bootstrap import apply_schema, ensure_admin, list_tables
from .database.connection import DBConfig
from .join_requests.controller import register as register_join_requests
from .notices.controller import register as register_notices
from .papers.controller import register as register_papers
from .system_settings.controller import register as register_settings
from .users.controller import register as register_users

logger = logging.getLogger("smart_attendance")


def _configure_logging(debug: bool) -> None:
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    """Build the Flask app.

    When ``container`` is given (tests), no database bootstrap happens.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["QR_MAX_FRAMES"] = int(getattr(settings, "QR_MAX_FRAMES", DEFAULT_QR_MAX_FRAMES))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))

    _configure_logging(app.config["DEBUG"])

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            email = getattr(settings, "ADMIN_EMAIL", "")
            password = getattr(settings, "ADMIN_PASSWORD", "")
            if email and password:
                ensure_admin(db_config, email=email, password=password)
            else:
                logger.warning("AUTO_SEED_DB is on but ADMIN_EMAIL/ADMIN_PASSWORD are not set")

        container = build_container(db_config=db_config)

    register_error_handlers(app)
    register_users(app, container)
    register_join_requests(app, container)
    register_attendance(app, container)
    register_notices(app, container)
    register_papers(app, container)
    register_settings(app, container)

    return app
