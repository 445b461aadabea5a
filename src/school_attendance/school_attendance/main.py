from __future__ import annotations

import importlib
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .app_logger import configure_app_logging, get_logger
from .common.http import register_error_handlers, register_request_logging
from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_DAYS
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_accounts, list_tables
from .database.connection import DBConfig

from .attendance.controller import register as register_attendance
from .dashboard.controller import register as register_dashboard
from .identities.controller import register as register_identities
from .notifications.controller import register as register_notifications
from .roster.controller import register as register_roster

log = get_logger("app")

_DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    A ready container (e.g. in-memory repositories in tests) skips every
    database step: no schema, no seed, no MySQL connection factory.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))

    configure_app_logging(getattr(settings, "LOG_LEVEL", None))
    log.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=_DATABASE_DIR / "schema.sql")
            log.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=_DATABASE_DIR / "seed.sql")
            ensure_demo_accounts(db_config)
            log.info("demo seed ready")
        container = build_container(db_config=db_config)

    register_error_handlers(app)
    register_request_logging(app)

    register_identities(app, container)
    register_roster(app, container)
    register_attendance(app, container)
    register_notifications(app, container)
    register_dashboard(app, container)

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000)
