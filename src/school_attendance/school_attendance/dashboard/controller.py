from __future__ import annotations

from flask import Flask, g

from ..app_logger import get_logger
from ..common.http import login_required, ok
from ..container import Container
from ..core.exceptions import StorageUnavailableError
from ..database.mysql_base import db_cursor

log = get_logger("health")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard", methods=["GET"], endpoint="api_dashboard")
    @login_required
    def dashboard():
        return ok(container.dashboard_service.for_principal(g.principal))

    @app.route("/api/health", methods=["GET"], endpoint="api_health")
    def health():
        if container.conn is None:
            log.warning("health check failed: no database connection configured")
            return {"status": "ERROR"}, 503
        try:
            with db_cursor(container.conn) as (_, cur):
                cur.execute("SELECT 1")
                cur.fetchall()
        except StorageUnavailableError as e:
            log.warning("health check failed: %s", e)
            return {"status": "ERROR"}, 503
        return {"status": "OK"}, 200
