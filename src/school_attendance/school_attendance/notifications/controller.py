from __future__ import annotations

from flask import Flask, g

from ..common.http import json_body, login_required, ok, roles_required
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.route("/api/notifications", methods=["GET"], endpoint="api_list_notifications")
    @login_required
    def list_notifications():
        rows = container.notification_service.list_for(g.principal)
        return ok([n.to_dict() for n in rows])

    @app.route("/api/notifications", methods=["POST"], endpoint="api_create_notification")
    @roles_required(Role.TEACHER)
    def create_notification():
        body = json_body()
        n = container.notification_service.create(
            g.principal,
            student_id=body.get("student_id"),
            parent_id=body.get("parent_id"),
            message=body.get("message") or "",
            type=body.get("type"),
        )
        return ok(n.to_dict(), status=201)

    @app.route("/api/notifications/<int:notification_id>/read", methods=["PUT"], endpoint="api_read_notification")
    @roles_required(Role.TEACHER, Role.PARENT)
    def read_notification(notification_id: int):
        n = container.notification_service.mark_read(g.principal, notification_id)
        return ok(n.to_dict())
