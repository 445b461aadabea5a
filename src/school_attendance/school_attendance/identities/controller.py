from __future__ import annotations

from flask import Flask, g, session

from ..common.http import json_body, login_required, ok, roles_required, start_session
from ..container import Container
from ..core.enums import Role


def _created(account) -> dict:
    data = {"id": account.id, "role": account.role.value}
    if account.generated_password:
        data["generated_password"] = account.generated_password
    return data


def register(app: Flask, container: Container) -> None:
    # ---------- auth ----------
    @app.route("/api/auth/login", methods=["POST"], endpoint="api_login")
    def login():
        body = json_body()
        identity = container.auth_service.authenticate(
            body.get("email") or "",
            body.get("password") or "",
            body.get("role") or "",
        )
        start_session(identity.identity_id, identity.role, identity.full_name)
        return ok(
            {
                "id": identity.identity_id,
                "role": identity.role.value,
                "name": identity.full_name,
                "email": identity.email,
            }
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_logout")
    def logout():
        session.clear()
        return ok()

    @app.route("/api/auth/me", methods=["GET"], endpoint="api_me")
    @login_required
    def me():
        account = container.auth_service.get_current(g.principal)
        return ok(account.public_dict())

    # ---------- teachers (admin) ----------
    @app.route("/api/admin/teachers", methods=["GET"], endpoint="api_list_teachers")
    @roles_required(Role.ADMIN)
    def list_teachers():
        rows = container.identity_service.list_accounts(g.principal, Role.TEACHER)
        return ok([r.public_dict() for r in rows])

    @app.route("/api/admin/teachers", methods=["POST"], endpoint="api_create_teacher")
    @roles_required(Role.ADMIN)
    def create_teacher():
        body = json_body()
        account = container.identity_service.create_account(
            g.principal,
            role=Role.TEACHER,
            given_name=body.get("given_name") or "",
            family_name=body.get("family_name") or "",
            email=body.get("email") or "",
            password=body.get("password"),
        )
        return ok(_created(account), status=201)

    @app.route("/api/admin/teachers/<int:teacher_id>", methods=["DELETE"], endpoint="api_delete_teacher")
    @roles_required(Role.ADMIN)
    def delete_teacher(teacher_id: int):
        container.identity_service.delete_account(g.principal, role=Role.TEACHER, identity_id=teacher_id)
        return ok()

    # ---------- parents ----------
    @app.route("/api/parents", methods=["GET"], endpoint="api_list_parents")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def list_parents():
        rows = container.identity_service.list_accounts(g.principal, Role.PARENT)
        return ok([r.public_dict() for r in rows])

    @app.route("/api/parents", methods=["POST"], endpoint="api_create_parent")
    @roles_required(Role.ADMIN)
    def create_parent():
        body = json_body()
        account = container.identity_service.create_account(
            g.principal,
            role=Role.PARENT,
            given_name=body.get("given_name") or "",
            family_name=body.get("family_name") or "",
            email=body.get("email") or "",
            password=body.get("password"),
        )
        return ok(_created(account), status=201)

    @app.route("/api/parents/<int:parent_id>", methods=["DELETE"], endpoint="api_delete_parent")
    @roles_required(Role.ADMIN)
    def delete_parent(parent_id: int):
        container.identity_service.delete_account(g.principal, role=Role.PARENT, identity_id=parent_id)
        return ok()
