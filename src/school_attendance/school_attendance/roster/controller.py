from __future__ import annotations

from flask import Flask, g

from ..common.http import json_body, login_required, ok, roles_required
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    staff = (Role.ADMIN, Role.TEACHER)

    # ---------- classes ----------
    @app.route("/api/classes", methods=["GET"], endpoint="api_list_classes")
    @roles_required(*staff)
    def list_classes():
        rows = container.roster_service.list_classes(g.principal)
        return ok([c.to_dict() for c in rows])

    @app.route("/api/classes", methods=["POST"], endpoint="api_create_class")
    @roles_required(*staff)
    def create_class():
        body = json_body()
        cls = container.roster_service.create_class(
            g.principal,
            name=body.get("name") or "",
            teacher_id=body.get("teacher_id"),
        )
        return ok(cls.to_dict(), status=201)

    @app.route("/api/classes/<int:class_id>", methods=["PUT"], endpoint="api_rename_class")
    @roles_required(*staff)
    def rename_class(class_id: int):
        body = json_body()
        cls = container.roster_service.rename_class(g.principal, class_id=class_id, name=body.get("name") or "")
        return ok(cls.to_dict())

    @app.route("/api/classes/<int:class_id>", methods=["DELETE"], endpoint="api_delete_class")
    @roles_required(*staff)
    def delete_class(class_id: int):
        container.roster_service.delete_class(g.principal, class_id=class_id)
        return ok()

    @app.route("/api/classes/<int:class_id>/students", methods=["GET"], endpoint="api_class_students")
    @roles_required(*staff)
    def class_students(class_id: int):
        rows = container.roster_service.list_students_for_class(g.principal, class_id)
        return ok([s.to_dict() for s in rows])

    # ---------- students ----------
    @app.route("/api/students", methods=["POST"], endpoint="api_enrol_student")
    @roles_required(*staff)
    def enrol_student():
        body = json_body()
        student = container.roster_service.enrol_student(
            g.principal,
            given_name=body.get("given_name") or "",
            family_name=body.get("family_name") or "",
            class_id=body.get("class_id"),
            parent_id=body.get("parent_id"),
            parent_email=body.get("parent_email"),
        )
        return ok(student.to_dict(), status=201)

    @app.route("/api/students/<int:student_id>", methods=["PUT"], endpoint="api_update_student")
    @roles_required(*staff)
    def update_student(student_id: int):
        body = json_body()
        student = container.roster_service.update_student(
            g.principal,
            student_id=student_id,
            given_name=body.get("given_name"),
            family_name=body.get("family_name"),
            class_id=body.get("class_id"),
            parent_id=body.get("parent_id"),
            parent_email=body.get("parent_email"),
        )
        return ok(student.to_dict())

    @app.route("/api/students/<int:student_id>", methods=["DELETE"], endpoint="api_delete_student")
    @roles_required(*staff)
    def delete_student(student_id: int):
        container.roster_service.delete_student(g.principal, student_id=student_id)
        return ok()

    @app.route("/api/parents/<int:parent_id>/students", methods=["GET"], endpoint="api_parent_children")
    @login_required
    def parent_children(parent_id: int):
        rows = container.roster_service.list_children(g.principal, parent_id)
        return ok([s.to_dict() for s in rows])
