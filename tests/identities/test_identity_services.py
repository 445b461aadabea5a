from __future__ import annotations

import pytest
from werkzeug.security import check_password_hash

from src.school_attendance.school_attendance.core.enums import Role
from src.school_attendance.school_attendance.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from src.school_attendance.school_attendance.identities.service import generate_password, parse_role


def test_login_with_role_selector(school):
    identity = school.container.auth_service.authenticate("marie@ecole.fr", "1234", "teacher")

    assert identity.identity_id == 1
    assert identity.role == Role.TEACHER
    assert identity.full_name == "Marie Dupont"


def test_login_accepts_legacy_role_name(school):
    identity = school.container.auth_service.authenticate("marie@ecole.fr", "1234", "enseignant")
    assert identity.role == Role.TEACHER


def test_same_email_in_another_role_table_does_not_match(school):
    with pytest.raises(AuthenticationError):
        school.container.auth_service.authenticate("marie@ecole.fr", "1234", "parent")


def test_wrong_password_and_unknown_email_share_message(school):
    auth = school.container.auth_service
    with pytest.raises(AuthenticationError) as wrong:
        auth.authenticate("marie@ecole.fr", "nope", "teacher")
    with pytest.raises(AuthenticationError) as unknown:
        auth.authenticate("ghost@ecole.fr", "nope", "teacher")
    assert str(wrong.value) == str(unknown.value)


def test_placeholder_hash_never_matches(school):
    school.identities.create(
        role=Role.PARENT,
        given_name="Paul",
        family_name="Roux",
        email="paul@gmail.com",
        password_hash="CHANGE_ME",
    )
    with pytest.raises(AuthenticationError):
        school.container.auth_service.authenticate("paul@gmail.com", "CHANGE_ME", "parent")


def test_login_requires_all_fields(school):
    with pytest.raises(ValidationError):
        school.container.auth_service.authenticate("marie@ecole.fr", "1234", "")


def test_parse_role_rejects_unknown():
    with pytest.raises(ValidationError):
        parse_role("principal")


def test_generated_password_shape():
    pw = generate_password(12)
    assert len(pw) == 12
    assert pw.isalnum()


def test_admin_creates_teacher_with_generated_password(school, admin):
    created = school.container.identity_service.create_account(
        admin,
        role=Role.TEACHER,
        given_name="Luc",
        family_name="Moreau",
        email="Luc@Ecole.fr",
    )

    assert created.generated_password
    stored = school.identities.get_by_id(created.id, Role.TEACHER)
    assert stored.email == "luc@ecole.fr"
    assert check_password_hash(stored.password_hash, created.generated_password)


def test_duplicate_email_in_role_table_is_rejected(school, admin):
    with pytest.raises(ValidationError):
        school.container.identity_service.create_account(
            admin,
            role=Role.PARENT,
            given_name="Jean",
            family_name="Bernard",
            email="jean@gmail.com",
            password="secret",
        )


def test_only_admin_manages_accounts(school, teacher_a):
    svc = school.container.identity_service
    with pytest.raises(AuthorizationError):
        svc.create_account(
            teacher_a, role=Role.PARENT, given_name="A", family_name="B", email="a@b.fr", password="secret"
        )
    with pytest.raises(AuthorizationError):
        svc.list_accounts(teacher_a, Role.TEACHER)

    # The parent directory is readable by teachers.
    assert [p.id for p in svc.list_accounts(teacher_a, Role.PARENT)] == [1, 2]


def test_delete_account(school, admin):
    svc = school.container.identity_service
    svc.delete_account(admin, role=Role.TEACHER, identity_id=2)

    assert school.identities.get_by_id(2, Role.TEACHER) is None
    with pytest.raises(NotFoundError):
        svc.delete_account(admin, role=Role.TEACHER, identity_id=2)
