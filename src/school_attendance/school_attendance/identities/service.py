from __future__ import annotations

import secrets
import string
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..access.model import Principal, Target
from ..access.policy import AccessPolicy
from ..app_logger import get_logger
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import GENERATED_PASSWORD_LENGTH, MIN_PASSWORD_LENGTH
from ..core.enums import Action, Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from .model import CreatedAccount, Identity, SessionIdentity
from .repository import IdentityRepository

log = get_logger("identities")

_INVALID_CREDENTIALS = "invalid email or password"


def parse_role(value: str | None) -> Role:
    v = str(value or "").strip().lower()
    # Legacy clients send the French role name.
    v = {"enseignant": "teacher"}.get(v, v)
    try:
        return Role(v)
    except ValueError:
        raise ValidationError("role must be one of admin, teacher, parent")


def generate_password(length: int = GENERATED_PASSWORD_LENGTH) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


class AuthService:
    """Use case: authenticate an account (login).

    The role selector picks the table to search: the same email may exist
    under two roles.
    """

    def __init__(self, identities: IdentityRepository):
        self._identities = identities

    def authenticate(self, email: str, password: str, role: str | Role | None) -> SessionIdentity:
        if not email or not password or not role:
            raise ValidationError("email, password and role are required")
        if not isinstance(email, str) or not isinstance(password, str):
            raise ValidationError("email and password must be strings")

        role = role if isinstance(role, Role) else parse_role(role)
        account = self._identities.get_by_email(email.strip().lower(), role)
        if not account:
            log.warning("login failed: unknown %s account %s", role.value, email)
            raise AuthenticationError(_INVALID_CREDENTIALS)

        try:
            ok = check_password_hash(account.password_hash, password)
        except (ValueError, TypeError):
            # e.g. placeholder hashes like 'CHANGE_ME' or legacy plaintext values
            ok = False

        if not ok:
            log.warning("login failed: wrong password for %s account %s", role.value, email)
            raise AuthenticationError(_INVALID_CREDENTIALS)

        log.info("login ok: %s #%d", role.value, account.id)
        return SessionIdentity(
            identity_id=account.id,
            role=account.role,
            full_name=account.full_name,
            email=account.email,
        )

    def get_current(self, principal: Principal) -> Identity:
        account = self._identities.get_by_id(principal.identity_id, principal.role)
        if not account:
            raise NotFoundError("account not found")
        return account


class IdentityService:
    """Use case: manage teacher and parent accounts (admin)."""

    def __init__(self, identities: IdentityRepository, policy: Optional[AccessPolicy] = None):
        self._identities = identities
        self._policy = policy or AccessPolicy()

    def list_accounts(self, principal: Principal, role: Role) -> Sequence[Identity]:
        self._policy.require(principal, Action.READ, Target.identity(role))
        return self._identities.list_by_role(role)

    def create_account(
        self,
        principal: Principal,
        *,
        role: Role,
        given_name: str,
        family_name: str,
        email: str,
        password: str | None = None,
    ) -> CreatedAccount:
        self._policy.require(principal, Action.WRITE, Target.identity(role))

        given_name = require_non_empty(given_name, "given name")
        family_name = require_non_empty(family_name, "family name")
        email = require_email(email)

        generated = None
        if not password:
            generated = password = generate_password()
        require_min_length(password, "password", MIN_PASSWORD_LENGTH)

        if self._identities.get_by_email(email, role):
            raise ValidationError(f"a {role.value} with this email already exists")

        new_id = self._identities.create(
            role=role,
            given_name=given_name,
            family_name=family_name,
            email=email,
            password_hash=generate_password_hash(password),
        )
        log.info("%s #%d created by admin #%d", role.value, new_id, principal.identity_id)
        return CreatedAccount(id=new_id, role=role, generated_password=generated)

    def delete_account(self, principal: Principal, *, role: Role, identity_id: int) -> None:
        self._policy.require(principal, Action.WRITE, Target.identity(role))

        if not self._identities.get_by_id(int(identity_id), role):
            raise NotFoundError(f"{role.value} not found")
        if not self._identities.delete(int(identity_id), role):
            raise NotFoundError(f"{role.value} not found")
        log.info("%s #%d deleted by admin #%d", role.value, identity_id, principal.identity_id)
