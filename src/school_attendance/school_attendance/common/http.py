from __future__ import annotations

from functools import wraps
from typing import Any

from flask import Flask, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..access.model import Principal
from ..app_logger import get_logger
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    InvalidStateError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)

log = get_logger("http")

# Most specific first; the first isinstance match wins.
ERROR_STATUS = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (InvalidStateError, 409),
    (StorageUnavailableError, 503),
)

_GENERIC_ERROR = "internal server error"


def status_for(exc: DomainError) -> int:
    for kind, status in ERROR_STATUS:
        if isinstance(exc, kind):
            return status
    return 500


def ok(payload: Any = None, status: int = 200, **extra):
    body = {"success": True}
    if payload is not None:
        body["data"] = payload
    body.update(extra)
    return jsonify(body), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def start_session(identity_id: int, role: Role, name: str) -> None:
    session.clear()
    session["user_id"] = int(identity_id)
    session["role"] = role.value
    session["name"] = name
    session.permanent = True


def current_principal() -> Principal:
    if "user_id" not in session:
        raise AuthenticationError("login required")
    try:
        role = Role(session.get("role"))
    except ValueError:
        session.clear()
        raise AuthenticationError("login required")
    return Principal(identity_id=int(session["user_id"]), role=role)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        g.principal = current_principal()
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            principal = current_principal()
            if principal.role.value not in allowed:
                raise AuthorizationError("not authorized")
            g.principal = principal
            return view(*args, **kwargs)

        return wrapper

    return decorator


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        status = status_for(e)
        if status >= 500:
            log.error("%s %s -> %s: %s", request.method, request.path, status, e)
        return fail(str(e) or e.__class__.__name__, status)

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return fail(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        log.exception("unhandled error on %s %s", request.method, request.path)
        return fail(_GENERIC_ERROR, 500)


def register_request_logging(app: Flask) -> None:
    @app.after_request
    def _log_request(response):
        log.info("%s %s -> %s", request.method, request.path, response.status_code)
        return response
