from __future__ import annotations

from functools import wraps
from typing import Any, Mapping

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError
from ..workers.service import SessionWorker


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "worker_id" not in session:
            return jsonify(success=False, code="unauthorized", message="Vui lòng đăng nhập để tiếp tục!"), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "worker_id" not in session:
            return jsonify(success=False, code="unauthorized", message="Vui lòng đăng nhập để tiếp tục!"), 401

        if session.get("role") != Role.ADMIN.value:
            return error_response(AuthorizationError())

        return view(*args, **kwargs)

    return wrapper


def payload() -> Mapping[str, Any]:
    """JSON body when present, otherwise submitted form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form


def current_worker() -> SessionWorker:
    return SessionWorker(
        worker_id=int(session["worker_id"]),
        username=session.get("username", ""),
        display_name=session.get("name", ""),
        role=Role(session.get("role", Role.USER.value)),
    )


def store_session(s_worker: SessionWorker) -> None:
    session["worker_id"] = s_worker.worker_id
    session["username"] = s_worker.username
    session["name"] = s_worker.display_name
    session["role"] = s_worker.role.value


def error_response(e: DomainError):
    return jsonify(success=False, code=e.code, message=str(e)), e.http_status


def ok(message: str = "", **data):
    return jsonify(success=True, message=message, **data)
