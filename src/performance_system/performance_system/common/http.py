"""Shared helpers for the JSON controllers: session principal, auth guards, error mapping."""
from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Optional

from flask import current_app, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    ImportFormatError,
    NotFoundError,
    ValidationError,
)
from ..scope.model import Principal
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

_STATUS: list[tuple[type[DomainError], int]] = [
    (ValidationError, 400),
    (ImportFormatError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
]


def current_principal() -> Principal:
    return Principal.from_session(session)


def error_response(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def handle_error(e: Exception):
    for exc_type, status in _STATUS:
        if isinstance(e, exc_type):
            return error_response(str(e), status)
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    message = "Lỗi hệ thống"
    if current_app.config.get("DEBUG"):
        message = f"{message}: {e}"
    return error_response(message, 500)


def json_view(view):
    """Run ``view`` and translate raised exceptions into JSON error responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except Exception as e:
            return handle_error(e)

    return wrapper


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response("Vui lòng đăng nhập để tiếp tục!", 401)
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return error_response("Vui lòng đăng nhập để tiếp tục!", 401)
            if session.get("role") not in {r.value for r in roles}:
                return error_response("Bạn không có quyền", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def to_int(value, name: str) -> Optional[int]:
    if value is None or str(value).strip() == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Tham số không hợp lệ: {name}") from None


def arg_int(name: str) -> Optional[int]:
    return to_int(request.args.get(name), name)


def arg_date(name: str) -> Optional[date]:
    raw = request.args.get(name, "").strip()
    if not raw:
        return None
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"Ngày không hợp lệ: {raw}") from None


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Dữ liệu gửi lên không hợp lệ")
    return data
