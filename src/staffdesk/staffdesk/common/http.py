from __future__ import annotations

from flask import current_app, jsonify, request

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def domain_error_response(exc: DomainError):
    status = 400
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status = code
            break
    return jsonify({"success": False, "message": str(exc)}), status


def server_error_response(message: str):
    current_app.logger.exception("%s (%s %s)", message, request.method, request.path)
    return jsonify({"success": False, "message": message}), 500


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def query_int(name: str, default: int) -> int:
    try:
        return int(request.args.get(name) or default)
    except ValueError:
        return default
