from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_actor, login_required
from ..common.http import domain_error_response, query_int, server_error_response
from ..core.exceptions import DomainError
from ..container import Container
from .model import session_to_dict


def _client_ip() -> str | None:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="checkin")
    @login_required
    def checkin():
        user_id, _ = current_actor()
        try:
            s = container.attendance_service.check_in(
                user_id,
                ip=_client_ip(),
                user_agent=request.headers.get("User-Agent"),
            )
            return jsonify({"ok": True, **session_to_dict(s)})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Internal server error")

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="checkout")
    @login_required
    def checkout():
        user_id, _ = current_actor()
        try:
            s = container.attendance_service.check_out(user_id)
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Internal server error")

        if s is None:
            return jsonify({"ok": True, "message": "No open session"})
        return jsonify({"ok": True, **session_to_dict(s)})

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        user_id, _ = current_actor()
        try:
            sessions = container.attendance_service.recent_for_user(user_id, query_int("limit", 30))
            return jsonify({"ok": True, "sessions": [session_to_dict(s) for s in sessions]})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Internal server error")
