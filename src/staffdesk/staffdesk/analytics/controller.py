from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import admin_required, current_actor, login_required
from ..common.http import domain_error_response, server_error_response
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @login_required
    def dashboard():
        user_id, role = current_actor()
        try:
            if role == Role.ADMIN:
                data = container.dashboard_service.overview()
            else:
                data = container.dashboard_service.my_overview(user_id=user_id)
            return jsonify({"success": True, "role": role.value, "stats": data})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to load dashboard")

    @app.route("/api/admin/dashboard", methods=["GET"], endpoint="admin_dashboard")
    @admin_required
    def admin_dashboard():
        try:
            return jsonify(
                {
                    "success": True,
                    "overview": container.dashboard_service.overview(),
                    "staff": container.dashboard_service.staff_stats(),
                    "workLogs": container.worklog_service.stats(),
                }
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to load dashboard")

    @app.route("/api/admin/performance", methods=["GET"], endpoint="admin_performance")
    @admin_required
    def admin_performance():
        try:
            return jsonify({"success": True, "metrics": container.dashboard_service.performance()})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to load performance metrics")
