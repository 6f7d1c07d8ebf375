from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.auth import admin_required, current_actor, login_required, roles_required
from ..common.datetime_utils import now_local
from ..common.http import domain_error_response, json_body, server_error_response
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..container import Container
from .model import worklog_to_dict
from .service import XLSX_MIMETYPE


def register(app: Flask, container: Container) -> None:
    @app.route("/api/worklogs", methods=["GET"], endpoint="my_worklogs")
    @login_required
    def my_worklogs():
        user_id, _ = current_actor()
        try:
            logs = container.worklog_service.list_for_user(user_id=user_id)
            return jsonify({"success": True, "workLogs": [worklog_to_dict(w) for w in logs]})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to fetch work logs")

    @app.route("/api/worklogs", methods=["POST"], endpoint="submit_worklog")
    @roles_required(Role.STAFF, Role.ADMIN)
    def submit_worklog():
        user_id, role = current_actor()
        data = json_body()
        try:
            worklog = container.worklog_service.submit(
                current_user_id=user_id,
                current_role=role,
                title=data.get("title", ""),
                summary=data.get("summary", ""),
                time_spent_min=data.get("timeSpentMin"),
                task_id=data.get("taskId"),
            )
            return jsonify({"success": True, "workLog": worklog_to_dict(worklog)}), 201
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to submit work log")

    @app.route("/api/admin/worklogs", methods=["GET"], endpoint="admin_worklogs")
    @admin_required
    def admin_worklogs():
        _, role = current_actor()
        try:
            logs = container.worklog_service.list_all(current_role=role, status=request.args.get("status"))
            stats = container.worklog_service.stats()
            return jsonify({"success": True, "workLogs": [worklog_to_dict(w) for w in logs], "stats": stats})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to fetch work logs")

    @app.route("/api/admin/worklogs/<worklog_id>/approve", methods=["POST"], endpoint="approve_worklog")
    @admin_required
    def approve_worklog(worklog_id: str):
        user_id, role = current_actor()
        try:
            worklog = container.worklog_service.approve(
                current_user_id=user_id,
                current_role=role,
                worklog_id=worklog_id,
                review_note=json_body().get("reviewNote"),
            )
            return jsonify({"success": True, "workLog": worklog_to_dict(worklog)})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to approve work log")

    @app.route("/api/admin/worklogs/<worklog_id>/reject", methods=["POST"], endpoint="reject_worklog")
    @admin_required
    def reject_worklog(worklog_id: str):
        user_id, role = current_actor()
        try:
            worklog = container.worklog_service.reject(
                current_user_id=user_id,
                current_role=role,
                worklog_id=worklog_id,
                review_note=json_body().get("reviewNote"),
            )
            return jsonify({"success": True, "workLog": worklog_to_dict(worklog)})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to reject work log")

    @app.route("/api/admin/worklogs/export", methods=["GET"], endpoint="export_worklogs")
    @admin_required
    def export_worklogs():
        _, role = current_actor()
        try:
            content = container.worklog_service.export_xlsx(current_role=role, status=request.args.get("status"))
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to export work logs")

        return send_file(
            io.BytesIO(content),
            download_name=f"worklogs_{now_local():%Y%m%d}.xlsx",
            as_attachment=True,
            mimetype=XLSX_MIMETYPE,
        )
