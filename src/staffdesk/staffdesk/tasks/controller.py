from __future__ import annotations

from flask import Flask, current_app, jsonify, request

from ..common.auth import admin_required, current_actor, login_required, roles_required
from ..common.http import domain_error_response, json_body, query_int, server_error_response
from ..core.enums import Role
from ..core.exceptions import DomainError
from ..container import Container
from .model import history_to_dict, notification_to_dict, task_to_dict


def register(app: Flask, container: Container) -> None:
    @app.route("/api/tasks", methods=["GET"], endpoint="list_tasks")
    @login_required
    def list_tasks():
        user_id, role = current_actor()
        try:
            page = container.task_service.list_tasks(
                current_user_id=user_id,
                current_role=role,
                status=request.args.get("status"),
                priority=request.args.get("priority"),
                assigned_to=request.args.get("assignedTo"),
                page=query_int("page", 1),
                limit=query_int("limit", current_app.config.get("DEFAULT_PAGE_SIZE", 10)),
            )
            return jsonify(
                {
                    "tasks": [task_to_dict(t) for t in page.tasks],
                    "pagination": {
                        "page": page.page,
                        "limit": page.limit,
                        "total": page.total,
                        "pages": page.pages,
                    },
                }
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to fetch tasks")

    @app.route("/api/tasks", methods=["POST"], endpoint="create_task")
    @roles_required(Role.ADMIN, Role.STAFF)
    def create_task():
        user_id, role = current_actor()
        data = json_body()
        try:
            task = container.task_service.create_task(
                current_user_id=user_id,
                current_role=role,
                title=data.get("title", ""),
                assigned_to=data.get("assignedTo", ""),
                description=data.get("description"),
                priority=data.get("priority"),
                task_type=data.get("type"),
                due_date=data.get("dueDate"),
            )
            return jsonify({"success": True, "task": task_to_dict(task)}), 201
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to create task")

    @app.route("/api/tasks/<task_id>", methods=["GET"], endpoint="get_task")
    @login_required
    def get_task(task_id: str):
        user_id, role = current_actor()
        try:
            task, history = container.task_service.get_task(
                current_user_id=user_id, current_role=role, task_id=task_id
            )
            body = task_to_dict(task)
            body["history"] = [history_to_dict(h) for h in history]
            return jsonify({"task": body})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to fetch task")

    @app.route("/api/tasks/<task_id>", methods=["PUT"], endpoint="update_task")
    @roles_required(Role.ADMIN, Role.STAFF)
    def update_task(task_id: str):
        user_id, role = current_actor()
        data = json_body()
        try:
            task = container.task_service.update_task(
                current_user_id=user_id,
                current_role=role,
                task_id=task_id,
                title=data.get("title"),
                description=data.get("description"),
                status=data.get("status"),
                priority=data.get("priority"),
                task_type=data.get("type"),
                assigned_to=data.get("assignedTo"),
                due_date=data.get("dueDate"),
            )
            return jsonify({"success": True, "task": task_to_dict(task)})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to update task")

    @app.route("/api/tasks/<task_id>", methods=["DELETE"], endpoint="delete_task")
    @admin_required
    def delete_task(task_id: str):
        _, role = current_actor()
        try:
            container.task_service.delete_task(current_role=role, task_id=task_id)
            return jsonify({"success": True, "message": "Task deleted successfully"})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to delete task")

    @app.route("/api/tasks/<task_id>/assign", methods=["POST"], endpoint="assign_task")
    @roles_required(Role.ADMIN, Role.STAFF)
    def assign_task(task_id: str):
        user_id, role = current_actor()
        data = json_body()
        try:
            task = container.task_service.assign_task(
                current_user_id=user_id,
                current_role=role,
                task_id=task_id,
                assigned_to=data.get("assignedTo", ""),
                reason=data.get("reason"),
            )
            return jsonify({"success": True, "task": task_to_dict(task)})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to reassign task")

    @app.route("/api/tasks/<task_id>/notifications", methods=["POST"], endpoint="notify_task")
    @login_required
    def notify_task(task_id: str):
        user_id, role = current_actor()
        data = json_body()
        try:
            notification = container.task_service.notify(
                current_user_id=user_id,
                current_role=role,
                task_id=task_id,
                notification_type=data.get("type"),
                message=data.get("message"),
                recipient_id=data.get("recipientId"),
            )
            return jsonify({"success": True, "notification": notification_to_dict(notification)}), 201
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to create notification")

    @app.route("/api/tasks/<task_id>/notifications", methods=["GET"], endpoint="list_task_notifications")
    @login_required
    def list_task_notifications(task_id: str):
        user_id, role = current_actor()
        try:
            notifications = container.task_service.list_notifications(
                current_user_id=user_id, current_role=role, task_id=task_id
            )
            return jsonify({"notifications": [notification_to_dict(n) for n in notifications]})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to fetch notifications")
