from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.auth import admin_required, current_actor, login_required
from ..common.http import domain_error_response, json_body, query_int, server_error_response
from ..core.constants import DEFAULT_DIRECTORY_LIMIT
from ..core.exceptions import DomainError
from ..container import Container
from .model import user_to_dict


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        try:
            s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("System error during login")

        session.clear()
        session.permanent = bool(data.get("rememberMe"))
        session["user_id"] = s_user.user_id
        session["name"] = s_user.name
        session["email"] = s_user.email
        session["role"] = s_user.role.value

        return jsonify(
            {
                "success": True,
                "user": {
                    "id": s_user.user_id,
                    "name": s_user.name,
                    "email": s_user.email,
                    "role": s_user.role.value,
                    "department": s_user.department,
                },
            }
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True, "message": "Logged out"})

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        actor_id, _ = current_actor()
        try:
            user = container.user_service.get_user(user_id=actor_id)
            return jsonify({"success": True, "user": user_to_dict(user)})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to fetch current user")

    @app.route("/api/users/management", methods=["GET"], endpoint="user_directory")
    @login_required
    def user_directory():
        actor_id, _ = current_actor()
        try:
            users = container.user_service.list_directory(
                role=request.args.get("role"),
                search=request.args.get("search"),
                exclude_id=request.args.get("excludeId") or actor_id,
                limit=query_int("limit", DEFAULT_DIRECTORY_LIMIT),
            )
            return jsonify({"managers": list(users), "total": len(users)})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to fetch users")

    @app.route("/api/users/<user_id>/change-password", methods=["POST"], endpoint="change_password")
    @login_required
    def change_password(user_id: str):
        actor_id, _ = current_actor()
        data = json_body()
        try:
            container.user_service.change_password(
                actor_id=actor_id,
                user_id=user_id,
                current_password=data.get("currentPassword", ""),
                new_password=data.get("newPassword", ""),
            )
            return jsonify({"success": True, "message": "Password updated successfully"})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to change password")

    @app.route("/api/admin/users", methods=["GET"], endpoint="admin_users")
    @admin_required
    def admin_users():
        _, role = current_actor()
        try:
            users = container.user_service.list_users(current_role=role, role=request.args.get("role"))
            return jsonify({"success": True, "users": [user_to_dict(u) for u in users]})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to fetch users")

    @app.route("/api/admin/users", methods=["POST"], endpoint="add_user")
    @admin_required
    def add_user():
        _, role = current_actor()
        data = json_body()
        try:
            user_id = container.user_service.create_account(
                current_role=role,
                name=data.get("name", ""),
                email=data.get("email", ""),
                password=data.get("password", ""),
                role=data.get("role"),
                department=data.get("department"),
            )
            user = container.user_service.get_user(user_id=user_id)
            return jsonify({"success": True, "message": "User created successfully", "user": user_to_dict(user)}), 201
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to create user")

    @app.route("/api/admin/users/<user_id>", methods=["GET"], endpoint="admin_get_user")
    @admin_required
    def admin_get_user(user_id: str):
        try:
            user = container.user_service.get_user(user_id=user_id)
            return jsonify({"success": True, "user": user_to_dict(user)})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to fetch user")

    @app.route("/api/admin/users/<user_id>", methods=["PUT"], endpoint="admin_update_user")
    @admin_required
    def admin_update_user(user_id: str):
        _, role = current_actor()
        data = json_body()
        try:
            user = container.user_service.update_user(
                current_role=role,
                user_id=user_id,
                name=data.get("name"),
                email=data.get("email"),
                role=data.get("role"),
                department=data.get("department"),
                is_active=data.get("isActive"),
            )
            return jsonify({"success": True, "message": "User updated successfully", "user": user_to_dict(user)})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to update user")

    @app.route("/api/admin/users/<user_id>", methods=["DELETE"], endpoint="delete_user")
    @admin_required
    def delete_user(user_id: str):
        actor_id, role = current_actor()
        try:
            container.user_service.deactivate_user(actor_id=actor_id, current_role=role, user_id=user_id)
            return jsonify({"success": True, "message": "User deactivated successfully"})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to deactivate user")

    @app.route("/api/admin/users/<user_id>/reset-password", methods=["POST"], endpoint="reset_password")
    @admin_required
    def reset_password(user_id: str):
        _, role = current_actor()
        data = json_body()
        try:
            container.user_service.reset_password(
                current_role=role,
                user_id=user_id,
                new_password=data.get("newPassword", ""),
            )
            return jsonify({"success": True, "message": "Password reset successfully"})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to reset password")

    @app.route("/api/admin/staff", methods=["GET"], endpoint="staff_directory")
    @admin_required
    def staff_directory():
        try:
            staff = container.user_service.staff_directory()
            return jsonify({"success": True, "staff": list(staff)})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to fetch staff")
