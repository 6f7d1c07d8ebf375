from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import admin_required, current_actor, login_required
from ..common.http import domain_error_response, json_body, server_error_response
from ..core.exceptions import DomainError
from ..container import Container
from .model import profile_to_dict, to_camel


def _decision_to_dict(decision) -> dict:
    return {"field": to_camel(decision.field), "reason": decision.reason}


def register(app: Flask, container: Container) -> None:
    @app.route("/api/users/<user_id>", methods=["GET"], endpoint="get_profile")
    @login_required
    def get_profile(user_id: str):
        actor_id, actor_role = current_actor()
        try:
            profile = container.profile_service.get_profile(actor_id=actor_id, actor_role=actor_role, user_id=user_id)
            return jsonify({"success": True, "user": profile_to_dict(profile)})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to fetch user")

    @app.route("/api/users/<user_id>", methods=["PUT"], endpoint="update_profile")
    @login_required
    def update_profile(user_id: str):
        actor_id, actor_role = current_actor()
        try:
            result = container.profile_service.update_profile(
                actor_id=actor_id,
                actor_role=actor_role,
                user_id=user_id,
                changes=json_body(),
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to update user")

        return jsonify(
            {
                "success": True,
                "message": "User updated successfully" if result.applied else "No changes applied",
                "user": profile_to_dict(result.profile),
                "updatedFields": [to_camel(name) for name in result.applied],
                "deniedFields": [_decision_to_dict(d) for d in result.denied],
                "completion": result.completion,
            }
        )

    @app.route("/api/users/<user_id>/completion", methods=["GET"], endpoint="profile_completion")
    @login_required
    def profile_completion(user_id: str):
        actor_id, actor_role = current_actor()
        try:
            breakdown = container.profile_service.completion(actor_id=actor_id, actor_role=actor_role, user_id=user_id)
            return jsonify({"success": True, **breakdown})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to compute profile completion")

    @app.route("/api/admin/users/<user_id>/coordinates", methods=["DELETE"], endpoint="clear_coordinates")
    @admin_required
    def clear_coordinates(user_id: str):
        _, actor_role = current_actor()
        try:
            profile = container.profile_service.clear_coordinates(actor_role=actor_role, user_id=user_id)
            return jsonify({"success": True, "message": "Coordinates cleared", "user": profile_to_dict(profile)})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error_response("Failed to clear coordinates")
