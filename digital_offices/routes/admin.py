"""
Admin routes: login, user moderation and expert verification.

Everything except ``/login`` requires an access token belonging to an
unblocked ``ADMIN`` account.
"""

from __future__ import annotations

from flask import Blueprint, g, request

from ..guards import admin_required
from ..schemas import (
    ActivitySchema,
    AuthUserSchema,
    ExpertActionRequestSchema,
    ExpertProfileFieldsSchema,
    ExpertProfileSchema,
    ExpertRejectionRequestSchema,
    ExpertUserSchema,
    LoginRequestSchema,
    PendingExpertSchema,
    UserActionRequestSchema,
)
from ..services import admin_service


admin_bp = Blueprint("admin", __name__)


@admin_bp.route("/login", methods=["POST"])
def login() -> tuple[dict, int]:
    """Authenticate an admin and return the admin user with tokens."""
    data = LoginRequestSchema().load(request.get_json() or {})
    user, tokens = admin_service.login(data["email"], data["password"])
    return {"user": ExpertUserSchema().dump(user), "tokens": tokens}, 200


def _user_action(action) -> tuple[dict, int]:
    data = UserActionRequestSchema().load(request.get_json() or {})
    message = action(data["user_id"], data.get("reason"))
    return {"success": True, "message": message}, 200


@admin_bp.route("/users/block", methods=["POST"])
@admin_required
def block_user() -> tuple[dict, int]:
    return _user_action(lambda user_id, reason: admin_service.set_blocked(user_id, True, reason))


@admin_bp.route("/users/unblock", methods=["POST"])
@admin_required
def unblock_user() -> tuple[dict, int]:
    return _user_action(lambda user_id, reason: admin_service.set_blocked(user_id, False, reason))


@admin_bp.route("/users/unlist", methods=["POST"])
@admin_required
def unlist_user() -> tuple[dict, int]:
    return _user_action(lambda user_id, reason: admin_service.set_unlisted(user_id, True, reason))


@admin_bp.route("/users/list", methods=["POST"])
@admin_required
def list_user() -> tuple[dict, int]:
    return _user_action(lambda user_id, reason: admin_service.set_unlisted(user_id, False, reason))


@admin_bp.route("/experts/pending", methods=["GET"])
@admin_required
def get_pending_experts() -> tuple[dict, int]:
    """Return experts awaiting review, newest profile first."""
    experts = admin_service.pending_experts()
    return {"experts": PendingExpertSchema(many=True).dump(experts), "total": len(experts)}, 200


@admin_bp.route("/experts/approve", methods=["POST"])
@admin_required
def approve_expert() -> tuple[dict, int]:
    """Approve an expert profile. ``expertId`` is the profile id."""
    data = ExpertActionRequestSchema().load(request.get_json() or {})
    profile = admin_service.approve_expert(data["expert_id"], g.current_user.id)
    return {
        "success": True,
        "message": "Expert has been approved",
        "expertProfile": ExpertProfileSchema().dump(profile),
    }, 200


@admin_bp.route("/experts/reject", methods=["POST"])
@admin_required
def reject_expert() -> tuple[dict, int]:
    """Reject an expert profile with reasons. ``expertId`` is the profile id."""
    data = ExpertRejectionRequestSchema().load(request.get_json() or {})
    profile = admin_service.reject_expert(
        data["expert_id"], data["rejection_reasons"], g.current_user.id
    )
    return {
        "success": True,
        "message": "Expert has been rejected",
        "expertProfile": ExpertProfileSchema().dump(profile),
    }, 200


@admin_bp.route("/experts/<string:expert_id>/changes", methods=["GET"])
@admin_required
def get_expert_changes(expert_id: str) -> tuple[dict, int]:
    """Show an expert's live profile next to their held changes.

    ``expert_id`` here is the expert's user id.
    """
    user = admin_service.expert_with_changes(expert_id)
    profile = user.expert_profile
    body = {
        "expert": {
            "user": AuthUserSchema(only=("id", "username", "email", "first_name", "last_name")).dump(user),
            "expertProfile": ExpertProfileSchema().dump(profile) if profile else None,
        }
    }
    if profile and profile.pending_changes:
        body["pendingChanges"] = ExpertProfileFieldsSchema().dump(profile.pending_changes)
    return body, 200


@admin_bp.route("/experts/approve-changes", methods=["POST"])
@admin_required
def approve_expert_changes() -> tuple[dict, int]:
    data = ExpertActionRequestSchema().load(request.get_json() or {})
    profile = admin_service.approve_expert_changes(data["expert_id"], g.current_user.id)
    return {
        "success": True,
        "message": "Expert changes have been approved",
        "expertProfile": ExpertProfileSchema().dump(profile),
    }, 200


@admin_bp.route("/experts/reject-changes", methods=["POST"])
@admin_required
def reject_expert_changes() -> tuple[dict, int]:
    data = ExpertRejectionRequestSchema().load(request.get_json() or {})
    profile = admin_service.reject_expert_changes(
        data["expert_id"], data["rejection_reasons"], g.current_user.id
    )
    return {
        "success": True,
        "message": "Expert changes have been rejected",
        "expertProfile": ExpertProfileSchema().dump(profile),
    }, 200


@admin_bp.route("/dashboard", methods=["GET"])
@admin_required
def dashboard() -> tuple[dict, int]:
    """Return platform statistics and the recent activity feed."""
    return {
        "stats": admin_service.dashboard_stats(),
        "recentActivity": ActivitySchema(many=True).dump(admin_service.dashboard_activity()),
    }, 200
