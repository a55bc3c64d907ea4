"""
Routes for expert accounts and public expert listings.

Experts register with their professional profile, which an admin must
verify before it becomes public. Authenticated experts can read and
update their own profile; anyone can browse verified, unblocked and
listed experts.
"""

from __future__ import annotations

from flask import Blueprint, g, request

from ..guards import expert_required
from ..schemas import (
    ExpertProfileFieldsSchema,
    ExpertRegisterRequestSchema,
    ExpertUserSchema,
    ExpertWithProfileSchema,
    LoginRequestSchema,
    PublicExpertSchema,
)
from ..services import expert_service


experts_bp = Blueprint("experts", __name__)


@experts_bp.route("/register", methods=["POST"])
def register() -> tuple[dict, int]:
    """Register a new expert.

    Accepts the user registration fields plus optional profile fields
    (``specialization``, ``experience``, ``qualifications``, ``bio``,
    ``website``, ``linkedin``, ``portfolio``). The profile starts as
    ``PENDING``.
    """
    data = ExpertRegisterRequestSchema().load(request.get_json() or {})
    user = expert_service.register(data)
    return {
        "success": True,
        "username": user.username,
        "message": "Verification email sent. Your expert profile is pending admin approval.",
    }, 201


@experts_bp.route("/login", methods=["POST"])
def login() -> tuple[dict, int]:
    """Authenticate an expert. Non-experts and blocked experts get 401."""
    data = LoginRequestSchema().load(request.get_json() or {})
    user, tokens = expert_service.login(data["email"], data["password"])
    return {"user": ExpertUserSchema().dump(user), "tokens": tokens}, 200


@experts_bp.route("/profile", methods=["GET"])
@expert_required
def get_profile() -> tuple[dict, int]:
    """Return the expert's own profile, including status and rejection reasons."""
    user = expert_service.get_expert(g.current_user.id)
    return ExpertWithProfileSchema().dump(user), 200


@experts_bp.route("/profile", methods=["PUT"])
@expert_required
def update_profile() -> tuple[dict, int]:
    """Update the expert's profile.

    Verified experts' changes are held for admin approval; pending or
    rejected profiles are updated in place and resubmitted.
    """
    data = ExpertProfileFieldsSchema().load(request.get_json() or {})
    message = expert_service.update_profile(g.current_user.id, data)
    return {"success": True, "message": message, "pendingChanges": True}, 200


@experts_bp.route("/public", methods=["GET"])
def list_public_experts() -> tuple[list[dict], int]:
    experts = expert_service.list_public_experts()
    return PublicExpertSchema(many=True).dump(experts), 200


@experts_bp.route("/public/<string:username>", methods=["GET"])
def get_public_expert(username: str) -> tuple[dict, int]:
    user = expert_service.get_public_expert(username)
    return PublicExpertSchema().dump(user), 200
