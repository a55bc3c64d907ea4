"""
Authentication routes for the Digital Offices API.

Provides endpoints for registering new users, logging in with
credentials or a Google ID token, verifying email addresses and
rotating refresh tokens. Endpoints that start or rotate a session
return an ``AuthSession``: the user plus an access/refresh token pair.
"""

from __future__ import annotations

from flask import Blueprint, g, request

from ..guards import login_required
from ..schemas import (
    AuthUserSchema,
    GoogleOAuthRequestSchema,
    LoginRequestSchema,
    RefreshTokenRequestSchema,
    RegisterRequestSchema,
    VerifyEmailRequestSchema,
)
from ..services import auth_service


auth_bp = Blueprint("auth", __name__)


def _session(user, tokens) -> dict:
    return {"user": AuthUserSchema().dump(user), "tokens": tokens}


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple[dict, int]:
    """Register a new user.

    Expects JSON with ``email``, ``password``, ``firstName`` and
    ``lastName``. The username is generated by the backend. No tokens
    are returned; a verification email is sent instead.
    """
    data = RegisterRequestSchema().load(request.get_json() or {})
    user = auth_service.register(data)
    return {"success": True, "username": user.username, "message": "Verification email sent"}, 201


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple[dict, int]:
    """Authenticate with email and password and return an AuthSession."""
    data = LoginRequestSchema().load(request.get_json() or {})
    user, tokens = auth_service.login(data["email"], data["password"])
    return _session(user, tokens), 200


@auth_bp.route("/google", methods=["POST"])
def google_oauth() -> tuple[dict, int]:
    """Authenticate with a Google ID token, creating the account if needed."""
    data = GoogleOAuthRequestSchema().load(request.get_json() or {})
    user, tokens = auth_service.google_oauth(data["id_token"])
    return _session(user, tokens), 200


@auth_bp.route("/email/verify", methods=["POST"])
def verify_email() -> tuple[dict, int]:
    """Verify an email address; the user is logged in on success."""
    data = VerifyEmailRequestSchema().load(request.get_json() or {})
    user, tokens = auth_service.verify_email(data["token"])
    return _session(user, tokens), 200


@auth_bp.route("/email/request-verification", methods=["POST"])
@login_required
def request_email_verification() -> tuple[dict, int]:
    auth_service.request_email_verification(g.current_user.id)
    return {"success": True}, 200


@auth_bp.route("/refresh", methods=["POST"])
def refresh_token() -> tuple[dict, int]:
    """Exchange a refresh token for a new session. The old token is revoked."""
    data = RefreshTokenRequestSchema().load(request.get_json() or {})
    user, tokens = auth_service.refresh_session(data["refresh_token"])
    return _session(user, tokens), 200


@auth_bp.route("/logout", methods=["POST"])
def logout() -> tuple[dict, int]:
    data = RefreshTokenRequestSchema().load(request.get_json() or {})
    auth_service.logout(data["refresh_token"])
    return {"success": True}, 200


@auth_bp.route("/me", methods=["GET"])
@login_required
def me() -> tuple[dict, int]:
    return AuthUserSchema().dump(g.current_user), 200
