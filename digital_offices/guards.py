"""Role guards for protected routes.

``jwt_required`` only proves the caller holds a valid access token.
The guards below additionally load the account and check its role
and block status against the database, so that a block or role change
takes effect immediately rather than when the token expires.
"""
from __future__ import annotations

from functools import wraps

from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from .db import db
from .errors import ForbiddenError
from .models import Role, User


def role_required(role: Role | None = None):
    """Require an unblocked account, with ``role`` when given.

    Exposes the account as ``g.current_user``.
    """
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            user = db.session.get(User, get_jwt_identity())
            if not user or user.is_blocked or (role is not None and user.role != role):
                raise ForbiddenError("Forbidden resource", code="INSUFFICIENT_PERMISSIONS")
            g.current_user = user
            return view(*args, **kwargs)
        return wrapper
    return decorator


login_required = role_required()
expert_required = role_required(Role.EXPERT)
admin_required = role_required(Role.ADMIN)
