"""Access and refresh token issuance.

Tokens are signed JWTs created with Flask-JWT-Extended. The user id is
the token identity; ``email`` and ``role`` travel as additional claims.
Every refresh token handed out is also stored in the ``refresh_tokens``
table so it can be rotated on refresh and revoked on logout or when an
admin blocks the account.
"""
from __future__ import annotations

from flask import current_app
from flask_jwt_extended import create_access_token, create_refresh_token, decode_token

from ..db import db
from ..models import RefreshToken, User, utcnow


def _lifetimes() -> tuple[int, int]:
    access = current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    refresh = current_app.config["JWT_REFRESH_TOKEN_EXPIRES"]
    return int(access.total_seconds()), int(refresh.total_seconds())


def issue_tokens(user: User) -> dict:
    """Create an access/refresh token pair for ``user`` and persist the refresh token.

    The new ``RefreshToken`` row is added to the session; the caller
    commits.
    """
    access_expires_in, refresh_expires_in = _lifetimes()
    claims = {"email": user.email, "role": user.role.value}
    access_token = create_access_token(identity=user.id, additional_claims=claims)
    refresh_token = create_refresh_token(identity=user.id, additional_claims=claims)

    db.session.add(
        RefreshToken(
            user_id=user.id,
            token=refresh_token,
            expires_at=utcnow() + current_app.config["JWT_REFRESH_TOKEN_EXPIRES"],
        )
    )

    return {
        "accessToken": access_token,
        "refreshToken": refresh_token,
        "accessTokenExpiresIn": access_expires_in,
        "refreshTokenExpiresIn": refresh_expires_in,
        "tokenType": "Bearer",
    }


def decode_refresh_token(token: str) -> dict:
    """Decode a refresh JWT.

    Raises ``ValueError`` when the token is an access token; signature
    and expiry failures propagate as ``jwt.PyJWTError``.
    """
    payload = decode_token(token)
    if payload.get("type") != "refresh":
        raise ValueError("not a refresh token")
    return payload


def revoke_user_tokens(user_id: str) -> int:
    """Revoke every live refresh token of a user. Returns how many were revoked."""
    now = utcnow()
    tokens = RefreshToken.query.filter(
        RefreshToken.user_id == user_id,
        RefreshToken.revoked_at.is_(None),
    ).all()
    for token in tokens:
        token.revoked_at = now
    return len(tokens)
