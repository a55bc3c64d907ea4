"""Google ID token verification.

The front-ends obtain a Google ID token with Google Identity Services
and post it to ``/api/auth/google``. The token is verified locally
against Google's published signing keys.
"""
from __future__ import annotations

import jwt
from jwt import PyJWKClient

GOOGLE_CERTS_URL = "https://www.googleapis.com/oauth2/v3/certs"
GOOGLE_ISSUERS = ["accounts.google.com", "https://accounts.google.com"]

_jwk_client: PyJWKClient | None = None


def _get_jwk_client() -> PyJWKClient:
    global _jwk_client
    if _jwk_client is None:
        _jwk_client = PyJWKClient(GOOGLE_CERTS_URL)
    return _jwk_client


def verify_google_id_token(id_token: str, client_id: str | None) -> dict:
    """Verify ``id_token`` and return its claims.

    Raises ``jwt.PyJWTError`` (including ``PyJWKClientError``) when the
    signature, audience, issuer or expiry does not check out.
    """
    signing_key = _get_jwk_client().get_signing_key_from_jwt(id_token).key
    return jwt.decode(
        id_token,
        signing_key,
        algorithms=["RS256"],
        audience=client_id,
        issuer=GOOGLE_ISSUERS,
        leeway=60,
    )
