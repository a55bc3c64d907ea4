"""Centralised error handling and custom exceptions.

This module defines custom exception classes and provides
Flask error handlers that serialise them into JSON responses.
By using custom exceptions, the service layer can signal
specific error conditions without coupling itself to HTTP
response codes. Each exception carries a machine-readable
``code`` (``EMAIL_ALREADY_IN_USE``, ``EXPERT_NOT_FOUND`` and so
on) that the front-ends switch on.
"""
from __future__ import annotations

import logging

from flask import jsonify
from marshmallow import ValidationError as SchemaValidationError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    default_code = "UNKNOWN"

    def __init__(self, message: str, code: str | None = None, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details

    def to_dict(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return {"error": error}

    def to_response(self, status_code: int | None = None):
        return jsonify(self.to_dict()), status_code or self.status_code


class ValidationError(ApiError):
    """Raised when input validation fails."""

    status_code = 400
    default_code = "VALIDATION_ERROR"

    def __init__(self, message: str, fields: dict | None = None) -> None:
        super().__init__(message)
        self.fields = fields or {}

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "fields": self.fields,
            }
        }


class BadRequestError(ApiError):
    """Raised when a request is well-formed but not acceptable in the current state."""

    status_code = 400
    default_code = "BAD_REQUEST"


class UnauthorizedError(ApiError):
    """Raised when credentials or tokens are missing or invalid."""

    status_code = 401
    default_code = "UNAUTHENTICATED"


class ForbiddenError(ApiError):
    """Raised when the caller is authenticated but lacks the required role."""

    status_code = 403
    default_code = "UNAUTHORIZED"


class NotFoundError(ApiError):
    """Raised when a requested resource cannot be found."""

    status_code = 404
    default_code = "NOT_FOUND"


class ConflictError(ApiError):
    """Raised when a uniqueness or resource conflict occurs."""

    status_code = 409
    default_code = "CONFLICT"


def register_error_handlers(app) -> None:
    """Register custom error handlers on the given Flask app."""
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        if err.status_code >= 500:
            logger.error("Unhandled API error: %s", err.message)
        return err.to_response()

    @app.errorhandler(SchemaValidationError)
    def handle_schema_validation_error(err: SchemaValidationError):
        fields = err.messages if isinstance(err.messages, dict) else {"_schema": err.messages}
        return ValidationError("Request validation failed.", fields=fields).to_response()


def register_jwt_handlers(jwt) -> None:
    """Render Flask-JWT-Extended failures in the API error envelope."""
    def _unauthenticated(message: str):
        return UnauthorizedError(message, code="UNAUTHENTICATED").to_response()

    @jwt.unauthorized_loader
    def handle_missing_token(reason: str):
        return _unauthenticated(reason)

    @jwt.invalid_token_loader
    def handle_invalid_token(reason: str):
        return _unauthenticated(reason)

    @jwt.expired_token_loader
    def handle_expired_token(jwt_header, jwt_payload):
        return UnauthorizedError("Token has expired", code="INVALID_OR_EXPIRED_TOKEN").to_response()
