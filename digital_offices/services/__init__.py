"""Service layer for the Digital Offices API.

This package contains business logic that sits between the
Flask route handlers and the database models. Separating
services into their own modules keeps the routes thin and
makes the authentication and verification workflows easy to
unit test.

Nothing in this package should perform any HTTP handling.
Instead, services return model objects or plain dictionaries,
and raise exceptions defined in ``digital_offices.errors``
when something goes wrong.
"""

from . import admin_service, auth_service, email_service, expert_service

__all__ = [
    "admin_service",
    "auth_service",
    "email_service",
    "expert_service",
]
