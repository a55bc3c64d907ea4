"""
Serialization schemas using Marshmallow for the Digital Offices API.

Request schemas validate and load incoming JSON; response schemas
convert SQLAlchemy models into the camelCase payloads the front-ends
consume. Sensitive fields, such as password hashes and pending
profile changes, are never part of a user-facing dump.
"""

from __future__ import annotations

from marshmallow import Schema, fields, validate, pre_load, EXCLUDE
from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field

from .models import User, ExpertProfile, Activity, Role, VerificationStatus


class IsoDateTime(fields.DateTime):
    """UTC datetime rendered as ISO-8601 with millisecond precision and ``Z``."""

    def _serialize(self, value, attr, obj, **kwargs):
        if value is None:
            return None
        return value.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


# --------------------------------------------------------------------------
# Requests
# --------------------------------------------------------------------------


class RequestSchema(Schema):
    """Base for request bodies. Unknown keys are dropped."""

    class Meta:
        unknown = EXCLUDE


class RegisterRequestSchema(RequestSchema):
    email = fields.Email(required=True)
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))
    first_name = fields.String(required=True, data_key="firstName", validate=validate.Length(min=1, max=100))
    last_name = fields.String(required=True, data_key="lastName", validate=validate.Length(min=1, max=100))

    @pre_load
    def strip_names(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("email", "firstName", "lastName"):
            if isinstance(data.get(key), str):
                data[key] = data[key].strip()
        return data


class LoginRequestSchema(RequestSchema):
    email = fields.Email(required=True)
    password = fields.String(required=True)
    remember_me = fields.Boolean(data_key="rememberMe")


class GoogleOAuthRequestSchema(RequestSchema):
    id_token = fields.String(required=True, data_key="idToken", validate=validate.Length(min=1))


class VerifyEmailRequestSchema(RequestSchema):
    token = fields.String(required=True, validate=validate.Length(min=1))


class RefreshTokenRequestSchema(RequestSchema):
    refresh_token = fields.String(required=True, data_key="refreshToken", validate=validate.Length(min=1))


class ExpertProfileFieldsSchema(RequestSchema):
    """Editable expert profile fields. Also dumps held pending changes."""

    specialization = fields.String(allow_none=True)
    experience = fields.String(allow_none=True)
    qualifications = fields.String(allow_none=True)  # JSON string
    bio = fields.String(allow_none=True)
    website = fields.String(allow_none=True)
    linkedin = fields.String(allow_none=True)
    portfolio = fields.String(allow_none=True)


class ExpertRegisterRequestSchema(RegisterRequestSchema, ExpertProfileFieldsSchema):
    pass


class UserActionRequestSchema(RequestSchema):
    user_id = fields.String(required=True, data_key="userId", validate=validate.Length(min=1))
    reason = fields.String(allow_none=True)


class ExpertActionRequestSchema(RequestSchema):
    expert_id = fields.String(required=True, data_key="expertId", validate=validate.Length(min=1))


class ExpertRejectionRequestSchema(ExpertActionRequestSchema):
    rejection_reasons = fields.List(fields.String(), required=True, data_key="rejectionReasons")


# --------------------------------------------------------------------------
# Responses
# --------------------------------------------------------------------------


class AuthUserSchema(SQLAlchemyAutoSchema):
    """Schema for serialising ``User`` objects in auth sessions."""

    first_name = auto_field(data_key="firstName")
    last_name = auto_field(data_key="lastName")
    email_verified = auto_field(data_key="emailVerified")
    created_at = IsoDateTime(data_key="createdAt")
    updated_at = IsoDateTime(data_key="updatedAt")

    class Meta:
        model = User
        fields = (
            "id", "username", "email", "first_name", "last_name",
            "email_verified", "created_at", "updated_at",
        )


class ExpertUserSchema(AuthUserSchema):
    """``AuthUser`` plus role and moderation flags."""

    role = fields.Enum(Role, by_value=True)
    is_blocked = auto_field(data_key="isBlocked")
    is_unlisted = auto_field(data_key="isUnlisted")

    class Meta(AuthUserSchema.Meta):
        fields = AuthUserSchema.Meta.fields + ("role", "is_blocked", "is_unlisted")


class ExpertProfileSchema(SQLAlchemyAutoSchema):
    """Schema for serialising ``ExpertProfile`` objects."""

    user_id = auto_field(data_key="userId")
    verification_status = fields.Enum(VerificationStatus, by_value=True, data_key="verificationStatus")
    rejection_reasons = fields.List(fields.String(), data_key="rejectionReasons")
    verified_at = IsoDateTime(data_key="verifiedAt")
    verified_by = auto_field(data_key="verifiedBy")
    created_at = IsoDateTime(data_key="createdAt")
    updated_at = IsoDateTime(data_key="updatedAt")

    class Meta:
        model = ExpertProfile
        include_fk = True
        exclude = ("pending_changes",)


class ExpertWithProfileSchema(ExpertUserSchema):
    expert_profile = fields.Nested(ExpertProfileSchema, data_key="expertProfile", allow_none=True)

    class Meta(ExpertUserSchema.Meta):
        fields = ExpertUserSchema.Meta.fields + ("expert_profile",)


class PublicUserSchema(Schema):
    id = fields.String()
    username = fields.String()
    first_name = fields.String(data_key="firstName")
    last_name = fields.String(data_key="lastName")


class PublicProfileSchema(ExpertProfileFieldsSchema):
    verified_at = IsoDateTime(data_key="verifiedAt")


class PublicExpertSchema(Schema):
    """Public view of a verified expert: no email, no moderation data."""

    user = fields.Function(lambda user: PublicUserSchema().dump(user))
    expert_profile = fields.Function(
        lambda user: PublicProfileSchema().dump(user.expert_profile), data_key="expertProfile"
    )


class PendingExpertUserSchema(PublicUserSchema):
    email = fields.String()
    created_at = IsoDateTime(data_key="createdAt")


class PendingExpertSchema(Schema):
    """An expert awaiting review, as listed to admins."""

    user = fields.Function(lambda user: PendingExpertUserSchema().dump(user))
    expert_profile = fields.Function(
        lambda user: ExpertProfileSchema().dump(user.expert_profile), data_key="expertProfile"
    )


class ActivitySchema(SQLAlchemyAutoSchema):
    """Schema for the admin dashboard activity feed."""

    timestamp = IsoDateTime(attribute="created_at")
    user_id = auto_field(data_key="userId")

    class Meta:
        model = Activity
        fields = ("id", "type", "description", "timestamp", "user_id")
