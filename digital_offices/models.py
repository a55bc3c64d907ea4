"""
Database models for the Digital Offices marketplace API.

Every account is a ``User`` with one of three roles (``USER``,
``EXPERT`` or ``ADMIN``). Experts own exactly one ``ExpertProfile``
which moves through an admin verification workflow. Once a profile is
verified, further edits are parked in ``pending_changes`` until an
admin approves or rejects them.

Refresh tokens and email verification tokens are persisted so they can
be rotated, revoked and marked as used. ``Activity`` rows back the
admin dashboard's recent activity feed.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional, List

from werkzeug.security import generate_password_hash, check_password_hash

from .db import db


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _uuid() -> str:
    return str(uuid.uuid4())


class Role(enum.Enum):
    """Enumeration of user roles."""
    USER = "USER"
    EXPERT = "EXPERT"
    ADMIN = "ADMIN"


class VerificationStatus(enum.Enum):
    """Verification states of an expert profile."""
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


# Editable expert profile fields, shared by registration, profile
# updates and the pending-changes merge.
PROFILE_FIELDS = (
    "specialization",
    "experience",
    "qualifications",
    "bio",
    "website",
    "linkedin",
    "portfolio",
)


class User(db.Model):
    __allow_unmapped__ = True
    """An account on the platform.

    Credential accounts carry a salted password hash; Google accounts
    may have none. Usernames are generated by the backend and used in
    public expert URLs.
    """
    __tablename__ = "users"

    id: str = db.Column(db.String(36), primary_key=True, default=_uuid)
    username: str = db.Column(db.String(100), nullable=False)
    email: str = db.Column(db.String(255), nullable=False)
    password_hash: Optional[str] = db.Column(db.String(255), nullable=True)
    first_name: str = db.Column(db.String(100), nullable=False, default="")
    last_name: str = db.Column(db.String(100), nullable=False, default="")
    provider: str = db.Column(db.String(32), nullable=False, default="credentials")
    provider_id: Optional[str] = db.Column(db.String(255), nullable=True)
    email_verified: bool = db.Column(db.Boolean, nullable=False, default=False)
    email_verified_at: Optional[datetime] = db.Column(db.DateTime, nullable=True)
    role: Role = db.Column(db.Enum(Role), nullable=False, default=Role.USER)
    is_blocked: bool = db.Column(db.Boolean, nullable=False, default=False)
    is_unlisted: bool = db.Column(db.Boolean, nullable=False, default=False)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    expert_profile: Optional[ExpertProfile] = db.relationship(
        "ExpertProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    refresh_tokens: List[RefreshToken] = db.relationship(
        "RefreshToken", back_populates="user", cascade="all, delete-orphan"
    )
    verification_tokens: List[EmailVerificationToken] = db.relationship(
        "EmailVerificationToken", back_populates="user", cascade="all, delete-orphan"
    )

    # Named so that integrity errors can be attributed to a column
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_users_email"),
        db.UniqueConstraint("username", name="uq_users_username"),
    )

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.role.value})>"


class ExpertProfile(db.Model):
    __allow_unmapped__ = True
    """Professional profile of an expert, subject to admin verification."""
    __tablename__ = "expert_profiles"

    id: str = db.Column(db.String(36), primary_key=True, default=_uuid)
    user_id: str = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, unique=True)
    verification_status: VerificationStatus = db.Column(
        db.Enum(VerificationStatus), nullable=False, default=VerificationStatus.PENDING
    )
    rejection_reasons: list = db.Column(db.JSON, nullable=False, default=list)
    verified_at: Optional[datetime] = db.Column(db.DateTime, nullable=True)
    verified_by: Optional[str] = db.Column(db.String(36), nullable=True)

    specialization: Optional[str] = db.Column(db.String(255))
    experience: Optional[str] = db.Column(db.Text)
    qualifications: Optional[str] = db.Column(db.Text)
    bio: Optional[str] = db.Column(db.Text)
    website: Optional[str] = db.Column(db.String(500))
    linkedin: Optional[str] = db.Column(db.String(500))
    portfolio: Optional[str] = db.Column(db.String(500))

    # Edits submitted while verified, keyed by attribute name
    pending_changes: Optional[dict] = db.Column(db.JSON, nullable=True)

    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user: User = db.relationship("User", back_populates="expert_profile")

    def apply_fields(self, data: dict) -> None:
        """Copy the known profile fields present in ``data`` onto the profile."""
        for field in PROFILE_FIELDS:
            if field in data:
                setattr(self, field, data[field])

    def __repr__(self) -> str:
        return f"<ExpertProfile user={self.user_id} {self.verification_status.value}>"


class RefreshToken(db.Model):
    __allow_unmapped__ = True
    """A refresh token issued to a user. Rotated on every refresh."""
    __tablename__ = "refresh_tokens"

    id: str = db.Column(db.String(36), primary_key=True, default=_uuid)
    user_id: str = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    token: str = db.Column(db.String(1024), unique=True, nullable=False)
    expires_at: datetime = db.Column(db.DateTime, nullable=False)
    revoked_at: Optional[datetime] = db.Column(db.DateTime, nullable=True)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow)

    user: User = db.relationship("User", back_populates="refresh_tokens")

    @property
    def is_active(self) -> bool:
        return self.revoked_at is None and self.expires_at > utcnow()

    def __repr__(self) -> str:
        return f"<RefreshToken user={self.user_id} revoked={self.revoked_at is not None}>"


class EmailVerificationToken(db.Model):
    __allow_unmapped__ = True
    """Single-use token emailed to a user to confirm address ownership."""
    __tablename__ = "email_verification_tokens"

    id: str = db.Column(db.String(36), primary_key=True, default=_uuid)
    user_id: str = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    token: str = db.Column(db.String(255), unique=True, nullable=False)
    expires_at: datetime = db.Column(db.DateTime, nullable=False)
    used_at: Optional[datetime] = db.Column(db.DateTime, nullable=True)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow)

    user: User = db.relationship("User", back_populates="verification_tokens")

    def __repr__(self) -> str:
        return f"<EmailVerificationToken user={self.user_id}>"


class Activity(db.Model):
    __allow_unmapped__ = True
    """An entry in the admin dashboard activity feed."""
    __tablename__ = "activities"

    id: str = db.Column(db.String(36), primary_key=True, default=_uuid)
    type: str = db.Column(db.String(64), nullable=False)
    description: str = db.Column(db.String(500), nullable=False)
    user_id: Optional[str] = db.Column(db.String(36), nullable=True)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    def __repr__(self) -> str:
        return f"<Activity {self.type}>"
