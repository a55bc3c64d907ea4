"""Expert accounts, profiles and public listings.

An expert registers with a profile that starts out ``PENDING``. Admins
verify or reject it. While a profile is pending or rejected the expert
may edit it freely (each edit resubmits it for review); once it is
verified, edits are held in ``pending_changes`` and the public profile
stays as approved until an admin reviews them.
"""
from __future__ import annotations

import logging
from typing import List

from ..db import db
from ..errors import NotFoundError, UnauthorizedError, ValidationError
from ..models import ExpertProfile, PROFILE_FIELDS, Role, User, VerificationStatus
from ..util.sanitization import clean_fields
from . import auth_service

logger = logging.getLogger(__name__)

# Free-text fields shown on public profiles
SANITISED_FIELDS = ("specialization", "experience", "bio")


def register(data: dict) -> User:
    """Create an ``EXPERT`` account together with its ``PENDING`` profile."""
    profile_data = clean_fields(
        {field: data[field] for field in PROFILE_FIELDS if field in data}, SANITISED_FIELDS
    )

    def attach_profile(user: User) -> None:
        profile = ExpertProfile(verification_status=VerificationStatus.PENDING, rejection_reasons=[])
        profile.apply_fields(profile_data)
        user.expert_profile = profile

    return auth_service.register(data, role=Role.EXPERT, profile_builder=attach_profile)


def login(email: str, password: str) -> tuple[User, dict]:
    """Credential login restricted to unblocked experts."""
    user = auth_service.validate_credentials(email, password)
    if user.role != Role.EXPERT:
        raise UnauthorizedError("Expert account not found", code="EXPERT_NOT_FOUND")
    if user.is_blocked:
        raise UnauthorizedError("Expert account is blocked", code="EXPERT_BLOCKED")
    return user, auth_service.start_session(user)


def get_expert(user_id: str) -> User:
    user = db.session.get(User, user_id)
    if not user or user.role != Role.EXPERT:
        raise NotFoundError("Expert profile not found", code="EXPERT_NOT_FOUND")
    return user


def update_profile(user_id: str, data: dict) -> str:
    """Apply or hold an expert's profile edits.

    Returns the message to show the expert. Only fields present in
    ``data`` are touched.
    """
    profile = ExpertProfile.query.filter_by(user_id=user_id).first()
    if not profile:
        raise NotFoundError("Expert profile not found", code="EXPERT_NOT_FOUND")

    changes = clean_fields(
        {field: data[field] for field in PROFILE_FIELDS if field in data}, SANITISED_FIELDS
    )
    if not changes:
        raise ValidationError("No profile fields supplied", fields={"_schema": ["No profile fields supplied"]})

    if profile.verification_status == VerificationStatus.VERIFIED:
        profile.pending_changes = changes
        db.session.commit()
        logger.info("Expert %s submitted profile changes for review", user_id)
        return "Your changes have been submitted for admin approval"

    profile.apply_fields(changes)
    profile.verification_status = VerificationStatus.PENDING
    profile.rejection_reasons = []
    db.session.commit()
    logger.info("Expert %s resubmitted profile for review", user_id)
    return "Your profile has been updated and submitted for admin approval"


def _public_experts_query():
    return User.query.join(ExpertProfile, ExpertProfile.user_id == User.id).filter(
        User.role == Role.EXPERT,
        User.is_blocked.is_(False),
        User.is_unlisted.is_(False),
        ExpertProfile.verification_status == VerificationStatus.VERIFIED,
    )


def get_public_expert(username: str) -> User:
    user = _public_experts_query().filter(User.username == username).first()
    if not user:
        raise NotFoundError("Expert not found or not publicly available", code="EXPERT_NOT_FOUND")
    return user


def list_public_experts() -> List[User]:
    return _public_experts_query().order_by(ExpertProfile.verified_at.desc()).all()
