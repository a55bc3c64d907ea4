"""Admin moderation and expert verification.

Covers admin login, blocking and listing users, the expert review
queue, decisions on held profile changes and the dashboard summary.
Every moderation action is written to the activity feed in the same
transaction as the change itself.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from ..db import db
from ..errors import BadRequestError, NotFoundError, UnauthorizedError
from ..models import ExpertProfile, Role, User, VerificationStatus, utcnow
from ..util.sanitization import strip_tags
from . import auth_service
from .activity_service import record_activity, recent_activity
from .token_service import revoke_user_tokens

logger = logging.getLogger(__name__)


def login(email: str, password: str) -> tuple[User, dict]:
    user = User.query.filter_by(email=auth_service.normalize_email(email)).first()
    if not user or user.role != Role.ADMIN:
        raise UnauthorizedError("Admin access required", code="ADMIN_ACCESS_REQUIRED")
    if user.is_blocked:
        raise UnauthorizedError("Admin account is blocked", code="ADMIN_ACCESS_REQUIRED")
    if not user.check_password(password):
        raise UnauthorizedError("Invalid email or password", code="INVALID_CREDENTIALS")
    return user, auth_service.start_session(user)


# --------------------------------------------------------------------------
# User moderation
# --------------------------------------------------------------------------


def _get_user(user_id: str) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found", code="USER_NOT_FOUND")
    return user


def _describe(action: str, user: User, reason: Optional[str]) -> str:
    description = f"User {user.username} was {action}"
    reason = strip_tags(reason)
    if reason:
        description += f": {reason}"
    return description


def set_blocked(user_id: str, blocked: bool, reason: Optional[str] = None) -> str:
    """Block or unblock a user. Blocking also revokes their refresh tokens."""
    user = _get_user(user_id)
    user.is_blocked = blocked
    action = "blocked" if blocked else "unblocked"
    if blocked:
        revoke_user_tokens(user.id)
    record_activity(f"user_{action}", _describe(action, user, reason), user_id=user.id)
    db.session.commit()
    logger.info("User %s %s", user.username, action)
    return f"User {user.username} has been {action}"


def set_unlisted(user_id: str, unlisted: bool, reason: Optional[str] = None) -> str:
    """Hide a user from, or return them to, public listings."""
    user = _get_user(user_id)
    user.is_unlisted = unlisted
    action = "unlisted" if unlisted else "listed"
    record_activity(f"user_{action}", _describe(action, user, reason), user_id=user.id)
    db.session.commit()
    logger.info("User %s %s", user.username, action)
    return f"User {user.username} has been {action}"


# --------------------------------------------------------------------------
# Expert verification
# --------------------------------------------------------------------------


def pending_experts() -> List[User]:
    return (
        User.query.join(ExpertProfile, ExpertProfile.user_id == User.id)
        .filter(
            User.role == Role.EXPERT,
            ExpertProfile.verification_status == VerificationStatus.PENDING,
        )
        .order_by(ExpertProfile.created_at.desc())
        .all()
    )


def _get_profile(profile_id: str) -> ExpertProfile:
    profile = db.session.get(ExpertProfile, profile_id)
    if not profile:
        raise NotFoundError("Expert profile not found", code="EXPERT_NOT_FOUND")
    return profile


def approve_expert(profile_id: str, admin_id: str) -> ExpertProfile:
    profile = _get_profile(profile_id)
    if profile.verification_status == VerificationStatus.VERIFIED:
        raise BadRequestError("Expert is already verified", code="EXPERT_ALREADY_VERIFIED")

    profile.verification_status = VerificationStatus.VERIFIED
    profile.verified_at = utcnow()
    profile.verified_by = admin_id
    profile.rejection_reasons = []
    record_activity(
        "expert_verified", f"Expert {profile.user.username} was verified", user_id=profile.user_id
    )
    db.session.commit()
    logger.info("Expert profile %s verified by %s", profile.id, admin_id)
    return profile


def reject_expert(profile_id: str, reasons: List[str], admin_id: str) -> ExpertProfile:
    profile = _get_profile(profile_id)
    if profile.verification_status == VerificationStatus.VERIFIED:
        raise BadRequestError(
            "Cannot reject an already verified expert", code="EXPERT_ALREADY_VERIFIED"
        )

    profile.verification_status = VerificationStatus.REJECTED
    profile.verified_by = admin_id
    profile.rejection_reasons = [strip_tags(reason) for reason in reasons]
    record_activity(
        "expert_rejected", f"Expert {profile.user.username} was rejected", user_id=profile.user_id
    )
    db.session.commit()
    logger.info("Expert profile %s rejected by %s", profile.id, admin_id)
    return profile


def expert_with_changes(user_id: str) -> User:
    user = db.session.get(User, user_id)
    if not user or user.role != Role.EXPERT:
        raise NotFoundError("Expert not found", code="EXPERT_NOT_FOUND")
    return user


def _get_profile_with_changes(user_id: str, verb: str) -> ExpertProfile:
    profile = ExpertProfile.query.filter_by(user_id=user_id).first()
    if not profile:
        raise NotFoundError("Expert profile not found", code="EXPERT_NOT_FOUND")
    if not profile.pending_changes:
        raise BadRequestError(f"No pending changes to {verb}", code="EXPERT_NOT_PENDING")
    return profile


def approve_expert_changes(user_id: str, admin_id: str) -> ExpertProfile:
    """Merge held changes into the live profile."""
    profile = _get_profile_with_changes(user_id, "approve")
    profile.apply_fields(profile.pending_changes)
    profile.verification_status = VerificationStatus.VERIFIED
    profile.verified_at = utcnow()
    profile.verified_by = admin_id
    profile.pending_changes = None
    profile.rejection_reasons = []
    record_activity(
        "expert_changes_approved",
        f"Profile changes of {profile.user.username} were approved",
        user_id=user_id,
    )
    db.session.commit()
    logger.info("Profile changes of %s approved by %s", user_id, admin_id)
    return profile


def reject_expert_changes(user_id: str, reasons: List[str], admin_id: str) -> ExpertProfile:
    """Discard held changes; the live profile stays verified."""
    profile = _get_profile_with_changes(user_id, "reject")
    profile.verification_status = VerificationStatus.VERIFIED
    profile.pending_changes = None
    profile.rejection_reasons = [strip_tags(reason) for reason in reasons]
    record_activity(
        "expert_changes_rejected",
        f"Profile changes of {profile.user.username} were rejected",
        user_id=user_id,
    )
    db.session.commit()
    logger.info("Profile changes of %s rejected by %s", user_id, admin_id)
    return profile


# --------------------------------------------------------------------------
# Dashboard
# --------------------------------------------------------------------------


def _count_experts(status: VerificationStatus) -> int:
    return (
        User.query.join(ExpertProfile, ExpertProfile.user_id == User.id)
        .filter(User.role == Role.EXPERT, ExpertProfile.verification_status == status)
        .count()
    )


def dashboard_stats() -> dict:
    return {
        "totalUsers": User.query.count(),
        "totalExperts": User.query.filter(User.role == Role.EXPERT).count(),
        "verifiedExperts": _count_experts(VerificationStatus.VERIFIED),
        "pendingExperts": _count_experts(VerificationStatus.PENDING),
        "blockedUsers": User.query.filter(User.is_blocked.is_(True)).count(),
        "unlistedUsers": User.query.filter(User.is_unlisted.is_(True)).count(),
    }


def dashboard_activity(limit: int = 20):
    return recent_activity(limit)
