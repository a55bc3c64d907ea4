"""Seed script for initial data.

Running this script will create an admin account and a handful of
demo experts in different verification states, for local development
of the web front-ends. It can be executed with
``python -m seed.seed`` from the repository root.
"""
from __future__ import annotations

import os

from digital_offices import create_app, db
from digital_offices.models import ExpertProfile, Role, User, VerificationStatus, utcnow

DEMO_EXPERTS = [
    {
        "username": "calm-teal-otter",
        "first_name": "Maya",
        "last_name": "Lindqvist",
        "email": "maya@example.com",
        "status": VerificationStatus.VERIFIED,
        "specialization": "Anxiety and stress",
        "experience": "12 years in private practice",
        "bio": "Cognitive behavioural therapist helping adults manage anxiety.",
    },
    {
        "username": "gentle-amber-heron",
        "first_name": "Daniel",
        "last_name": "Okafor",
        "email": "daniel@example.com",
        "status": VerificationStatus.VERIFIED,
        "specialization": "Career coaching",
        "experience": "8 years",
        "bio": "Coach for professionals navigating burnout and career change.",
    },
    {
        "username": "eager-plum-finch",
        "first_name": "Sofia",
        "last_name": "Reyes",
        "email": "sofia@example.com",
        "status": VerificationStatus.PENDING,
        "specialization": "Couples therapy",
        "experience": "5 years",
        "bio": "Helping couples rebuild communication and trust.",
    },
]


def run_seeds() -> None:
    """Insert an admin account and demo experts into the database."""
    app = create_app()
    password = os.environ.get("SEED_PASSWORD", "password123")
    with app.app_context():
        db.create_all()
        admin = User(
            username="admin",
            first_name="Platform",
            last_name="Admin",
            email=os.environ.get("SEED_ADMIN_EMAIL", "admin@example.com"),
            role=Role.ADMIN,
            email_verified=True,
            email_verified_at=utcnow(),
        )
        admin.set_password(password)
        db.session.add(admin)
        db.session.flush()

        for entry in DEMO_EXPERTS:
            expert = User(
                username=entry["username"],
                first_name=entry["first_name"],
                last_name=entry["last_name"],
                email=entry["email"],
                role=Role.EXPERT,
                email_verified=True,
                email_verified_at=utcnow(),
            )
            expert.set_password(password)
            verified = entry["status"] == VerificationStatus.VERIFIED
            expert.expert_profile = ExpertProfile(
                verification_status=entry["status"],
                rejection_reasons=[],
                verified_at=utcnow() if verified else None,
                verified_by=admin.id if verified else None,
                specialization=entry["specialization"],
                experience=entry["experience"],
                bio=entry["bio"],
            )
            db.session.add(expert)
        db.session.commit()
        print("Seed data inserted successfully.")


if __name__ == "__main__":
    run_seeds()
