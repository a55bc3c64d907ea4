"""Tests for expert registration, login, profile updates and public listings."""
from __future__ import annotations

from datetime import timedelta

from digital_offices.models import ExpertProfile, RefreshToken, Role, User, VerificationStatus, utcnow

from .conftest import PASSWORD


def _register_expert(client, **overrides):
    body = {
        "email": "expert@example.com",
        "password": "supersecret",
        "firstName": "Eve",
        "lastName": "Expert",
        "specialization": "Anxiety",
        "bio": "<script>alert(1)</script>Helping people <b>cope</b>",
        "qualifications": '["MSc Psychology"]',
    }
    body.update(overrides)
    return client.post("/api/experts/register", json=body)


class TestExpertRegistration:
    def test_creates_expert_with_pending_profile(self, client, sent_emails):
        response = _register_expert(client)
        assert response.status_code == 201
        body = response.get_json()
        assert body["message"] == (
            "Verification email sent. Your expert profile is pending admin approval."
        )

        user = User.query.filter_by(username=body["username"]).one()
        assert user.role == Role.EXPERT
        profile = user.expert_profile
        assert profile.verification_status == VerificationStatus.PENDING
        assert profile.rejection_reasons == []
        assert profile.specialization == "Anxiety"
        assert profile.bio == "alert(1)Helping people cope"
        assert profile.qualifications == '["MSc Psychology"]'
        assert len(sent_emails) == 1

    def test_duplicate_email_leaves_no_orphan_profile(self, client, sent_emails, make_user):
        make_user(email="expert@example.com")
        response = _register_expert(client)
        assert response.status_code == 409
        assert response.get_json()["error"]["code"] == "EMAIL_ALREADY_IN_USE"
        assert ExpertProfile.query.count() == 0


class TestExpertLogin:
    def test_expert_login(self, client, make_user):
        expert = make_user(role=Role.EXPERT, email="pro@example.com")
        response = client.post("/api/experts/login", json={"email": "pro@example.com", "password": PASSWORD})
        assert response.status_code == 200
        user = response.get_json()["user"]
        assert user["id"] == expert.id
        assert user["role"] == "EXPERT"
        assert user["isBlocked"] is False
        assert user["isUnlisted"] is False

    def test_non_expert_is_rejected(self, client, make_user):
        make_user(email="plain@example.com")
        response = client.post("/api/experts/login", json={"email": "plain@example.com", "password": PASSWORD})
        assert response.status_code == 401
        assert response.get_json()["error"]["code"] == "EXPERT_NOT_FOUND"

    def test_blocked_expert_is_rejected_without_issuing_tokens(self, client, make_user):
        make_user(role=Role.EXPERT, email="pro@example.com", is_blocked=True)
        response = client.post("/api/experts/login", json={"email": "pro@example.com", "password": PASSWORD})
        assert response.status_code == 401
        assert response.get_json()["error"]["code"] == "EXPERT_BLOCKED"
        assert RefreshToken.query.count() == 0

    def test_wrong_password(self, client, make_user):
        make_user(role=Role.EXPERT, email="pro@example.com")
        response = client.post("/api/experts/login", json={"email": "pro@example.com", "password": "nope-nope"})
        assert response.status_code == 401
        assert response.get_json()["error"]["code"] == "INVALID_CREDENTIALS"


class TestExpertProfile:
    def test_get_own_profile(self, client, make_user, auth_headers):
        expert = make_user(role=Role.EXPERT, specialization="Grief")
        response = client.get("/api/experts/profile", headers=auth_headers(expert))
        assert response.status_code == 200
        body = response.get_json()
        assert body["role"] == "EXPERT"
        assert body["expertProfile"]["verificationStatus"] == "PENDING"
        assert body["expertProfile"]["specialization"] == "Grief"
        assert body["expertProfile"]["userId"] == expert.id
        assert "pendingChanges" not in body["expertProfile"]

    def test_profile_requires_expert_role(self, client, make_user, auth_headers):
        user = make_user()
        response = client.get("/api/experts/profile", headers=auth_headers(user))
        assert response.status_code == 403

    def test_blocked_expert_token_is_refused(self, client, make_user, auth_headers):
        expert = make_user(role=Role.EXPERT, is_blocked=True)
        response = client.get("/api/experts/profile", headers=auth_headers(expert))
        assert response.status_code == 403

    def test_rejected_profile_is_updated_and_resubmitted(self, client, make_user, auth_headers):
        expert = make_user(
            role=Role.EXPERT,
            status=VerificationStatus.REJECTED,
            rejection_reasons=["Missing license"],
            bio="Old bio",
            website="https://old.example.com",
        )
        response = client.put(
            "/api/experts/profile",
            json={"bio": "New bio", "qualifications": '["Licensed counsellor"]'},
            headers=auth_headers(expert),
        )
        assert response.status_code == 200
        assert response.get_json() == {
            "success": True,
            "message": "Your profile has been updated and submitted for admin approval",
            "pendingChanges": True,
        }

        profile = ExpertProfile.query.filter_by(user_id=expert.id).one()
        assert profile.verification_status == VerificationStatus.PENDING
        assert profile.rejection_reasons == []
        assert profile.bio == "New bio"
        assert profile.qualifications == '["Licensed counsellor"]'
        assert profile.website == "https://old.example.com"
        assert profile.pending_changes is None

    def test_verified_profile_changes_are_held(self, client, make_user, auth_headers):
        expert = make_user(role=Role.EXPERT, status=VerificationStatus.VERIFIED, bio="Approved bio")
        response = client.put(
            "/api/experts/profile",
            json={"bio": "Unreviewed bio"},
            headers=auth_headers(expert),
        )
        assert response.status_code == 200
        assert response.get_json()["message"] == "Your changes have been submitted for admin approval"

        profile = ExpertProfile.query.filter_by(user_id=expert.id).one()
        assert profile.verification_status == VerificationStatus.VERIFIED
        assert profile.bio == "Approved bio"
        assert profile.pending_changes == {"bio": "Unreviewed bio"}

    def test_empty_update_is_rejected_and_keeps_held_changes(self, client, make_user, auth_headers):
        expert = make_user(role=Role.EXPERT, status=VerificationStatus.VERIFIED)
        headers = auth_headers(expert)
        client.put("/api/experts/profile", json={"bio": "new bio"}, headers=headers)

        response = client.put("/api/experts/profile", json={}, headers=headers)
        assert response.status_code == 400
        error = response.get_json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == "No profile fields supplied"

        profile = ExpertProfile.query.filter_by(user_id=expert.id).one()
        assert profile.pending_changes == {"bio": "new bio"}

    def test_new_submission_replaces_held_changes(self, client, make_user, auth_headers):
        expert = make_user(role=Role.EXPERT, status=VerificationStatus.VERIFIED)
        headers = auth_headers(expert)
        client.put("/api/experts/profile", json={"bio": "First"}, headers=headers)
        client.put("/api/experts/profile", json={"website": "https://me.example.com"}, headers=headers)

        profile = ExpertProfile.query.filter_by(user_id=expert.id).one()
        assert profile.pending_changes == {"website": "https://me.example.com"}


class TestPublicExperts:
    def test_only_verified_listed_unblocked_experts_are_public(self, client, make_user):
        visible = make_user(role=Role.EXPERT, status=VerificationStatus.VERIFIED, username="calm-teal-otter")
        make_user(role=Role.EXPERT, status=VerificationStatus.PENDING, username="pending-one")
        make_user(role=Role.EXPERT, status=VerificationStatus.REJECTED, username="rejected-one")
        make_user(role=Role.EXPERT, status=VerificationStatus.VERIFIED, is_blocked=True, username="blocked-one")
        make_user(role=Role.EXPERT, status=VerificationStatus.VERIFIED, is_unlisted=True, username="hidden-one")
        make_user(username="not-an-expert")

        response = client.get("/api/experts/public")
        assert response.status_code == 200
        experts = response.get_json()
        assert [e["user"]["username"] for e in experts] == ["calm-teal-otter"]
        assert experts[0]["user"] == {
            "id": visible.id,
            "username": "calm-teal-otter",
            "firstName": visible.first_name,
            "lastName": visible.last_name,
        }
        assert experts[0]["expertProfile"]["verifiedAt"].endswith("Z")

    def test_listing_is_ordered_by_verification_date(self, client, make_user):
        now = utcnow()
        make_user(role=Role.EXPERT, status=VerificationStatus.VERIFIED, username="older",
                  verified_at=now - timedelta(days=3))
        make_user(role=Role.EXPERT, status=VerificationStatus.VERIFIED, username="newer",
                  verified_at=now - timedelta(days=1))

        experts = client.get("/api/experts/public").get_json()
        assert [e["user"]["username"] for e in experts] == ["newer", "older"]

    def test_get_public_expert_by_username(self, client, make_user):
        make_user(role=Role.EXPERT, status=VerificationStatus.VERIFIED, username="calm-teal-otter",
                  email="secret@example.com", specialization="Sleep")
        response = client.get("/api/experts/public/calm-teal-otter")
        assert response.status_code == 200
        body = response.get_json()
        assert body["expertProfile"]["specialization"] == "Sleep"
        assert "email" not in body["user"]

    def test_unverified_expert_is_not_public(self, client, make_user):
        make_user(role=Role.EXPERT, status=VerificationStatus.PENDING, username="pending-one")
        response = client.get("/api/experts/public/pending-one")
        assert response.status_code == 404
        assert response.get_json()["error"]["code"] == "EXPERT_NOT_FOUND"

    def test_held_changes_are_not_public(self, client, make_user, auth_headers):
        expert = make_user(role=Role.EXPERT, status=VerificationStatus.VERIFIED,
                           username="calm-teal-otter", bio="Approved")
        client.put("/api/experts/profile", json={"bio": "Unreviewed"}, headers=auth_headers(expert))
        body = client.get("/api/experts/public/calm-teal-otter").get_json()
        assert body["expertProfile"]["bio"] == "Approved"
