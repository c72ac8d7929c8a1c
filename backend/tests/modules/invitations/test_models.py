"""Tests for invitation models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import TypeAdapter, ValidationError

from modules.invitations.models import (
    AdminInvitation,
    Invitation,
    InvitationSource,
    InvitationView,
    TherapistData,
    TherapistInvitation,
)
from shared.models import Role

EXPIRES = datetime(2025, 3, 8, tzinfo=timezone.utc)


class TestInvitationUnion:
    def test_discriminates_on_source(self):
        adapter = TypeAdapter(Invitation)
        invitation = adapter.validate_python({
            "source": "therapist",
            "token": "t1",
            "therapist_id": "ther-1",
            "patient_email": "p@example.com",
            "tenant_id": "tenant_ther-1",
            "expires_at": EXPIRES.isoformat(),
        })
        assert isinstance(invitation, TherapistInvitation)
        assert invitation.role == Role.PATIENT
        assert invitation.issuer_id == "ther-1"
        assert invitation.target_email == "p@example.com"

    def test_unknown_source_rejected(self):
        with pytest.raises(ValidationError):
            TypeAdapter(Invitation).validate_python({"source": "robot", "token": "x"})


class TestExpiry:
    def test_is_expired(self):
        invitation = AdminInvitation(
            token="a1",
            role=Role.THERAPIST,
            invited_by="admin-1",
            target_email="t@example.com",
            expires_at=EXPIRES,
        )
        assert not invitation.is_expired(EXPIRES)
        assert invitation.is_expired(EXPIRES + timedelta(seconds=1))


class TestInvitationView:
    def test_admin_view_carries_prefill(self):
        invitation = AdminInvitation(
            token="a1",
            role=Role.THERAPIST,
            invited_by="admin-1",
            invited_by_name="Dra. Admin",
            target_email="t@example.com",
            therapist_data=TherapistData(cedula="enc", specialization=["CBT"]),
            expires_at=EXPIRES,
        )
        view = InvitationView.from_invitation(invitation)
        assert view.source == InvitationSource.ADMIN
        assert view.inviter_name == "Dra. Admin"
        assert view.target_name == ""
        assert view.therapist_data.specialization == ["CBT"]

    def test_therapist_view(self):
        invitation = TherapistInvitation(
            token="t1",
            therapist_id="ther-1",
            therapist_name="Dr. Rivera",
            patient_email="p@example.com",
            patient_name="Ana",
            tenant_id="tenant_ther-1",
            expires_at=EXPIRES,
        )
        view = InvitationView.from_invitation(invitation)
        assert view.role == Role.PATIENT
        assert view.inviter_name == "Dr. Rivera"
        assert view.target_name == "Ana"
        assert view.tenant_id == "tenant_ther-1"
        assert view.therapist_data is None
