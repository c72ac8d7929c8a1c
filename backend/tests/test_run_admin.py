"""Tests for the operator command line."""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import run_admin
from modules.invitations.models import InvitationStatus, TherapistInvitation
from modules.invitations.repository import InvitationRepository
from shared.models import Role


def parse(*argv):
    return run_admin.build_parser().parse_args(list(argv))


class TestParser:
    def test_reconcile_defaults_to_report(self):
        args = parse("reconcile")
        assert args.handler is run_admin.reconcile
        assert args.delete is False

    def test_reconcile_delete(self):
        assert parse("reconcile", "--delete").delete is True

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse()


class TestVerification:
    @pytest.mark.asyncio
    async def test_verify_therapist(self, container, seed_therapist, capsys):
        uid = seed_therapist(verified=False)
        args = parse("verify-therapist", uid)

        await args.handler(container, args)

        assert container.directory.force_claims_refresh(uid).is_verified is True
        profile = container.therapists.get(uid)
        assert profile.is_verified is True
        assert profile.verified_by == run_admin.OPERATOR.id
        assert "is now verified" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_unverify_therapist(self, container, seed_therapist):
        uid = seed_therapist(verified=True)
        args = parse("unverify-therapist", uid)

        await args.handler(container, args)

        assert container.directory.force_claims_refresh(uid).is_verified is False
        assert container.therapists.get(uid).verified_at is None


class TestCheckClaims:
    @pytest.mark.asyncio
    async def test_prints_claims(self, container, seed_patient, capsys):
        uid = seed_patient(therapist_id="t1")

        await run_admin.check_claims(container, parse("check-claims", uid))

        out = capsys.readouterr().out
        assert "PATIENT" in out
        assert "Warning" not in out

    @pytest.mark.asyncio
    async def test_warns_on_role_mismatch(self, container, seed_patient, capsys):
        uid = seed_patient()
        container.claims_writer.merge(uid, {"role": Role.THERAPIST})

        await run_admin.check_claims(container, parse("check-claims", uid))

        assert "profile role is PATIENT" in capsys.readouterr().out


class TestReconcile:
    @pytest.mark.asyncio
    async def test_nothing_to_report(self, container, capsys):
        await run_admin.reconcile(container, parse("reconcile"))
        assert "No orphaned principals found" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_delete_orphans(self, container, capsys):
        orphan = container.directory.create_principal("lost@example.com", "secret1", "Lost")
        container.directory._principals[orphan.id].created_at = (
            datetime.now(timezone.utc) - timedelta(days=1)
        )

        await run_admin.reconcile(container, parse("reconcile", "--delete"))

        assert container.directory.list_principals() == []
        out = capsys.readouterr().out
        assert "Deleted 1 principal(s)" in out
        [entry] = container.audit.list_for_scope("admin")
        assert entry.action == "RECONCILE_ORPHANS"
        assert entry.performed_by == run_admin.OPERATOR.id


class TestExpireInvitations:
    @pytest.mark.asyncio
    async def test_marks_overdue_invitations(self, container, capsys):
        repo = InvitationRepository(container.store)
        now = datetime.now(timezone.utc)
        repo.create(
            TherapistInvitation(
                token="late",
                therapist_id="ther-1",
                patient_email="late@example.com",
                tenant_id="tenant_ther-1",
                expires_at=now - timedelta(days=1),
            )
        )

        await run_admin.expire_invitations(container, parse("expire-invitations"))

        assert repo.find("late").status == InvitationStatus.EXPIRED
        assert "Marked 1 invitation(s) as expired" in capsys.readouterr().out


class TestMain:
    def test_taxonomy_error_exits_nonzero(self, settings, capsys):
        with patch("run_admin.get_settings", return_value=settings), patch(
            "sys.argv", ["run_admin.py", "check-claims", "missing-uid"]
        ):
            with pytest.raises(SystemExit) as exc_info:
                run_admin.main()

        assert exc_info.value.code == 1
        assert "Error (not-found)" in capsys.readouterr().out
