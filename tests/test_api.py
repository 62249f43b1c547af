"""
HTTP API tests - status codes and payloads of the public surface
"""
from datetime import datetime

import pytest
from sqlalchemy import select

from awareness_api.models import Event, Report
from awareness_api.services.retention_scheduler import RetentionPurgeScheduler

from tests.conftest import PASSWORD, auth_headers_for


@pytest.mark.auth
class TestAuthentication:

    @pytest.mark.asyncio
    async def test_login_success(self, client, member_user):
        response = await client.post(
            "/api/v1/auth/login", json={"email": "alex.member@club.org", "password": PASSWORD}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["role"] == "team_member"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client, member_user):
        response = await client.post(
            "/api/v1/auth/login", json={"email": "alex.member@club.org", "password": "WrongPassword1"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_requires_token(self, client):
        response = await client.get("/api/v1/auth/me")
        assert response.status_code == 401


@pytest.mark.invitations
class TestInvitationFlow:

    @pytest.mark.asyncio
    async def test_issue_fetch_accept(self, client, admin_user):
        response = await client.post(
            "/api/v1/invitations",
            json={"email": "new.organizer@club.org", "role": "organizer"},
            headers=auth_headers_for(admin_user),
        )
        assert response.status_code == 201
        invitation = response.json()
        assert invitation["state"] == "pending"
        assert invitation["expires_at"].startswith("2024-01-04T00:00:00")
        token = invitation["token"]

        response = await client.get(f"/api/v1/invitations/{token}")
        assert response.status_code == 200
        assert response.json()["email"] == "new.organizer@club.org"

        response = await client.post(
            f"/api/v1/invitations/{token}/accept", json={"name": "New Organizer", "password": "Secret123!"}
        )
        assert response.status_code == 201
        session = response.json()
        assert session["user"]["role"] == "organizer"

        me = await client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {session['access_token']}"}
        )
        assert me.status_code == 200
        assert me.json()["email"] == "new.organizer@club.org"

        again = await client.post(
            f"/api/v1/invitations/{token}/accept", json={"name": "Replay", "password": "Secret123!"}
        )
        assert again.status_code == 410
        assert (await client.get(f"/api/v1/invitations/{token}")).status_code == 410

    @pytest.mark.asyncio
    async def test_non_admin_cannot_invite(self, client, organizer_user):
        response = await client.post(
            "/api/v1/invitations",
            json={"email": "someone@club.org", "role": "team_member"},
            headers=auth_headers_for(organizer_user),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_role_is_not_invitable(self, client, admin_user):
        response = await client.post(
            "/api/v1/invitations",
            json={"email": "someone@club.org", "role": "admin"},
            headers=auth_headers_for(admin_user),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_existing_user_conflicts(self, client, admin_user, member_user):
        response = await client.post(
            "/api/v1/invitations",
            json={"email": "alex.member@club.org", "role": "team_member"},
            headers=auth_headers_for(admin_user),
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_decline_erases(self, client, admin_user):
        headers = auth_headers_for(admin_user)
        created = await client.post(
            "/api/v1/invitations", json={"email": "no.thanks@club.org"}, headers=headers
        )
        token = created.json()["token"]

        response = await client.post(f"/api/v1/invitations/{token}/decline")
        assert response.status_code == 200

        assert (await client.get(f"/api/v1/invitations/{token}")).status_code == 404
        assert (await client.post(f"/api/v1/invitations/{token}/decline")).status_code == 404

        listing = await client.get("/api/v1/invitations", headers=headers)
        assert listing.status_code == 200
        assert listing.json() == []

    @pytest.mark.asyncio
    async def test_unknown_token(self, client):
        assert (await client.get("/api/v1/invitations/unknown")).status_code == 404


@pytest.mark.retention
class TestGDPRSettings:

    @pytest.mark.asyncio
    async def test_settings_are_public(self, client):
        response = await client.get("/api/v1/gdpr/settings")
        assert response.status_code == 200
        data = response.json()
        assert data["default_retention_days"] == 90
        assert data["invitation_expiration_hours"] == 72

    @pytest.mark.asyncio
    async def test_admin_updates_settings(self, client, admin_user):
        response = await client.put(
            "/api/v1/gdpr/settings", json={"default_retention_days": 30}, headers=auth_headers_for(admin_user)
        )
        assert response.status_code == 200
        assert response.json()["default_retention_days"] == 30
        assert response.json()["invitation_expiration_hours"] == 72

    @pytest.mark.asyncio
    async def test_organizer_cannot_update(self, client, organizer_user):
        response = await client.put(
            "/api/v1/gdpr/settings", json={"default_retention_days": 1}, headers=auth_headers_for(organizer_user)
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_invalid_values_are_rejected(self, client, admin_user):
        response = await client.put(
            "/api/v1/gdpr/settings", json={"invitation_expiration_hours": 0}, headers=auth_headers_for(admin_user)
        )
        assert response.status_code == 422


@pytest.mark.governance
class TestReports:

    @pytest.mark.asyncio
    async def test_member_submits_and_organizer_reads(self, client, organizer_user, member_user, event, shift):
        response = await client.post(
            "/api/v1/reports",
            json={"event_id": event.id, "shift_id": shift.id, "text": "Call me on +49 170 1234567"},
            headers=auth_headers_for(member_user),
        )
        assert response.status_code == 201
        report = response.json()
        assert report["has_potential_pii"] is True
        assert report["pii_confidence"] == "high"
        assert "phone" in report["detected_categories"]

        listing = await client.get(f"/api/v1/events/{event.id}/reports", headers=auth_headers_for(organizer_user))
        assert listing.status_code == 200
        assert [r["id"] for r in listing.json()] == [report["id"]]

        mine = await client.get("/api/v1/reports/mine", headers=auth_headers_for(member_user))
        assert [r["id"] for r in mine.json()] == [report["id"]]

        single = await client.get(f"/api/v1/reports/{report['id']}", headers=auth_headers_for(member_user))
        assert single.status_code == 200

    @pytest.mark.asyncio
    async def test_unassigned_member_is_forbidden(self, client, other_member, event, shift):
        response = await client.post(
            "/api/v1/reports",
            json={"event_id": event.id, "shift_id": shift.id, "text": "something happened"},
            headers=auth_headers_for(other_member),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_other_organizer_cannot_list(self, client, other_organizer, event):
        response = await client.get(f"/api/v1/events/{event.id}/reports", headers=auth_headers_for(other_organizer))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_shift_is_not_found(self, client, member_user, event):
        response = await client.post(
            "/api/v1/reports",
            json={"event_id": event.id, "shift_id": 4242, "text": "something happened"},
            headers=auth_headers_for(member_user),
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_pii_check_does_not_store(self, client, member_user):
        response = await client.post(
            "/api/v1/reports/pii-check",
            json={"text": "wallet found near gate 12345."},
            headers=auth_headers_for(member_user),
        )
        assert response.status_code == 200
        data = response.json()
        assert data == {
            "has_pii": True,
            "detected_types": ["postal_code"],
            "confidence": "medium",
            "warning": data["warning"],
        }
        assert "postal code" in data["warning"]

        mine = await client.get("/api/v1/reports/mine", headers=auth_headers_for(member_user))
        assert mine.json() == []


@pytest.mark.governance
class TestEvents:

    @pytest.mark.asyncio
    async def test_organizer_creates_event_and_shift(self, client, organizer_user, member_user):
        headers = auth_headers_for(organizer_user)
        response = await client.post(
            "/api/v1/events",
            json={"name": "Harbour Festival", "date": "2024-06-01T00:00:00", "retention_days": 14},
            headers=headers,
        )
        assert response.status_code == 201
        event = response.json()
        assert event["retention_days"] == 14
        assert event["organizer_id"] == organizer_user.id

        response = await client.post(
            f"/api/v1/events/{event['id']}/shifts",
            json={"name": "Gate A", "member_ids": [member_user.id]},
            headers=headers,
        )
        assert response.status_code == 201
        assert response.json()["member_ids"] == [member_user.id]

    @pytest.mark.asyncio
    async def test_team_member_cannot_create_event(self, client, member_user):
        response = await client.post(
            "/api/v1/events",
            json={"name": "Secret Party", "date": "2024-06-01T00:00:00"},
            headers=auth_headers_for(member_user),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_offset_dates_are_stored_as_utc(
        self, client, organizer_user, member_user, session_factory, invitation_service, policy_store
    ):
        headers = auth_headers_for(organizer_user)
        response = await client.post(
            "/api/v1/events",
            json={"name": "Night Market", "date": "2024-01-01T00:00:00+02:00", "retention_days": 1},
            headers=headers,
        )
        assert response.status_code == 201
        event_id = response.json()["id"]
        assert response.json()["date"] == "2023-12-31T22:00:00"

        shift = await client.post(
            f"/api/v1/events/{event_id}/shifts",
            json={"name": "Late", "member_ids": [member_user.id], "start_time": "2023-12-31T23:00:00Z"},
            headers=headers,
        )
        assert shift.status_code == 201
        assert shift.json()["start_time"] == "2023-12-31T23:00:00"

        async with session_factory() as db:
            stored = await db.execute(select(Event.date).where(Event.id == event_id))
            assert stored.scalar_one() == datetime(2023, 12, 31, 22, 0)
            db.add(Report(event_id=event_id, shift_id=shift.json()["id"], text="lost keys"))
            await db.commit()

        scheduler = RetentionPurgeScheduler(
            session_factory=session_factory,
            invitation_service=invitation_service,
            policy_store=policy_store,
        )
        assert await scheduler.sweep_reports(datetime(2024, 1, 1, 21, 59)) == 0
        assert await scheduler.sweep_reports(datetime(2024, 1, 1, 22, 0)) == 1
