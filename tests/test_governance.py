"""
Governance facade tests - report submission and visibility rules
"""
from datetime import timedelta

import pytest
import pytest_asyncio

from awareness_api.core.errors import ForbiddenError, InvalidPolicyError, NotFoundError
from awareness_api.models import Shift
from awareness_api.services.retention_scheduler import RetentionPurgeScheduler
from tests.conftest import NOW


@pytest_asyncio.fixture
async def ids(admin_user, organizer_user, other_organizer, member_user, other_member, event, shift):
    """Plain ids of the cast; failed calls roll the shared session back"""
    return {
        "admin": admin_user.id,
        "organizer": organizer_user.id,
        "other_organizer": other_organizer.id,
        "member": member_user.id,
        "other_member": other_member.id,
        "event": event.id,
        "shift": shift.id,
    }


@pytest_asyncio.fixture
async def report_id(db_session, facade, ids):
    report = await facade.submit_report(
        db_session, ids["event"], ids["shift"], ids["member"], "Contact John Smith at john.smith@example.com"
    )
    return report.id


@pytest.mark.governance
class TestSubmitReport:

    @pytest.mark.asyncio
    async def test_assigned_member_submits_with_classification(self, db_session, facade, ids):
        report = await facade.submit_report(
            db_session, ids["event"], ids["shift"], ids["member"], "Contact John Smith at john.smith@example.com"
        )

        assert report.submitted_by == ids["member"]
        assert report.has_potential_pii is True
        assert report.detected_categories[0] == "email"
        assert "potential_name" in report.detected_categories
        assert report.pii_confidence == "high"

    @pytest.mark.asyncio
    async def test_clean_report_is_not_flagged(self, db_session, facade, ids):
        report = await facade.submit_report(
            db_session, ids["event"], ids["shift"], ids["member"], "a glass broke near the bar, nobody was hurt"
        )
        assert report.has_potential_pii is False
        assert report.detected_categories == []
        assert report.pii_confidence == "low"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("who", ["other_member", "organizer", "admin"])
    async def test_unassigned_users_are_rejected(self, db_session, facade, ids, who):
        with pytest.raises(ForbiddenError):
            await facade.submit_report(db_session, ids["event"], ids["shift"], ids[who], "something happened")

    @pytest.mark.asyncio
    async def test_unknown_shift(self, db_session, facade, ids):
        with pytest.raises(NotFoundError):
            await facade.submit_report(db_session, ids["event"], 4242, ids["member"], "something happened")

    @pytest.mark.asyncio
    async def test_shift_of_another_event(self, db_session, facade, ids):
        with pytest.raises(NotFoundError):
            await facade.submit_report(db_session, ids["event"] + 1, ids["shift"], ids["member"], "something")


@pytest.mark.governance
class TestReportVisibility:

    @pytest.mark.asyncio
    async def test_organizer_lists_event_reports(self, db_session, facade, ids, report_id):
        reports = await facade.list_event_reports(db_session, ids["event"], ids["organizer"])
        assert [r.id for r in reports] == [report_id]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("who", ["other_organizer", "admin", "member", "other_member"])
    async def test_nobody_else_lists_event_reports(self, db_session, facade, ids, report_id, who):
        with pytest.raises(ForbiddenError):
            await facade.list_event_reports(db_session, ids["event"], ids[who])

    @pytest.mark.asyncio
    async def test_listing_unknown_event(self, db_session, facade, ids):
        with pytest.raises(NotFoundError):
            await facade.list_event_reports(db_session, 4242, ids["organizer"])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("who", ["member", "organizer"])
    async def test_submitter_and_organizer_read_a_report(self, db_session, facade, ids, report_id, who):
        report = await facade.get_report(db_session, report_id, ids[who])
        assert report.id == report_id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("who", ["other_member", "other_organizer", "admin"])
    async def test_others_cannot_read_a_report(self, db_session, facade, ids, report_id, who):
        with pytest.raises(ForbiddenError):
            await facade.get_report(db_session, report_id, ids[who])

    @pytest.mark.asyncio
    async def test_my_reports_only_lists_own(self, db_session, facade, ids, report_id):
        assert [r.id for r in await facade.list_my_reports(db_session, ids["member"])] == [report_id]
        assert await facade.list_my_reports(db_session, ids["other_member"]) == []

    @pytest.mark.asyncio
    async def test_purged_report_reads_as_not_found(
        self, db_session, facade, ids, report_id, session_factory, invitation_service, policy_store
    ):
        scheduler = RetentionPurgeScheduler(session_factory, invitation_service, policy_store)
        await scheduler.sweep_reports(NOW + timedelta(days=30))

        with pytest.raises(NotFoundError):
            await facade.get_report(db_session, report_id, ids["member"])


@pytest.mark.governance
class TestEvents:

    @pytest.mark.asyncio
    async def test_team_members_cannot_create_events(self, db_session, facade, ids):
        with pytest.raises(ForbiddenError):
            await facade.events.create_event(db_session, "Pop-up", NOW, ids["member"])

    @pytest.mark.asyncio
    async def test_retention_override_must_be_positive(self, db_session, facade, ids):
        with pytest.raises(InvalidPolicyError):
            await facade.events.create_event(db_session, "Pop-up", NOW, ids["organizer"], retention_days=0)

    @pytest.mark.asyncio
    async def test_organizer_staffs_own_event(self, db_session, facade, ids):
        shift = await facade.events.create_shift(
            db_session, ids["event"], "Backstage", [ids["member"], ids["other_member"]], ids["organizer"]
        )
        assert isinstance(shift, Shift)
        assert sorted(m.id for m in shift.members) == sorted([ids["member"], ids["other_member"]])

    @pytest.mark.asyncio
    async def test_other_organizer_cannot_staff(self, db_session, facade, ids):
        with pytest.raises(ForbiddenError):
            await facade.events.create_shift(db_session, ids["event"], "Backstage", [], ids["other_organizer"])

    @pytest.mark.asyncio
    async def test_unknown_members_are_rejected(self, db_session, facade, ids):
        with pytest.raises(NotFoundError):
            await facade.events.create_shift(db_session, ids["event"], "Backstage", [4242], ids["admin"])
