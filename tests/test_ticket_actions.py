from unittest.mock import AsyncMock, call

import pytest

from mantra.config import TicketStatus
from mantra.core import (
    AuthenticationException,
    PermissionDeniedException,
    ResourceNotFoundException,
    ValidationException,
)
from mantra.tickets.application import (
    IAuditLogRepository,
    ICommentRepository,
    ITicketRepository,
    IUrgencyLevelRepository,
    IUserRepository,
    TicketActionService,
)
from mantra.tickets.domain import UrgencyLevel, UserSession
from mantra.timeline.domain import MarkedL3, Reassigned, StatusChanged, UnmarkedL3

from conftest import make_ticket, session_for, utc

NOW = utc(2024, 1, 1, 2, 0)


@pytest.fixture
def repos():
    tickets = AsyncMock(spec=ITicketRepository)
    tickets.get_snapshot.return_value = make_ticket()
    comments = AsyncMock(spec=ICommentRepository)
    audit = AsyncMock(spec=IAuditLogRepository)
    users = AsyncMock(spec=IUserRepository)
    users.exists.return_value = True
    urgencies = AsyncMock(spec=IUrgencyLevelRepository)
    urgencies.get.return_value = UrgencyLevel(id=1, label="Critical", sla_hours=4)
    return tickets, comments, audit, users, urgencies


@pytest.fixture
def service(repos):
    return TicketActionService(*repos, clock=lambda: NOW)


class TestCreateTicket:
    @pytest.mark.asyncio
    async def test_deadline_comes_from_urgency(self, service, repos):
        tickets = repos[0]
        tickets.create.return_value = "t-9"

        await service.create_ticket(session_for("u-creator", "user"), "Printer", "Jammed", 2, 1)

        tickets.create.assert_awaited_once_with(
            title="Printer",
            description="Jammed",
            category_id=2,
            urgency_id=1,
            created_by="u-creator",
            created_at=NOW,
            sla_deadline=utc(2024, 1, 1, 6, 0),
        )
        tickets.get_snapshot.assert_awaited_with("t-9")

    @pytest.mark.asyncio
    async def test_unknown_urgency(self, service, repos):
        repos[4].get.return_value = None

        with pytest.raises(ResourceNotFoundException):
            await service.create_ticket(session_for("u-1"), "Printer", "Jammed", 2, 99)
        repos[0].create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_requires_signed_in_user(self, service):
        with pytest.raises(AuthenticationException):
            await service.create_ticket(UserSession(), "Printer", "Jammed", 2, 1)


class TestChangeStatus:
    @pytest.mark.asyncio
    async def test_resolving_writes_status_comment_and_audit(self, service, repos):
        tickets, comments, audit, _, _ = repos

        await service.change_status(session_for("u-agent"), "t-1", "resolved", "  Fixed the tunnel  ")

        tickets.update_status.assert_awaited_once_with("t-1", TicketStatus.RESOLVED, resolved_at=NOW)
        comments.add.assert_awaited_once_with("t-1", "Fixed the tunnel", "u-agent", NOW)
        audit.add.assert_awaited_once_with(
            "t-1",
            StatusChanged(old_status="in_progress", new_status="resolved"),
            "u-agent",
            NOW,
        )

    @pytest.mark.asyncio
    async def test_other_moves_leave_resolved_at_alone(self, service, repos):
        await service.change_status(session_for("u-agent"), "t-1", "closed", "Done")

        repos[0].update_status.assert_awaited_once_with("t-1", TicketStatus.CLOSED, resolved_at=None)

    @pytest.mark.asyncio
    async def test_lead_may_change_any_ticket(self, service, repos):
        await service.change_status(session_for("u-lead", "lead"), "t-1", "new", "Reopen")

        repos[0].update_status.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unrelated_agent_is_denied(self, service, repos):
        with pytest.raises(PermissionDeniedException):
            await service.change_status(session_for("u-other"), "t-1", "resolved", "Fixed")

        repos[0].update_status.assert_not_awaited()
        repos[1].add.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_same_status_rejected(self, service):
        with pytest.raises(ValidationException):
            await service.change_status(session_for("u-agent"), "t-1", "in_progress", "Still going")

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(self, service):
        with pytest.raises(ValidationException):
            await service.change_status(session_for("u-agent"), "t-1", "parked", "Later")

    @pytest.mark.asyncio
    async def test_blank_comment_rejected(self, service, repos):
        with pytest.raises(ValidationException, match="comment is required"):
            await service.change_status(session_for("u-agent"), "t-1", "resolved", "   ")

        repos[0].update_status.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_ticket(self, service, repos):
        repos[0].get_snapshot.return_value = None

        with pytest.raises(ResourceNotFoundException):
            await service.change_status(session_for("u-agent"), "t-404", "resolved", "Fixed")


class TestReassign:
    @pytest.mark.asyncio
    async def test_records_old_and_new_assignee(self, service, repos):
        tickets, comments, audit, users, _ = repos

        await service.reassign(session_for("u-lead", "lead"), "t-1", "u-new", "Handing over")

        users.exists.assert_awaited_once_with("u-new")
        comments.add.assert_awaited_once_with("t-1", "Handing over", "u-lead", NOW)
        tickets.set_assignee.assert_awaited_once_with("t-1", "u-new")
        audit.add.assert_awaited_once_with(
            "t-1", Reassigned(new_assignee="u-new", old_assignee="u-agent"), "u-lead", NOW
        )

    @pytest.mark.asyncio
    async def test_unassign_skips_user_lookup(self, service, repos):
        await service.reassign(session_for("u-lead", "lead"), "t-1", None, "Back to the queue")

        repos[3].exists.assert_not_awaited()
        repos[0].set_assignee.assert_awaited_once_with("t-1", None)

    @pytest.mark.asyncio
    async def test_unknown_assignee(self, service, repos):
        repos[3].exists.return_value = False

        with pytest.raises(ResourceNotFoundException):
            await service.reassign(session_for("u-lead", "lead"), "t-1", "u-ghost", "Handing over")
        repos[0].set_assignee.assert_not_awaited()


class TestToggleL3:
    @pytest.mark.asyncio
    async def test_escalates_unflagged_ticket(self, service, repos):
        tickets, comments, audit, _, _ = repos

        await service.toggle_l3(session_for("u-agent"), "t-1", "Needs network team")

        tickets.set_l3.assert_awaited_once_with("t-1", True)
        comments.add.assert_awaited_once_with("t-1", "Needs network team", "u-agent", NOW)
        audit.add.assert_awaited_once_with("t-1", MarkedL3(), "u-agent", NOW)

    @pytest.mark.asyncio
    async def test_de_escalates_flagged_ticket(self, service, repos):
        repos[0].get_snapshot.return_value = make_ticket(is_l3=True)

        await service.toggle_l3(session_for("u-agent"), "t-1", "Handled at L2")

        repos[0].set_l3.assert_awaited_once_with("t-1", False)
        repos[2].add.assert_awaited_once_with("t-1", UnmarkedL3(), "u-agent", NOW)


@pytest.mark.asyncio
async def test_list_urgency_levels(service, repos):
    repos[4].list.return_value = [UrgencyLevel(id=1, label="Critical", sla_hours=4)]

    assert [u.label for u in await service.list_urgency_levels()] == ["Critical"]


class TestAddComment:
    @pytest.mark.asyncio
    async def test_adds_trimmed_comment(self, service, repos):
        await service.add_comment(session_for("u-creator", "user"), "t-1", " Any update? ")

        assert repos[1].add.await_args == call("t-1", "Any update?", "u-creator", NOW)
        repos[2].add.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_anonymous_cannot_comment(self, service, repos):
        with pytest.raises(AuthenticationException):
            await service.add_comment(UserSession(), "t-1", "Hello")
        repos[1].add.assert_not_awaited()
