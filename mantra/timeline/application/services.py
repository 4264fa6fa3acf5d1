"""
Timeline Application Services
=============================

Loads a ticket's comments and audit entries and reconciles them into
the activity timeline.
"""

from typing import Iterable, Set

from mantra.core import ResourceNotFoundException
from mantra.shared.infrastructure.logging import get_logger, log_latency
from mantra.sla.application import IRulesProvider
from mantra.tickets.application import (
    IAuditLogRepository,
    ICommentRepository,
    ITicketRepository,
    IUserRepository,
)
from mantra.tickets.domain import (
    UserSession,
    can_reassign,
    can_toggle_l3,
    can_update_status,
)
from mantra.timeline.application.dto import (
    TimelineItemResponse,
    TimelinePermissions,
    TimelineResponse,
)
from mantra.timeline.domain import AuditLogEntry, Comment, Reassigned, TimelineReconciler

logger = get_logger(__name__)


def referenced_user_ids(audit_entries: Iterable[AuditLogEntry], comments: Iterable[Comment]) -> Set[str]:
    """Every user id a timeline needs a display name for."""
    ids: Set[str] = set()
    for entry in audit_entries:
        if entry.changed_by:
            ids.add(entry.changed_by)
        if isinstance(entry.action, Reassigned) and entry.action.new_assignee:
            ids.add(entry.action.new_assignee)
    for comment in comments:
        if comment.comment_by:
            ids.add(comment.comment_by)
    return ids


class TimelineService:
    """Builds the activity timeline of a ticket for a session."""

    def __init__(
        self,
        ticket_repository: ITicketRepository,
        comment_repository: ICommentRepository,
        audit_repository: IAuditLogRepository,
        user_repository: IUserRepository,
        rules_provider: IRulesProvider,
    ):
        self._tickets = ticket_repository
        self._comments = comment_repository
        self._audit = audit_repository
        self._users = user_repository
        self._rules_provider = rules_provider

    async def get_timeline(self, ticket_id: str, session: UserSession) -> TimelineResponse:
        ticket = await self._tickets.get_snapshot(ticket_id)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)

        comments = await self._comments.list_for_ticket(ticket_id)
        audit_entries = await self._audit.list_for_ticket(ticket_id)
        user_names = await self._users.get_names(referenced_user_ids(audit_entries, comments))

        rules = self._rules_provider.get_rules()
        reconciler = TimelineReconciler(merge_window=rules.comment_merge_window)
        with log_latency(logger, "timeline_reconcile", ticket_id=ticket_id):
            items = reconciler.reconcile(audit_entries, comments, user_names)

        return TimelineResponse(
            ticket_id=ticket.id,
            display_id=ticket.display_id,
            items=[TimelineItemResponse.from_domain(item, rules.display_timezone) for item in items],
            permissions=TimelinePermissions(
                can_update_status=can_update_status(session, ticket),
                can_reassign=can_reassign(session),
                can_toggle_l3=can_toggle_l3(session),
                can_comment=session.is_authenticated,
            ),
        )
