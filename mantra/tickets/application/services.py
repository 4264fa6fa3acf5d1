"""
Ticket Application Services
===========================

Repository interfaces for the data store and the service that performs
ticket actions on behalf of a session.

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions (repositories), not concrete implementations
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from mantra.config import TicketStatus
from mantra.core import (
    PermissionDeniedException,
    ResourceNotFoundException,
    ValidationException,
)
from mantra.shared.infrastructure.logging import get_logger
from mantra.sla.domain import SLACalculator
from mantra.tickets.application.dto import TicketFilters
from mantra.tickets.domain import (
    TicketSnapshot,
    UrgencyLevel,
    UserSession,
    can_reassign,
    can_toggle_l3,
    can_update_status,
)
from mantra.timeline.domain import (
    AuditAction,
    AuditLogEntry,
    Comment,
    MarkedL3,
    Reassigned,
    StatusChanged,
    UnmarkedL3,
)

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ========== Repository Interfaces (Dependency Inversion) ==========

class ITicketRepository(ABC):
    """Interface for ticket data access."""

    @abstractmethod
    async def get_snapshot(self, ticket_id: str) -> Optional[TicketSnapshot]:
        """Get a ticket with its joined display names."""

    @abstractmethod
    async def list_snapshots(self, filters: TicketFilters) -> List[TicketSnapshot]:
        """List tickets matching filters, newest first."""

    @abstractmethod
    async def create(
        self,
        title: str,
        description: str,
        category_id: int,
        urgency_id: int,
        created_by: str,
        created_at: datetime,
        sla_deadline: datetime,
    ) -> str:
        """Insert a ticket and return its id."""

    @abstractmethod
    async def update_status(
        self,
        ticket_id: str,
        status: TicketStatus,
        resolved_at: Optional[datetime] = None,
    ) -> None:
        """Set the status; ``resolved_at`` is only written when given."""

    @abstractmethod
    async def set_assignee(self, ticket_id: str, assignee_id: Optional[str]) -> None:
        """Assign the ticket, or unassign it with None."""

    @abstractmethod
    async def set_l3(self, ticket_id: str, is_l3: bool) -> None:
        """Set the L3 escalation flag."""


class ICommentRepository(ABC):
    """Interface for ticket comment data access."""

    @abstractmethod
    async def list_for_ticket(self, ticket_id: str) -> List[Comment]:
        """Comments of a ticket, oldest first."""

    @abstractmethod
    async def add(self, ticket_id: str, body: str, comment_by: str, created_at: datetime) -> Comment:
        """Insert a comment."""


class IAuditLogRepository(ABC):
    """Interface for audit log data access."""

    @abstractmethod
    async def list_for_ticket(self, ticket_id: str) -> List[AuditLogEntry]:
        """Audit entries of a ticket, oldest first."""

    @abstractmethod
    async def add(
        self,
        ticket_id: str,
        action: AuditAction,
        changed_by: str,
        timestamp: datetime,
    ) -> AuditLogEntry:
        """Insert an audit entry."""


class IUserRepository(ABC):
    """Interface for user lookups."""

    @abstractmethod
    async def get_names(self, user_ids: Iterable[str]) -> Dict[str, str]:
        """Map of user id to display name for the given ids."""

    @abstractmethod
    async def exists(self, user_id: str) -> bool:
        """Whether a user with this id exists."""


class IUrgencyLevelRepository(ABC):
    """Interface for urgency level lookups."""

    @abstractmethod
    async def get(self, urgency_id: int) -> Optional[UrgencyLevel]:
        """Get an urgency level by id."""

    @abstractmethod
    async def list(self) -> List[UrgencyLevel]:
        """All urgency levels, ordered by id."""


# ========== Application Services ==========

class TicketActionService:
    """
    Performs ticket actions for a session.

    Each action writes its comment and its audit entry as separate rows, the
    way the web client does; the timeline folds them back together.
    """

    def __init__(
        self,
        ticket_repository: ITicketRepository,
        comment_repository: ICommentRepository,
        audit_repository: IAuditLogRepository,
        user_repository: IUserRepository,
        urgency_repository: IUrgencyLevelRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._tickets = ticket_repository
        self._comments = comment_repository
        self._audit = audit_repository
        self._users = user_repository
        self._urgencies = urgency_repository
        self._clock = clock

    async def list_urgency_levels(self) -> List[UrgencyLevel]:
        """Urgency levels offered when opening a ticket, in id order."""
        return await self._urgencies.list()

    async def get_ticket(self, ticket_id: str) -> TicketSnapshot:
        ticket = await self._tickets.get_snapshot(ticket_id)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        return ticket

    async def create_ticket(
        self,
        session: UserSession,
        title: str,
        description: str,
        category_id: int,
        urgency_id: int,
    ) -> TicketSnapshot:
        """Open a new ticket with its SLA deadline derived from the urgency level."""
        user_id = session.require_user()
        urgency = await self._urgencies.get(urgency_id)
        if urgency is None:
            raise ResourceNotFoundException("Urgency level", str(urgency_id))

        now = self._clock()
        ticket_id = await self._tickets.create(
            title=title,
            description=description,
            category_id=category_id,
            urgency_id=urgency_id,
            created_by=user_id,
            created_at=now,
            sla_deadline=SLACalculator.calculate_deadline(now, urgency.sla_hours),
        )
        logger.info("Ticket created", extra={"ticket_id": ticket_id, "urgency_id": urgency_id})
        return await self.get_ticket(ticket_id)

    async def change_status(
        self,
        session: UserSession,
        ticket_id: str,
        new_status: str,
        comment: str,
    ) -> TicketSnapshot:
        """
        Move a ticket to ``new_status`` with an explanatory comment.

        Resolving stamps ``resolved_at``; other moves leave it as stored.
        """
        user_id = session.require_user()
        ticket = await self.get_ticket(ticket_id)
        if not can_update_status(session, ticket):
            raise PermissionDeniedException(
                "Only admins, leads, the assignee or the creator may change status",
                {"ticket_id": ticket_id},
            )

        try:
            target = TicketStatus(new_status)
        except ValueError as exc:
            raise ValidationException(f"Unknown status: {new_status}") from exc
        if target.value == ticket.status:
            raise ValidationException("Ticket already has this status", {"status": target.value})
        body = self._require_comment(comment)

        now = self._clock()
        await self._tickets.update_status(
            ticket_id,
            target,
            resolved_at=now if target == TicketStatus.RESOLVED else None,
        )
        await self._comments.add(ticket_id, body, user_id, now)
        await self._audit.add(
            ticket_id,
            StatusChanged(old_status=ticket.status, new_status=target.value),
            user_id,
            now,
        )
        logger.info(
            "Ticket status changed",
            extra={"ticket_id": ticket_id, "old_status": ticket.status, "new_status": target.value},
        )
        return await self.get_ticket(ticket_id)

    async def reassign(
        self,
        session: UserSession,
        ticket_id: str,
        assignee_id: Optional[str],
        comment: str,
    ) -> TicketSnapshot:
        user_id = session.require_user()
        if not can_reassign(session):
            raise PermissionDeniedException("Reassigning requires a role")
        ticket = await self.get_ticket(ticket_id)
        if assignee_id is not None and not await self._users.exists(assignee_id):
            raise ResourceNotFoundException("User", assignee_id)
        body = self._require_comment(comment)

        now = self._clock()
        await self._comments.add(ticket_id, body, user_id, now)
        await self._tickets.set_assignee(ticket_id, assignee_id)
        await self._audit.add(
            ticket_id,
            Reassigned(new_assignee=assignee_id, old_assignee=ticket.assigned_to),
            user_id,
            now,
        )
        logger.info("Ticket reassigned", extra={"ticket_id": ticket_id, "assignee_id": assignee_id})
        return await self.get_ticket(ticket_id)

    async def toggle_l3(self, session: UserSession, ticket_id: str, comment: str) -> TicketSnapshot:
        """Flip the L3 escalation flag."""
        user_id = session.require_user()
        if not can_toggle_l3(session):
            raise PermissionDeniedException("L3 escalation requires a role")
        ticket = await self.get_ticket(ticket_id)
        body = self._require_comment(comment)

        escalate = not ticket.is_l3
        now = self._clock()
        await self._tickets.set_l3(ticket_id, escalate)
        await self._comments.add(ticket_id, body, user_id, now)
        await self._audit.add(ticket_id, MarkedL3() if escalate else UnmarkedL3(), user_id, now)
        logger.info("Ticket L3 flag changed", extra={"ticket_id": ticket_id, "is_l3": escalate})
        return await self.get_ticket(ticket_id)

    async def add_comment(self, session: UserSession, ticket_id: str, body: str) -> Comment:
        user_id = session.require_user()
        await self.get_ticket(ticket_id)
        return await self._comments.add(ticket_id, self._require_comment(body), user_id, self._clock())

    @staticmethod
    def _require_comment(comment: str) -> str:
        body = (comment or "").strip()
        if not body:
            raise ValidationException("A comment is required")
        return body
