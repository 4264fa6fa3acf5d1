"""
SLA Application Services
=========================

Application services orchestrate the SLA clock over ticket snapshots
supplied by the ticket repository.

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions (repositories), not concrete implementations
"""

from abc import ABC, abstractmethod
from collections import Counter
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Set

from mantra.config import SLAClassification
from mantra.core import ConfigurationException, ResourceNotFoundException
from mantra.shared.infrastructure.logging import get_logger
from mantra.shared.timestamps import format_sla_time, parse_instant
from mantra.sla.application.dto import (
    DashboardResponse,
    DashboardSummary,
    SLAPreviewResponse,
    TicketSLAResponse,
)
from mantra.sla.domain import (
    HelpdeskRules,
    SLACalculator,
    SLAClock,
    SLASweepResult,
    TicketSLAStatus,
)
from mantra.tickets.application import ITicketRepository, TicketFilters, utc_now
from mantra.tickets.domain import TicketSnapshot

logger = get_logger(__name__)


# ========== Provider Interfaces (Dependency Inversion) ==========

class IRulesProvider(ABC):
    """Interface for helpdesk rules access."""

    @abstractmethod
    def get_rules(self) -> HelpdeskRules:
        """Get current helpdesk rules."""


# ========== Application Services ==========

def evaluate_ticket(ticket: TicketSnapshot, rules: HelpdeskRules, now: datetime) -> TicketSLAStatus:
    """Run the SLA clock for one snapshot and attach its priority badge."""
    reading = SLAClock.evaluate(ticket.status, ticket.sla_deadline, ticket.resolved_at, now)
    priority = None
    if ticket.urgency_sla_hours is not None:
        priority = rules.priority_for(ticket.urgency_sla_hours)
    return TicketSLAStatus(ticket=ticket, reading=reading, priority=priority)


def summarize(statuses: Iterable[TicketSLAStatus]) -> DashboardSummary:
    counts = Counter(s.classification for s in statuses)
    total = sum(counts.values())
    with_deadline = total - counts[SLAClassification.NOT_SET]
    missed = counts[SLAClassification.OVERDUE] + counts[SLAClassification.RESOLVED_LATE]
    return DashboardSummary(
        total_tickets=total,
        not_set_count=counts[SLAClassification.NOT_SET],
        on_track_count=counts[SLAClassification.ON_TRACK],
        overdue_count=counts[SLAClassification.OVERDUE],
        resolved_on_time_count=counts[SLAClassification.RESOLVED_ON_TIME],
        resolved_late_count=counts[SLAClassification.RESOLVED_LATE],
        breach_rate=round(missed / with_deadline * 100, 2) if with_deadline else 0.0,
    )


class SLAService:
    """
    Service for SLA readings and previews.

    Coordinates between domain logic and data access.
    """

    def __init__(
        self,
        ticket_repository: Optional[ITicketRepository],
        rules_provider: IRulesProvider,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._ticket_repo = ticket_repository
        self._rules_provider = rules_provider
        self._clock = clock

    @property
    def rules(self) -> HelpdeskRules:
        return self._rules_provider.get_rules()

    def _repository(self) -> ITicketRepository:
        if self._ticket_repo is None:
            raise ConfigurationException("Ticket repository not configured")
        return self._ticket_repo

    async def reading_for_ticket(self, ticket_id: str) -> TicketSLAResponse:
        """
        SLA reading for one ticket at the current instant.

        Raises:
            ResourceNotFoundException: if the ticket does not exist
            InvalidTimestampException: if the stored deadline is malformed
        """
        ticket = await self._repository().get_snapshot(ticket_id)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)

        rules = self.rules
        now = self._clock()
        status = evaluate_ticket(ticket, rules, now)
        return TicketSLAResponse.from_domain(status, now, rules.display_timezone)

    async def dashboard(
        self,
        filters: TicketFilters,
        classification: Optional[SLAClassification] = None,
    ) -> DashboardResponse:
        """
        SLA readings for every ticket matching ``filters``.

        The summary covers the matching tickets before the optional
        classification filter is applied.
        """
        rules = self.rules
        now = self._clock()
        tickets = await self._repository().list_snapshots(filters)
        statuses = [evaluate_ticket(t, rules, now) for t in tickets]

        summary = summarize(statuses)
        if classification is not None:
            statuses = [s for s in statuses if s.classification == classification]

        return DashboardResponse(
            tickets=[TicketSLAResponse.from_domain(s, now, rules.display_timezone) for s in statuses],
            total_count=len(statuses),
            summary=summary,
        )

    def preview(self, sla_hours: float, created_at: Optional[datetime] = None) -> SLAPreviewResponse:
        """Deadline and priority badge a ticket created now would get."""
        rules = self.rules
        start = parse_instant(created_at) if created_at is not None else self._clock()
        deadline = SLACalculator.calculate_deadline(start, sla_hours)
        return SLAPreviewResponse(
            sla_hours=sla_hours,
            priority=rules.priority_for(sla_hours),
            created_at=start,
            deadline=deadline,
            deadline_display=format_sla_time(deadline, rules.display_timezone),
        )


class SLAMonitor:
    """
    Periodic sweep over open tickets.

    Remembers which tickets were already overdue so each one is reported
    once when it crosses its deadline.
    """

    def __init__(self, rules_provider: IRulesProvider):
        self._rules_provider = rules_provider
        self._overdue: Set[str] = set()

    @property
    def overdue_ticket_ids(self) -> Set[str]:
        return set(self._overdue)

    def sweep(self, tickets: List[TicketSnapshot], now: datetime) -> SLASweepResult:
        rules = self._rules_provider.get_rules()
        result = SLASweepResult()
        overdue_now: Set[str] = set()

        for ticket in tickets:
            if not ticket.is_open:
                continue
            result.tickets_evaluated += 1
            status = evaluate_ticket(ticket, rules, now)
            if not status.reading.is_overdue:
                continue
            overdue_now.add(ticket.id)
            if ticket.id not in self._overdue:
                result.newly_overdue.append(ticket.id)
                logger.warning(
                    "Ticket is past its SLA deadline",
                    extra={
                        "ticket_id": ticket.id,
                        "display_id": ticket.display_id,
                        "priority": status.priority,
                        "assigned_to": ticket.assigned_to,
                        "sla_deadline": format_sla_time(ticket.sla_deadline, rules.display_timezone),
                    },
                )

        result.overdue = len(overdue_now)
        self._overdue = overdue_now
        logger.info("SLA sweep complete", extra=result.to_dict())
        return result

    async def run(self, ticket_repository: ITicketRepository, now: Optional[datetime] = None) -> SLASweepResult:
        tickets = await ticket_repository.list_snapshots(TicketFilters())
        return self.sweep(tickets, now or utc_now())
