"""
Report Aggregations
===================

Pure functions turning ticket snapshots into chart series.

Days are calendar days in the display timezone. Series that are keyed by
day come back in ascending date order; the others keep first-seen order.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from mantra.config import TicketStatus
from mantra.shared.timestamps import parse_instant, to_date_key
from mantra.sla.domain import SLACalculator
from mantra.tickets.domain import TicketSnapshot

UNCATEGORIZED = "Uncategorized"
UNKNOWN_STATUS = "unknown"
SUMMARY_WINDOW = timedelta(days=7)


@dataclass
class CreatedClosedPoint:
    date: str
    created: int = 0
    closed: int = 0


@dataclass
class SLABreachPoint:
    date: str
    total: int = 0
    breaches: int = 0

    @property
    def percentage(self) -> float:
        return self.breaches / self.total * 100 if self.total else 0.0


@dataclass
class CategoryCell:
    category: str
    count: int
    intensity: float


@dataclass
class AgentRow:
    agent_id: str
    agent_name: str
    new: int = 0
    in_progress: int = 0
    resolved: int = 0
    closed: int = 0
    total: int = 0

    def count(self, status: Optional[str]) -> None:
        self.total += 1
        if status == TicketStatus.NEW.value:
            self.new += 1
        elif status == TicketStatus.IN_PROGRESS.value:
            self.in_progress += 1
        elif status == TicketStatus.RESOLVED.value:
            self.resolved += 1
        elif status == TicketStatus.CLOSED.value:
            self.closed += 1


@dataclass
class StatusCount:
    status: str
    count: int


@dataclass
class StatusSummary:
    weekly: List[StatusCount] = field(default_factory=list)
    all_time: List[StatusCount] = field(default_factory=list)


def tickets_created_vs_closed(tickets: Iterable[TicketSnapshot], tz_name: str) -> List[CreatedClosedPoint]:
    """
    Tickets created per day, next to tickets closed per day.

    A ticket counts as closed on the day of its ``resolved_at`` once its
    status is ``closed``; resolved-but-not-closed tickets are not counted.
    """
    points: Dict[str, CreatedClosedPoint] = {}

    def point(day: str) -> CreatedClosedPoint:
        if day not in points:
            points[day] = CreatedClosedPoint(date=day)
        return points[day]

    for ticket in tickets:
        if ticket.created_at is not None:
            point(to_date_key(ticket.created_at, tz_name)).created += 1
        if ticket.status == TicketStatus.CLOSED.value and ticket.resolved_at is not None:
            point(to_date_key(ticket.resolved_at, tz_name)).closed += 1

    return [points[day] for day in sorted(points)]


def sla_breaches_by_day(
    tickets: Iterable[TicketSnapshot],
    now: datetime,
    tz_name: str,
) -> List[SLABreachPoint]:
    """
    Per creation day: tickets created and how many missed their deadline.

    Resolved tickets breach when resolved after the deadline; unresolved
    ones when ``now`` is past it. Tickets without a deadline never breach.
    """
    points: Dict[str, SLABreachPoint] = {}
    for ticket in tickets:
        if ticket.created_at is None:
            continue
        day = to_date_key(ticket.created_at, tz_name)
        entry = points.setdefault(day, SLABreachPoint(date=day))
        entry.total += 1
        if SLACalculator.is_breached(ticket.sla_deadline, ticket.resolved_at, now):
            entry.breaches += 1
    return [points[day] for day in sorted(points)]


def category_heatmap(tickets: Iterable[TicketSnapshot]) -> List[CategoryCell]:
    """Tickets per category, with intensity relative to the busiest one."""
    counts = Counter(ticket.category_name or UNCATEGORIZED for ticket in tickets)
    if not counts:
        return []
    busiest = max(counts.values())
    return [
        CategoryCell(category=name, count=count, intensity=count / busiest * 100)
        for name, count in counts.items()
    ]


def agent_report(tickets: Iterable[TicketSnapshot]) -> List[AgentRow]:
    """
    Ticket counts by status per agent.

    Creators are listed even when nothing is assigned to them; only
    assigned tickets are counted.
    """
    rows: Dict[str, AgentRow] = {}
    for ticket in tickets:
        if ticket.created_by and ticket.creator_name is not None:
            rows.setdefault(ticket.created_by, AgentRow(ticket.created_by, ticket.creator_name))
        if ticket.assigned_to and ticket.assignee_name is not None:
            row = rows.setdefault(ticket.assigned_to, AgentRow(ticket.assigned_to, ticket.assignee_name))
            row.count(ticket.status)
    return list(rows.values())


def status_summary(tickets: Iterable[TicketSnapshot], now: datetime) -> StatusSummary:
    """Status counts for tickets created in the past week and for all time."""
    since = parse_instant(now) - SUMMARY_WINDOW
    weekly: Counter = Counter()
    all_time: Counter = Counter()
    for ticket in tickets:
        status = ticket.status or UNKNOWN_STATUS
        all_time[status] += 1
        if ticket.created_at is not None and ticket.created_at >= since:
            weekly[status] += 1
    return StatusSummary(
        weekly=[StatusCount(status, count) for status, count in weekly.items()],
        all_time=[StatusCount(status, count) for status, count in all_time.items()],
    )
