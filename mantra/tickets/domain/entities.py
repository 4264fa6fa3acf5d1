"""
Ticket Domain Entities
======================

Read-only views of rows owned by the data store.

The service never edits these in place: actions go through the repository
and a fresh snapshot is read back afterwards.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from mantra.config import CLOSED_STATUSES


@dataclass(frozen=True)
class TicketSnapshot:
    """A ticket joined with the display names of its related rows."""

    id: str
    display_id: str
    title: str
    description: str
    status: Optional[str]
    created_at: Optional[datetime]
    resolved_at: Optional[datetime] = None
    sla_deadline: Optional[datetime] = None
    is_l3: bool = False
    created_by: Optional[str] = None
    assigned_to: Optional[str] = None
    category_id: Optional[int] = None
    urgency_id: Optional[int] = None

    # Joined display data
    creator_name: Optional[str] = None
    assignee_name: Optional[str] = None
    category_name: Optional[str] = None
    urgency_label: Optional[str] = None
    urgency_sla_hours: Optional[float] = None

    @property
    def is_resolved(self) -> bool:
        return self.status in {s.value for s in CLOSED_STATUSES}

    @property
    def is_open(self) -> bool:
        return not self.is_resolved


@dataclass(frozen=True)
class UrgencyLevel:
    """Row of the `urgency_levels` table."""

    id: int
    label: Optional[str]
    sla_hours: float

