"""
SLA Application DTOs
=====================

Data Transfer Objects for SLA API layer.

These Pydantic models handle serialization for API responses.
Following YAGNI - only what's needed.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from mantra.shared.timestamps import format_sla_time
from mantra.sla.domain import SLAReading, TicketSLAStatus

# ========== Type Aliases for Literals ==========
SLAClassificationStr = Literal["not_set", "on_track", "overdue", "resolved_on_time", "resolved_late"]


# ========== Response DTOs ==========

class SLAReadingResponse(BaseModel):
    """SLA clock output for one ticket."""
    classification: SLAClassificationStr
    label: str = Field(..., description="Countdown while on track, otherwise the classification text")
    deadline: Optional[datetime] = None
    deadline_display: str = Field(..., description="Deadline in the display timezone")
    countdown: Optional[str] = None
    remaining_seconds: Optional[float] = None

    @classmethod
    def from_domain(cls, reading: SLAReading, tz_name: str) -> "SLAReadingResponse":
        return cls(
            classification=reading.classification.value,
            label=reading.label,
            deadline=reading.deadline,
            deadline_display=format_sla_time(reading.deadline, tz_name),
            countdown=reading.countdown,
            remaining_seconds=reading.remaining_seconds,
        )


class TicketSLAResponse(BaseModel):
    """SLA status of a single ticket."""
    ticket_id: str
    display_id: str
    title: str
    status: Optional[str]
    priority: Optional[str] = Field(None, description="Priority badge derived from the urgency SLA hours")
    assignee_name: Optional[str] = None
    evaluated_at: datetime
    sla: SLAReadingResponse

    @classmethod
    def from_domain(cls, status: TicketSLAStatus, evaluated_at: datetime, tz_name: str) -> "TicketSLAResponse":
        return cls(
            ticket_id=status.ticket.id,
            display_id=status.ticket.display_id,
            title=status.ticket.title,
            status=status.ticket.status,
            priority=status.priority,
            assignee_name=status.ticket.assignee_name,
            evaluated_at=evaluated_at,
            sla=SLAReadingResponse.from_domain(status.reading, tz_name),
        )


class DashboardSummary(BaseModel):
    """Summary statistics for dashboard."""
    total_tickets: int = 0
    not_set_count: int = 0
    on_track_count: int = 0
    overdue_count: int = 0
    resolved_on_time_count: int = 0
    resolved_late_count: int = 0
    breach_rate: float = Field(0.0, description="Share of tickets with a deadline that missed it, 0-100")


class DashboardResponse(BaseModel):
    """Response for dashboard endpoint."""
    tickets: List[TicketSLAResponse]
    total_count: int
    summary: DashboardSummary


class SLAPreviewResponse(BaseModel):
    """Deadline and priority a new ticket would get."""
    sla_hours: float
    priority: str
    created_at: datetime
    deadline: datetime
    deadline_display: str
