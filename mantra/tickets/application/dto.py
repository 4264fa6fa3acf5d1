"""
Ticket Application DTOs
=======================

Pydantic models for ticket requests, responses and query filters.
"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from mantra.tickets.domain import TicketSnapshot, UrgencyLevel

# ========== Type Aliases for Literals ==========
TicketStatusStr = Literal["new", "in_progress", "resolved", "closed"]
AgentScopeStr = Literal["assigned", "involved"]
AssignmentStr = Literal["assigned", "unassigned", "mine"]


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


# ========== Query DTOs ==========

class TicketFilters(BaseModel):
    """Filters shared by the dashboard, reports and export."""
    status: Optional[TicketStatusStr] = None
    category_id: Optional[int] = None
    urgency_id: Optional[int] = None
    agent_id: Optional[str] = None
    agent_scope: AgentScopeStr = Field(
        default="involved",
        description="'assigned' matches the assignee only, 'involved' also matches the creator"
    )
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    search: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Case-insensitive text matched against title, description, display id, people, category and status"
    )
    is_l3: Optional[bool] = None
    assignment: Optional[AssignmentStr] = Field(
        default=None,
        description="'mine' matches tickets the viewer created or is assigned"
    )
    viewer_id: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1, le=10000)
    offset: int = Field(default=0, ge=0)

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def validate_date_range(self) -> "TicketFilters":
        if self.date_from and self.date_to and self.date_to < self.date_from:
            raise ValueError("date_to cannot be before date_from")
        return self


# ========== Request DTOs ==========

class CreateTicketRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1)
    category_id: int
    urgency_id: int

    @field_validator("title", "description")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _strip_required(v)


class StatusChangeRequest(BaseModel):
    status: TicketStatusStr
    comment: str

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v: str) -> str:
        return _strip_required(v)


class ReassignRequest(BaseModel):
    assignee_id: Optional[str] = Field(None, description="New assignee; null unassigns")
    comment: str

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v: str) -> str:
        return _strip_required(v)


class L3ToggleRequest(BaseModel):
    comment: str

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v: str) -> str:
        return _strip_required(v)


class CommentCreateRequest(BaseModel):
    body: str

    @field_validator("body")
    @classmethod
    def validate_body(cls, v: str) -> str:
        return _strip_required(v)


# ========== Response DTOs ==========

class TicketResponse(BaseModel):
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
    creator_name: Optional[str] = None
    assignee_name: Optional[str] = None
    category_name: Optional[str] = None
    urgency_label: Optional[str] = None
    urgency_sla_hours: Optional[float] = None

    @classmethod
    def from_domain(cls, ticket: TicketSnapshot) -> "TicketResponse":
        return cls(
            id=ticket.id,
            display_id=ticket.display_id,
            title=ticket.title,
            description=ticket.description,
            status=ticket.status,
            created_at=ticket.created_at,
            resolved_at=ticket.resolved_at,
            sla_deadline=ticket.sla_deadline,
            is_l3=ticket.is_l3,
            created_by=ticket.created_by,
            assigned_to=ticket.assigned_to,
            creator_name=ticket.creator_name,
            assignee_name=ticket.assignee_name,
            category_name=ticket.category_name,
            urgency_label=ticket.urgency_label,
            urgency_sla_hours=ticket.urgency_sla_hours,
        )


class CommentResponse(BaseModel):
    id: str
    ticket_id: Optional[str]
    body: str
    comment_by: Optional[str]
    created_at: Optional[datetime]


class UrgencyLevelResponse(BaseModel):
    id: int
    label: Optional[str]
    sla_hours: float

    @classmethod
    def from_domain(cls, urgency: UrgencyLevel) -> "UrgencyLevelResponse":
        return cls(id=urgency.id, label=urgency.label, sla_hours=urgency.sla_hours)
