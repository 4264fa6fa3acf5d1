"""
Reports Application DTOs
========================

Response models for the reports endpoints.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class CreatedClosedPointResponse(_FromDomain):
    date: str
    created: int
    closed: int


class SLABreachPointResponse(_FromDomain):
    date: str
    total: int
    breaches: int
    percentage: float


class CategoryCellResponse(_FromDomain):
    category: str
    count: int
    intensity: float


class AgentRowResponse(_FromDomain):
    agent_id: str
    agent_name: str
    new: int
    in_progress: int
    resolved: int
    closed: int
    total: int


class StatusCountResponse(_FromDomain):
    status: str
    count: int


class ReportsOverviewResponse(BaseModel):
    """All chart series of the reports page for one set of filters."""
    generated_at: datetime
    ticket_count: int
    tickets_created_vs_closed: List[CreatedClosedPointResponse]
    sla_breaches: List[SLABreachPointResponse]
    categories: List[CategoryCellResponse]
    agents: List[AgentRowResponse]


class StatusSummaryResponse(_FromDomain):
    """Ticket counts by status, for the past week and for all time."""
    weekly: List[StatusCountResponse]
    all_time: List[StatusCountResponse]
