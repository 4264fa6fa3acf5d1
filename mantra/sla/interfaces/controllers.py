"""
SLA Controllers (API Routes)
=============================

FastAPI routes for SLA readings.

Controllers are thin - they delegate to application services.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mantra.config import SLAClassification
from mantra.infrastructure.database import get_session
from mantra.shared.api.dependencies import get_rules_provider, get_ticket_filters
from mantra.shared.infrastructure.logging import get_logger, log_latency
from mantra.sla.application import (
    DashboardResponse,
    IRulesProvider,
    SLAPreviewResponse,
    SLAService,
    TicketSLAResponse,
)
from mantra.tickets.application import TicketFilters
from mantra.tickets.infrastructure import SQLAlchemyTicketRepository

logger = get_logger(__name__)
router = APIRouter(prefix="/sla", tags=["SLA"])

# One hundred years
MAX_PREVIEW_SLA_HOURS = 24 * 366 * 100


# ========== Example payloads for Swagger ==========

TICKET_SLA_RESPONSE_EXAMPLE = {
    "ticket_id": "8d6f3c1e-4f0a-4b57-9d55-0c3e5f1a2b7c",
    "display_id": "IT-0042",
    "title": "VPN drops every hour",
    "status": "in_progress",
    "priority": "P1",
    "assignee_name": "Asha Rao",
    "evaluated_at": "2024-01-01T02:30:00Z",
    "sla": {
        "classification": "on_track",
        "label": "1h 30m",
        "deadline": "2024-01-01T04:00:00Z",
        "deadline_display": "Jan 1, 2024 at 9:30 AM IST",
        "countdown": "1h 30m",
        "remaining_seconds": 5400.0
    }
}


# ========== Dependencies ==========

async def get_sla_service(
    session: AsyncSession = Depends(get_session),
    rules_provider: IRulesProvider = Depends(get_rules_provider),
) -> SLAService:
    """Get SLA service instance."""
    tz_name = rules_provider.get_rules().display_timezone
    return SLAService(SQLAlchemyTicketRepository(session, tz_name), rules_provider)


# ========== Route Handlers ==========

@router.get(
    "/tickets/{ticket_id}",
    response_model=TicketSLAResponse,
    summary="Get SLA status for a ticket",
    responses={
        200: {"content": {"application/json": {"example": TICKET_SLA_RESPONSE_EXAMPLE}}},
        404: {"description": "Ticket not found"},
    },
)
async def get_ticket_sla(
    ticket_id: str,
    service: SLAService = Depends(get_sla_service),
):
    """
    Classify the ticket's SLA at the current instant.

    Open tickets carry a countdown such as `1d 1h 0m`; overdue and resolved
    tickets carry their classification label instead.
    """
    return await service.reading_for_ticket(ticket_id)


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="SLA dashboard",
)
async def get_dashboard(
    classification: Optional[SLAClassification] = Query(None, description="Only tickets in this SLA state"),
    filters: TicketFilters = Depends(get_ticket_filters),
    service: SLAService = Depends(get_sla_service),
):
    """SLA readings for all matching tickets, with per-classification counts."""
    with log_latency(logger, "sla_dashboard", classification=classification.value if classification else None):
        return await service.dashboard(filters, classification)


@router.get(
    "/preview",
    response_model=SLAPreviewResponse,
    summary="Preview deadline and priority for an SLA window",
)
async def preview_sla(
    sla_hours: float = Query(
        ..., ge=0, le=MAX_PREVIEW_SLA_HOURS, description="SLA window of the urgency level, in hours"
    ),
    created_at: Optional[datetime] = Query(None, description="Creation instant; defaults to now"),
    rules_provider: IRulesProvider = Depends(get_rules_provider),
):
    return SLAService(None, rules_provider).preview(sla_hours, created_at)


sla_router = router
