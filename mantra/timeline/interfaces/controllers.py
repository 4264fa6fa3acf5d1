"""
Timeline Controllers (API Routes)
=================================

FastAPI route for the ticket activity timeline.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mantra.infrastructure.database import get_session
from mantra.shared.api.dependencies import get_rules_provider, get_user_session
from mantra.sla.application import IRulesProvider
from mantra.tickets.domain import UserSession
from mantra.tickets.infrastructure import (
    SQLAlchemyAuditLogRepository,
    SQLAlchemyCommentRepository,
    SQLAlchemyTicketRepository,
    SQLAlchemyUserRepository,
)
from mantra.timeline.application import TimelineResponse, TimelineService

router = APIRouter(prefix="/tickets", tags=["Timeline"])


# ========== Dependencies ==========

async def get_timeline_service(
    session: AsyncSession = Depends(get_session),
    rules_provider: IRulesProvider = Depends(get_rules_provider),
) -> TimelineService:
    return TimelineService(
        SQLAlchemyTicketRepository(session, rules_provider.get_rules().display_timezone),
        SQLAlchemyCommentRepository(session),
        SQLAlchemyAuditLogRepository(session),
        SQLAlchemyUserRepository(session),
        rules_provider,
    )


# ========== Route Handlers ==========

@router.get(
    "/{ticket_id}/timeline",
    response_model=TimelineResponse,
    summary="Ticket activity timeline",
    responses={404: {"description": "Ticket not found"}},
)
async def get_timeline(
    ticket_id: str,
    user_session: UserSession = Depends(get_user_session),
    service: TimelineService = Depends(get_timeline_service),
):
    """
    Comments and audit entries of the ticket, newest first.

    A comment written together with a status change, reassignment or L3
    toggle by the same person is folded into that audit entry.
    """
    return await service.get_timeline(ticket_id, user_session)


timeline_router = router
