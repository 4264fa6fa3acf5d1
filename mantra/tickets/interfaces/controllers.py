"""
Ticket Controllers (API Routes)
===============================

FastAPI routes for ticket actions.

Controllers are thin - they delegate to application services. The acting
user comes from the request session.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from mantra.infrastructure.database import get_session
from mantra.shared.api.dependencies import get_user_session
from mantra.tickets.application import (
    CommentCreateRequest,
    CommentResponse,
    CreateTicketRequest,
    L3ToggleRequest,
    ReassignRequest,
    StatusChangeRequest,
    TicketActionService,
    TicketResponse,
    UrgencyLevelResponse,
)
from mantra.tickets.domain import UserSession
from mantra.tickets.infrastructure import (
    SQLAlchemyAuditLogRepository,
    SQLAlchemyCommentRepository,
    SQLAlchemyTicketRepository,
    SQLAlchemyUrgencyLevelRepository,
    SQLAlchemyUserRepository,
)

router = APIRouter(prefix="/tickets", tags=["Tickets"])
urgency_router = APIRouter(prefix="/urgency-levels", tags=["Tickets"])

_AUTH_RESPONSES = {
    401: {"description": "No signed-in user"},
    403: {"description": "Signed-in user may not take this action"},
    404: {"description": "Ticket not found"},
}


# ========== Dependencies ==========

async def get_ticket_action_service(
    session: AsyncSession = Depends(get_session),
) -> TicketActionService:
    return TicketActionService(
        SQLAlchemyTicketRepository(session),
        SQLAlchemyCommentRepository(session),
        SQLAlchemyAuditLogRepository(session),
        SQLAlchemyUserRepository(session),
        SQLAlchemyUrgencyLevelRepository(session),
    )


# ========== Route Handlers ==========

@router.post(
    "",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a ticket",
    responses={401: {"description": "No signed-in user"}, 404: {"description": "Urgency level not found"}},
)
async def create_ticket(
    request: CreateTicketRequest,
    user_session: UserSession = Depends(get_user_session),
    service: TicketActionService = Depends(get_ticket_action_service),
):
    """Open a ticket; its SLA deadline is creation time plus the urgency level's SLA hours."""
    ticket = await service.create_ticket(
        user_session,
        title=request.title,
        description=request.description,
        category_id=request.category_id,
        urgency_id=request.urgency_id,
    )
    return TicketResponse.from_domain(ticket)


@router.post(
    "/{ticket_id}/status",
    response_model=TicketResponse,
    summary="Change ticket status",
    responses=_AUTH_RESPONSES,
)
async def change_status(
    ticket_id: str,
    request: StatusChangeRequest,
    user_session: UserSession = Depends(get_user_session),
    service: TicketActionService = Depends(get_ticket_action_service),
):
    """
    Move the ticket to a new status with an explanatory comment.

    Admins and leads may change any ticket; others only tickets they
    created or are assigned to.
    """
    ticket = await service.change_status(user_session, ticket_id, request.status, request.comment)
    return TicketResponse.from_domain(ticket)


@router.post(
    "/{ticket_id}/reassign",
    response_model=TicketResponse,
    summary="Reassign a ticket",
    responses=_AUTH_RESPONSES,
)
async def reassign_ticket(
    ticket_id: str,
    request: ReassignRequest,
    user_session: UserSession = Depends(get_user_session),
    service: TicketActionService = Depends(get_ticket_action_service),
):
    ticket = await service.reassign(user_session, ticket_id, request.assignee_id, request.comment)
    return TicketResponse.from_domain(ticket)


@router.post(
    "/{ticket_id}/l3",
    response_model=TicketResponse,
    summary="Toggle L3 escalation",
    responses=_AUTH_RESPONSES,
)
async def toggle_l3(
    ticket_id: str,
    request: L3ToggleRequest,
    user_session: UserSession = Depends(get_user_session),
    service: TicketActionService = Depends(get_ticket_action_service),
):
    ticket = await service.toggle_l3(user_session, ticket_id, request.comment)
    return TicketResponse.from_domain(ticket)


@router.post(
    "/{ticket_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a comment",
    responses={401: {"description": "No signed-in user"}, 404: {"description": "Ticket not found"}},
)
async def add_comment(
    ticket_id: str,
    request: CommentCreateRequest,
    user_session: UserSession = Depends(get_user_session),
    service: TicketActionService = Depends(get_ticket_action_service),
):
    comment = await service.add_comment(user_session, ticket_id, request.body)
    return CommentResponse(
        id=comment.id,
        ticket_id=comment.ticket_id,
        body=comment.body,
        comment_by=comment.comment_by,
        created_at=comment.created_at,
    )


@urgency_router.get("", response_model=List[UrgencyLevelResponse], summary="List urgency levels")
async def list_urgency_levels(service: TicketActionService = Depends(get_ticket_action_service)):
    """Urgency levels to choose from when opening a ticket, with their SLA hours."""
    return [UrgencyLevelResponse.from_domain(u) for u in await service.list_urgency_levels()]


tickets_router = router
urgency_levels_router = urgency_router
