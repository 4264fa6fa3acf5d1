"""
Shared API Dependencies
=======================

FastAPI dependencies used by every module's controllers.
"""

from datetime import date
from typing import Optional

from fastapi import Depends, Header, Query
from pydantic import ValidationError

from mantra.config import settings
from mantra.core import ValidationException
from mantra.sla.application import IRulesProvider
from mantra.sla.infrastructure import RulesConfigManager
from mantra.tickets.application import TicketFilters
from mantra.tickets.application.dto import AgentScopeStr, AssignmentStr, TicketStatusStr
from mantra.tickets.domain import UserSession

# Loaded and watched by the application lifespan
rules_manager = RulesConfigManager(default_timezone=settings.display_timezone)


def get_rules_provider() -> IRulesProvider:
    return rules_manager


def get_user_session(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    x_user_role: Optional[str] = Header(None, alias="X-User-Role"),
) -> UserSession:
    """
    Session for the identity the gateway asserted on this request.

    Requests without ``X-User-Id`` get an anonymous session.
    """
    return UserSession.from_identity(x_user_id, x_user_role)


def get_ticket_filters(
    status: Optional[TicketStatusStr] = Query(None, description="Filter by ticket status"),
    category_id: Optional[int] = Query(None, description="Filter by category"),
    urgency_id: Optional[int] = Query(None, description="Filter by urgency level"),
    agent_id: Optional[str] = Query(None, description="Filter by agent"),
    agent_scope: AgentScopeStr = Query("involved", description="'assigned' or 'involved'"),
    date_from: Optional[date] = Query(None, description="First creation day, inclusive"),
    date_to: Optional[date] = Query(None, description="Last creation day, inclusive"),
    search: Optional[str] = Query(None, max_length=200, description="Free-text search"),
    is_l3: Optional[bool] = Query(None, description="Only L3 (true) or non-L3 (false) tickets"),
    assignment: Optional[AssignmentStr] = Query(None, description="'assigned', 'unassigned' or 'mine'"),
    limit: Optional[int] = Query(None, ge=1, le=10000),
    offset: int = Query(0, ge=0),
    session: UserSession = Depends(get_user_session),
) -> TicketFilters:
    try:
        return TicketFilters(
            status=status,
            category_id=category_id,
            urgency_id=urgency_id,
            agent_id=agent_id,
            agent_scope=agent_scope,
            date_from=date_from,
            date_to=date_to,
            search=search,
            is_l3=is_l3,
            assignment=assignment,
            viewer_id=session.user_id,
            limit=limit,
            offset=offset,
        )
    except ValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        raise ValidationException("Invalid ticket filters", {"errors": errors}) from exc
