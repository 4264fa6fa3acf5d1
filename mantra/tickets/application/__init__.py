"""
Tickets Application Layer
=========================

Contains:
- Services: TicketActionService
- Repository interfaces implemented by the infrastructure layer
- DTOs: request, response and filter models
"""

from mantra.tickets.application.dto import (
    CommentCreateRequest,
    CommentResponse,
    CreateTicketRequest,
    L3ToggleRequest,
    ReassignRequest,
    StatusChangeRequest,
    TicketFilters,
    TicketResponse,
    UrgencyLevelResponse,
)
from mantra.tickets.application.services import (
    IAuditLogRepository,
    ICommentRepository,
    ITicketRepository,
    IUrgencyLevelRepository,
    IUserRepository,
    TicketActionService,
    utc_now,
)

__all__ = [
    # DTOs
    "CommentCreateRequest",
    "CommentResponse",
    "CreateTicketRequest",
    "L3ToggleRequest",
    "ReassignRequest",
    "StatusChangeRequest",
    "TicketFilters",
    "TicketResponse",
    "UrgencyLevelResponse",
    # Services
    "TicketActionService",
    "utc_now",
    # Repository Interfaces
    "IAuditLogRepository",
    "ICommentRepository",
    "ITicketRepository",
    "IUrgencyLevelRepository",
    "IUserRepository",
]
