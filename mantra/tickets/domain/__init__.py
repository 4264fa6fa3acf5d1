"""
Tickets Domain Layer
====================

Contains:
- Entities: read-only snapshots of tickets and urgency levels
- Session: the explicit request identity and permission rules

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from mantra.tickets.domain.entities import (
    TicketSnapshot,
    UrgencyLevel,
)
from mantra.tickets.domain.session import (
    SessionState,
    UserSession,
    can_reassign,
    can_toggle_l3,
    can_update_status,
    parse_role,
)

__all__ = [
    "TicketSnapshot",
    "UrgencyLevel",
    "SessionState",
    "UserSession",
    "can_reassign",
    "can_toggle_l3",
    "can_update_status",
    "parse_role",
]
