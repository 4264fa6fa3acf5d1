"""
Tickets Infrastructure Layer
============================

Contains:
- Models: SQLAlchemy ORM models for the helpdesk tables
- Repositories: SQLAlchemy implementations of the repository interfaces
"""

from mantra.tickets.infrastructure.models import (
    AuditLogModel,
    CategoryModel,
    CommentModel,
    RoleModel,
    TicketModel,
    UrgencyLevelModel,
    UserModel,
)
from mantra.tickets.infrastructure.repositories import (
    SQLAlchemyAuditLogRepository,
    SQLAlchemyCommentRepository,
    SQLAlchemyTicketRepository,
    SQLAlchemyUrgencyLevelRepository,
    SQLAlchemyUserRepository,
)

__all__ = [
    "AuditLogModel",
    "CategoryModel",
    "CommentModel",
    "RoleModel",
    "TicketModel",
    "UrgencyLevelModel",
    "UserModel",
    "SQLAlchemyAuditLogRepository",
    "SQLAlchemyCommentRepository",
    "SQLAlchemyTicketRepository",
    "SQLAlchemyUrgencyLevelRepository",
    "SQLAlchemyUserRepository",
]
