"""
Ticket Infrastructure Repositories
==================================

Concrete implementations of the ticket repository interfaces using SQLAlchemy.

This layer contains the data access logic - how we store and retrieve
rows and turn them into domain snapshots.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import ColumnElement, Select, String, false, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from mantra.config import TicketStatus, settings
from mantra.core import RepositoryException
from mantra.shared.infrastructure.logging import get_logger
from mantra.shared.timestamps import day_range_bounds, parse_optional_instant
from mantra.tickets.application.dto import TicketFilters
from mantra.tickets.application.services import (
    IAuditLogRepository,
    ICommentRepository,
    ITicketRepository,
    IUrgencyLevelRepository,
    IUserRepository,
)
from mantra.tickets.domain import TicketSnapshot, UrgencyLevel
from mantra.tickets.infrastructure.models import (
    AuditLogModel,
    CategoryModel,
    CommentModel,
    TicketModel,
    UrgencyLevelModel,
    UserModel,
)
from mantra.timeline.domain import AuditAction, AuditLogEntry, Comment, action_meta, action_name

logger = get_logger(__name__)

Creator = aliased(UserModel, name="creator")
Assignee = aliased(UserModel, name="assignee")


def _snapshot_select() -> Select:
    return (
        select(
            TicketModel,
            Creator.name,
            Assignee.name,
            CategoryModel.name,
            UrgencyLevelModel.label,
            UrgencyLevelModel.sla_hours,
        )
        .outerjoin(Creator, TicketModel.created_by == Creator.id)
        .outerjoin(Assignee, TicketModel.assigned_to == Assignee.id)
        .outerjoin(CategoryModel, TicketModel.category_id == CategoryModel.id)
        .outerjoin(UrgencyLevelModel, TicketModel.urgency_id == UrgencyLevelModel.id)
    )


def _search_condition(term: str) -> ColumnElement[bool]:
    needle = term.lower()
    columns = (
        TicketModel.title,
        TicketModel.description,
        func.coalesce(TicketModel.display_id, TicketModel.id),
        Creator.name,
        Assignee.name,
        CategoryModel.name,
        TicketModel.status,
    )
    return or_(*(func.lower(column, type_=String).contains(needle, autoescape=True) for column in columns))


def _assignment_condition(filters: TicketFilters) -> ColumnElement[bool]:
    if filters.assignment == "assigned":
        return TicketModel.assigned_to.is_not(None)
    if filters.assignment == "unassigned":
        return TicketModel.assigned_to.is_(None)
    # An anonymous viewer owns nothing
    if not filters.viewer_id:
        return false()
    return or_(TicketModel.assigned_to == filters.viewer_id, TicketModel.created_by == filters.viewer_id)


def _to_snapshot(row: Any) -> TicketSnapshot:
    model, creator_name, assignee_name, category_name, urgency_label, sla_hours = row
    return TicketSnapshot(
        id=model.id,
        display_id=model.display_id or model.id,
        title=model.title,
        description=model.description,
        status=model.status,
        created_at=parse_optional_instant(model.created_at),
        resolved_at=parse_optional_instant(model.resolved_at),
        sla_deadline=parse_optional_instant(model.sla_deadline),
        is_l3=bool(model.is_l3),
        created_by=model.created_by,
        assigned_to=model.assigned_to,
        category_id=model.category_id,
        urgency_id=model.urgency_id,
        creator_name=creator_name,
        assignee_name=assignee_name,
        category_name=category_name,
        urgency_label=urgency_label,
        urgency_sla_hours=sla_hours,
    )


class SQLAlchemyTicketRepository(ITicketRepository):
    """
    SQLAlchemy implementation of the ticket repository.

    Date filters are calendar days in the display timezone.
    """

    def __init__(self, session: AsyncSession, display_timezone: Optional[str] = None):
        self._session = session
        self._display_timezone = display_timezone or settings.display_timezone

    async def get_snapshot(self, ticket_id: str) -> Optional[TicketSnapshot]:
        stmt = _snapshot_select().where(TicketModel.id == ticket_id)
        result = await self._session.execute(stmt)
        row = result.first()
        return _to_snapshot(row) if row is not None else None

    async def list_snapshots(self, filters: TicketFilters) -> List[TicketSnapshot]:
        stmt = _snapshot_select()

        conditions = []
        if filters.status:
            conditions.append(TicketModel.status == filters.status)
        if filters.category_id is not None:
            conditions.append(TicketModel.category_id == filters.category_id)
        if filters.urgency_id is not None:
            conditions.append(TicketModel.urgency_id == filters.urgency_id)
        if filters.agent_id:
            if filters.agent_scope == "assigned":
                conditions.append(TicketModel.assigned_to == filters.agent_id)
            else:
                conditions.append(or_(
                    TicketModel.assigned_to == filters.agent_id,
                    TicketModel.created_by == filters.agent_id,
                ))
        if filters.is_l3:
            conditions.append(TicketModel.is_l3.is_(True))
        elif filters.is_l3 is not None:
            conditions.append(or_(TicketModel.is_l3.is_(False), TicketModel.is_l3.is_(None)))
        if filters.assignment:
            conditions.append(_assignment_condition(filters))
        if filters.search:
            conditions.append(_search_condition(filters.search))

        start, end = day_range_bounds(filters.date_from, filters.date_to, self._display_timezone)
        if start is not None:
            conditions.append(TicketModel.created_at >= start)
        if end is not None:
            conditions.append(TicketModel.created_at < end)

        if conditions:
            stmt = stmt.where(*conditions)

        stmt = stmt.order_by(TicketModel.created_at.desc()).offset(filters.offset)
        if filters.limit is not None:
            stmt = stmt.limit(filters.limit)

        result = await self._session.execute(stmt)
        return [_to_snapshot(row) for row in result.all()]

    async def create(
        self,
        title: str,
        description: str,
        category_id: int,
        urgency_id: int,
        created_by: str,
        created_at: datetime,
        sla_deadline: datetime,
    ) -> str:
        model = TicketModel(
            title=title,
            description=description,
            status=TicketStatus.NEW.value,
            is_l3=False,
            category_id=category_id,
            urgency_id=urgency_id,
            created_by=created_by,
            created_at=created_at,
            sla_deadline=sla_deadline,
        )
        self._session.add(model)
        try:
            await self._session.flush()
        except SQLAlchemyError as exc:
            raise RepositoryException("Failed to create ticket", {"error": str(exc)}) from exc
        return model.id

    async def update_status(
        self,
        ticket_id: str,
        status: TicketStatus,
        resolved_at: Optional[datetime] = None,
    ) -> None:
        values: Dict[str, Any] = {"status": status.value}
        if resolved_at is not None:
            values["resolved_at"] = resolved_at
        await self._update(ticket_id, values)

    async def set_assignee(self, ticket_id: str, assignee_id: Optional[str]) -> None:
        await self._update(ticket_id, {"assigned_to": assignee_id})

    async def set_l3(self, ticket_id: str, is_l3: bool) -> None:
        await self._update(ticket_id, {"is_l3": is_l3})

    async def _update(self, ticket_id: str, values: Dict[str, Any]) -> None:
        stmt = update(TicketModel).where(TicketModel.id == ticket_id).values(**values)
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise RepositoryException(f"Ticket {ticket_id} not found")


class SQLAlchemyCommentRepository(ICommentRepository):
    """SQLAlchemy implementation of the comment repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_for_ticket(self, ticket_id: str) -> List[Comment]:
        stmt = (
            select(CommentModel)
            .where(CommentModel.ticket_id == ticket_id)
            .order_by(CommentModel.created_at.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(m) for m in result.scalars().all()]

    async def add(self, ticket_id: str, body: str, comment_by: str, created_at: datetime) -> Comment:
        model = CommentModel(
            ticket_id=ticket_id,
            comment=body,
            comment_by=comment_by,
            created_at=created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_domain(model)

    @staticmethod
    def _to_domain(model: CommentModel) -> Comment:
        return Comment(
            id=model.id,
            ticket_id=model.ticket_id,
            body=model.comment,
            comment_by=model.comment_by,
            created_at=model.created_at,
        )


class SQLAlchemyAuditLogRepository(IAuditLogRepository):
    """SQLAlchemy implementation of the audit log repository. Append only."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_for_ticket(self, ticket_id: str) -> List[AuditLogEntry]:
        stmt = (
            select(AuditLogModel)
            .where(AuditLogModel.ticket_id == ticket_id)
            .order_by(AuditLogModel.timestamp.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(m) for m in result.scalars().all()]

    async def add(
        self,
        ticket_id: str,
        action: AuditAction,
        changed_by: str,
        timestamp: datetime,
    ) -> AuditLogEntry:
        model = AuditLogModel(
            ticket_id=ticket_id,
            action=action_name(action),
            meta=action_meta(action),
            changed_by=changed_by,
            timestamp=timestamp,
        )
        self._session.add(model)
        await self._session.flush()
        logger.debug("Audit entry written", extra={"ticket_id": ticket_id, "action": model.action})
        return self._to_domain(model)

    @staticmethod
    def _to_domain(model: AuditLogModel) -> AuditLogEntry:
        return AuditLogEntry.from_row(
            id=model.id,
            ticket_id=model.ticket_id,
            action=model.action,
            changed_by=model.changed_by,
            timestamp=model.timestamp,
            meta=model.meta,
        )


class SQLAlchemyUserRepository(IUserRepository):
    """SQLAlchemy implementation of user lookups."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_names(self, user_ids: Iterable[str]) -> Dict[str, str]:
        ids = {uid for uid in user_ids if uid}
        if not ids:
            return {}
        stmt = select(UserModel.id, UserModel.name).where(UserModel.id.in_(ids))
        result = await self._session.execute(stmt)
        return {uid: name for uid, name in result.all()}

    async def exists(self, user_id: str) -> bool:
        stmt = select(UserModel.id).where(UserModel.id == user_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None


class SQLAlchemyUrgencyLevelRepository(IUrgencyLevelRepository):
    """SQLAlchemy implementation of urgency level lookups."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, urgency_id: int) -> Optional[UrgencyLevel]:
        model = await self._session.get(UrgencyLevelModel, urgency_id)
        return self._to_domain(model) if model is not None else None

    async def list(self) -> List[UrgencyLevel]:
        result = await self._session.execute(select(UrgencyLevelModel).order_by(UrgencyLevelModel.id))
        return [self._to_domain(m) for m in result.scalars().all()]

    @staticmethod
    def _to_domain(model: UrgencyLevelModel) -> UrgencyLevel:
        return UrgencyLevel(id=model.id, label=model.label, sla_hours=model.sla_hours)
