"""
Timeline Domain Entities
========================

Comments, audit log entries and the timeline items derived from them.

Audit payloads are a closed set of variants, one per known action, plus
``OtherAction`` for anything the service does not recognise.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from mantra.config import AuditActionKind, TimelineItemKind


# ========== Audit actions ==========

@dataclass(frozen=True)
class StatusChanged:
    old_status: Optional[str]
    new_status: Optional[str]
    kind: AuditActionKind = field(default=AuditActionKind.STATUS_CHANGED, init=False)


@dataclass(frozen=True)
class Reassigned:
    new_assignee: Optional[str]
    old_assignee: Optional[str] = None
    kind: AuditActionKind = field(default=AuditActionKind.REASSIGNED, init=False)


@dataclass(frozen=True)
class MarkedL3:
    kind: AuditActionKind = field(default=AuditActionKind.MARKED_L3, init=False)


@dataclass(frozen=True)
class UnmarkedL3:
    kind: AuditActionKind = field(default=AuditActionKind.UNMARKED_L3, init=False)


@dataclass(frozen=True)
class OtherAction:
    """Action string the service has no payload type for."""
    action: Optional[str]
    meta: Mapping[str, Any] = field(default_factory=dict)


AuditAction = Union[StatusChanged, Reassigned, MarkedL3, UnmarkedL3, OtherAction]


def _text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def parse_audit_action(action: Optional[str], meta: Any) -> AuditAction:
    """Build the typed action for a raw ``(action, meta)`` audit row."""
    payload = meta if isinstance(meta, Mapping) else {}

    if action == AuditActionKind.STATUS_CHANGED.value:
        return StatusChanged(
            old_status=_text(payload.get("old_status")),
            new_status=_text(payload.get("new_status")),
        )
    if action == AuditActionKind.REASSIGNED.value:
        return Reassigned(
            new_assignee=_text(payload.get("new_assignee")) or None,
            old_assignee=_text(payload.get("old_assignee")) or None,
        )
    if action == AuditActionKind.MARKED_L3.value:
        return MarkedL3()
    if action == AuditActionKind.UNMARKED_L3.value:
        return UnmarkedL3()
    return OtherAction(action=action, meta=dict(payload))


def action_name(action: AuditAction) -> Optional[str]:
    """Raw action string of a typed action."""
    if isinstance(action, OtherAction):
        return action.action
    return action.kind.value


def action_meta(action: AuditAction) -> dict[str, Any]:
    """Attribute bag of a typed action, as stored in the audit table."""
    if isinstance(action, StatusChanged):
        return {"old_status": action.old_status, "new_status": action.new_status}
    if isinstance(action, Reassigned):
        return {"old_assignee": action.old_assignee, "new_assignee": action.new_assignee}
    if isinstance(action, MarkedL3):
        return {"is_l3": True}
    if isinstance(action, UnmarkedL3):
        return {"is_l3": False}
    return dict(action.meta)


# ========== Records ==========

@dataclass(frozen=True)
class Comment:
    """Free-text comment on a ticket. ``created_at`` is raw store data."""

    id: str
    ticket_id: Optional[str]
    body: str
    comment_by: Optional[str]
    created_at: Any


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable record of an action taken on a ticket."""

    id: str
    ticket_id: Optional[str]
    action: AuditAction
    changed_by: Optional[str]
    timestamp: Any

    @classmethod
    def from_row(
        cls,
        id: str,
        ticket_id: Optional[str],
        action: Optional[str],
        changed_by: Optional[str],
        timestamp: Any,
        meta: Any = None,
    ) -> "AuditLogEntry":
        return cls(
            id=id,
            ticket_id=ticket_id,
            action=parse_audit_action(action, meta),
            changed_by=changed_by,
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class TimelineItem:
    """One entry of the merged activity narrative."""

    id: str
    kind: TimelineItemKind
    timestamp: datetime
    actor_name: str
    content: str
    action: Optional[str] = None
    meta: Optional[dict[str, Any]] = None
    absorbed_comment_id: Optional[str] = None
