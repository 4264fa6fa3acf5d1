"""
Timeline Domain Layer
=====================

Contains:
- Entities: Comment, AuditLogEntry, TimelineItem and the audit action variants
- Domain Services: TimelineReconciler, audit_message

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from mantra.timeline.domain.entities import (
    AuditAction,
    AuditLogEntry,
    Comment,
    MarkedL3,
    OtherAction,
    Reassigned,
    StatusChanged,
    TimelineItem,
    UnmarkedL3,
    action_meta,
    action_name,
    parse_audit_action,
)
from mantra.timeline.domain.reconciler import (
    DEFAULT_MERGE_WINDOW,
    TimelineReconciler,
    audit_message,
)

__all__ = [
    "AuditAction",
    "AuditLogEntry",
    "Comment",
    "MarkedL3",
    "OtherAction",
    "Reassigned",
    "StatusChanged",
    "TimelineItem",
    "UnmarkedL3",
    "action_meta",
    "action_name",
    "parse_audit_action",
    "DEFAULT_MERGE_WINDOW",
    "TimelineReconciler",
    "audit_message",
]
