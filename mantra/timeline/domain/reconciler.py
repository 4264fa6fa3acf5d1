"""
Timeline Reconciler
===================

Merges a ticket's audit log and comments into one newest-first narrative.

The UI posts a comment and writes an audit row for the same action (status
change, reassignment, L3 toggle) as two separate inserts. The reconciler
folds such a pair back into a single entry: an audit entry absorbs the first
unconsumed comment written by the same actor within the merge window.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Mapping, Optional

from mantra.config import MERGEABLE_AUDIT_ACTIONS, TimelineItemKind
from mantra.shared.infrastructure.logging import get_logger
from mantra.shared.timestamps import try_parse_instant
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
)

logger = get_logger(__name__)

DEFAULT_MERGE_WINDOW = timedelta(milliseconds=120_000)
SYSTEM_ACTOR = "System"
UNKNOWN_USER = "Unknown"


def audit_message(action: AuditAction, user_names: Mapping[str, str]) -> str:
    """Human-readable description of an audit action."""
    if isinstance(action, StatusChanged):
        return f'Changed status from "{action.old_status}" to "{action.new_status}"'
    if isinstance(action, Reassigned):
        if action.new_assignee:
            return f"Assigned ticket to {user_names.get(action.new_assignee, UNKNOWN_USER)}"
        return "Unassigned ticket"
    if isinstance(action, MarkedL3):
        return "Marked as L3 escalation"
    if isinstance(action, UnmarkedL3):
        return "Removed L3 escalation"
    if isinstance(action, OtherAction):
        return f"Performed action: {action.action if action.action is not None else 'unknown'}"
    raise TypeError(f"Unsupported audit action: {action!r}")


@dataclass(frozen=True)
class _Timed:
    at: datetime
    record: object


class TimelineReconciler:
    """
    Builds timeline items from a snapshot of audit entries and comments.

    Pure and idempotent: inputs are never mutated and the same snapshot in
    the same order always yields the same sequence.
    """

    def __init__(self, merge_window: timedelta = DEFAULT_MERGE_WINDOW):
        self._merge_window = merge_window

    @property
    def merge_window(self) -> timedelta:
        return self._merge_window

    def reconcile(
        self,
        audit_entries: Iterable[AuditLogEntry],
        comments: Iterable[Comment],
        user_names: Optional[Mapping[str, str]] = None,
    ) -> List[TimelineItem]:
        names = user_names or {}
        audits = self._parsed(audit_entries, "timestamp")
        remaining = self._parsed(comments, "created_at")
        consumed: set[int] = set()

        items: List[TimelineItem] = []
        for timed in audits:
            entry: AuditLogEntry = timed.record
            match_index = self._find_related_comment(timed, remaining, consumed)
            message = audit_message(entry.action, names)
            actor = names.get(entry.changed_by, SYSTEM_ACTOR) if entry.changed_by else SYSTEM_ACTOR

            if match_index is None:
                items.append(TimelineItem(
                    id=entry.id,
                    kind=TimelineItemKind.AUDIT,
                    timestamp=timed.at,
                    actor_name=actor,
                    content=message,
                    action=action_name(entry.action),
                    meta=action_meta(entry.action),
                ))
                continue

            consumed.add(match_index)
            comment: Comment = remaining[match_index].record
            items.append(TimelineItem(
                id=f"{entry.id}-combined",
                kind=TimelineItemKind.AUDIT,
                timestamp=timed.at,
                actor_name=actor,
                content=f'{message} with comment: "{comment.body}"',
                action=action_name(entry.action),
                meta=action_meta(entry.action),
                absorbed_comment_id=comment.id,
            ))

        for index, timed in enumerate(remaining):
            if index in consumed:
                continue
            comment = timed.record
            items.append(TimelineItem(
                id=comment.id,
                kind=TimelineItemKind.COMMENT,
                timestamp=timed.at,
                actor_name=names.get(comment.comment_by, UNKNOWN_USER) if comment.comment_by else UNKNOWN_USER,
                content=comment.body,
            ))

        # sorted() is stable, so equal timestamps keep their relative order
        return sorted(items, key=lambda item: item.timestamp, reverse=True)

    def _find_related_comment(
        self,
        audit: _Timed,
        comments: List[_Timed],
        consumed: set[int],
    ) -> Optional[int]:
        entry: AuditLogEntry = audit.record
        if action_name(entry.action) not in MERGEABLE_AUDIT_ACTIONS:
            return None
        for index, timed in enumerate(comments):
            if index in consumed:
                continue
            if abs(timed.at - audit.at) > self._merge_window:
                continue
            if timed.record.comment_by == entry.changed_by:
                return index
        return None

    @staticmethod
    def _parsed(records: Iterable, attribute: str) -> List[_Timed]:
        parsed: List[_Timed] = []
        for record in records:
            at = try_parse_instant(getattr(record, attribute))
            if at is None:
                logger.warning(
                    "Skipping timeline record with invalid timestamp",
                    extra={
                        "record_id": getattr(record, "id", None),
                        "record_type": type(record).__name__,
                    },
                )
                continue
            parsed.append(_Timed(at, record))
        return parsed
