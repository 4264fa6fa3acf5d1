"""
Timeline Application DTOs
=========================

Response models for the ticket activity timeline.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from mantra.shared.timestamps import format_ticket_datetime
from mantra.timeline.domain import TimelineItem

TimelineItemKindStr = Literal["comment", "audit"]


class TimelineItemResponse(BaseModel):
    id: str
    kind: TimelineItemKindStr
    timestamp: datetime
    timestamp_display: str = Field(..., description="Timestamp in the display timezone")
    actor_name: str
    content: str
    action: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None
    absorbed_comment_id: Optional[str] = None

    @classmethod
    def from_domain(cls, item: TimelineItem, tz_name: str) -> "TimelineItemResponse":
        return cls(
            id=item.id,
            kind=item.kind.value,
            timestamp=item.timestamp,
            timestamp_display=format_ticket_datetime(item.timestamp, tz_name),
            actor_name=item.actor_name,
            content=item.content,
            action=item.action,
            meta=item.meta,
            absorbed_comment_id=item.absorbed_comment_id,
        )


class TimelinePermissions(BaseModel):
    """Actions the requesting session may take on the ticket."""
    can_update_status: bool = False
    can_reassign: bool = False
    can_toggle_l3: bool = False
    can_comment: bool = False


class TimelineResponse(BaseModel):
    ticket_id: str
    display_id: str
    items: List[TimelineItemResponse]
    permissions: TimelinePermissions
