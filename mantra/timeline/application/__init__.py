"""
Timeline Application Layer
==========================

Contains:
- Services: TimelineService
- DTOs: timeline response models
"""

from mantra.timeline.application.dto import (
    TimelineItemResponse,
    TimelinePermissions,
    TimelineResponse,
)
from mantra.timeline.application.services import TimelineService, referenced_user_ids

__all__ = [
    "TimelineItemResponse",
    "TimelinePermissions",
    "TimelineResponse",
    "TimelineService",
    "referenced_user_ids",
]
