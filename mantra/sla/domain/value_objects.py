"""
SLA Value Objects
==================

Immutable value objects and pure calculations for the SLA domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from mantra.config import CLOSED_STATUSES, SLAClassification, TicketStatus
from mantra.core import ConfigurationException, ValidationException
from mantra.shared.timestamps import get_zone, parse_instant, parse_optional_instant

_MINUTE_MS = 60 * 1000
_HOUR_MS = 60 * _MINUTE_MS
_DAY_MS = 24 * _HOUR_MS
_CLOSED_STATUS_VALUES = frozenset(s.value for s in CLOSED_STATUSES)

_CLASSIFICATION_LABELS = {
    SLAClassification.NOT_SET: "NOT SET",
    SLAClassification.OVERDUE: "OVERDUE",
    SLAClassification.RESOLVED_ON_TIME: "RESOLVED ON TIME",
    SLAClassification.RESOLVED_LATE: "RESOLVED LATE",
}


def format_countdown(remaining: timedelta) -> str:
    """
    Render a positive remaining duration as ``"1d 1h 0m"``, ``"3h 5m"`` or
    ``"7m"``. Minutes are floored.
    """
    total_ms = remaining // timedelta(milliseconds=1)
    days = total_ms // _DAY_MS
    hours = (total_ms % _DAY_MS) // _HOUR_MS
    minutes = (total_ms % _HOUR_MS) // _MINUTE_MS

    if days > 0:
        return f"{days}d {hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


@dataclass(frozen=True)
class SLAReading:
    """Result of one SLA clock evaluation."""

    classification: SLAClassification
    deadline: Optional[datetime] = None
    countdown: Optional[str] = None
    remaining_seconds: Optional[float] = None

    @property
    def label(self) -> str:
        """Text shown in place of the countdown."""
        if self.countdown is not None:
            return self.countdown
        return _CLASSIFICATION_LABELS.get(self.classification, self.classification.value.upper())

    @property
    def is_overdue(self) -> bool:
        return self.classification == SLAClassification.OVERDUE


class SLAClock:
    """
    Classifies a ticket's SLA state.

    Pure and stateless: the same inputs always give the same reading. A
    live countdown is obtained by the caller evaluating again on a timer.
    """

    @staticmethod
    def evaluate(
        status: Any,
        sla_deadline: Any,
        resolved_at: Any,
        now: Any,
    ) -> SLAReading:
        """
        Evaluate the SLA state at ``now``.

        Args:
            status: Ticket lifecycle status (enum or raw string)
            sla_deadline: Deadline instant, or None when no SLA applies
            resolved_at: Resolution instant, may be None
            now: Evaluation instant

        Raises:
            InvalidTimestampException: if any supplied instant is malformed
        """
        current_time = parse_instant(now)
        if sla_deadline is None:
            return SLAReading(SLAClassification.NOT_SET)
        deadline = parse_instant(sla_deadline)

        if _is_closed(status):
            effective_resolved = parse_optional_instant(resolved_at) or current_time
            if effective_resolved <= deadline:
                return SLAReading(SLAClassification.RESOLVED_ON_TIME, deadline)
            return SLAReading(SLAClassification.RESOLVED_LATE, deadline)

        remaining = deadline - current_time
        if remaining <= timedelta(0):
            return SLAReading(SLAClassification.OVERDUE, deadline, remaining_seconds=0.0)

        return SLAReading(
            SLAClassification.ON_TRACK,
            deadline,
            countdown=format_countdown(remaining),
            remaining_seconds=remaining.total_seconds(),
        )


def _is_closed(status: Any) -> bool:
    value = status.value if isinstance(status, TicketStatus) else status
    return value in _CLOSED_STATUS_VALUES


class PriorityBand(BaseModel):
    """Priority badge assigned to urgency levels up to ``max_sla_hours``."""
    label: str = Field(..., min_length=1)
    max_sla_hours: Optional[float] = Field(
        default=None,
        description="Upper bound (inclusive); None matches everything"
    )


class SLACalculator:
    """
    Pure functions for SLA calculations.

    Stateless utility class - all SLA arithmetic outside the clock lives here.
    """

    @staticmethod
    def calculate_deadline(created_at: Any, sla_hours: float) -> datetime:
        """
        Deadline for a ticket created at ``created_at`` with an urgency
        level granting ``sla_hours``.
        """
        if not math.isfinite(sla_hours) or sla_hours < 0:
            raise ValidationException("sla_hours must be a finite, non-negative number", {"sla_hours": sla_hours})
        start = parse_instant(created_at)
        try:
            return start + timedelta(hours=sla_hours)
        except OverflowError as exc:
            raise ValidationException(
                "sla_hours puts the deadline out of range", {"sla_hours": sla_hours}
            ) from exc

    @staticmethod
    def priority_for_sla_hours(sla_hours: float, bands: List[PriorityBand]) -> str:
        """
        Map an SLA window to its priority badge.

        Bands are checked in order of ``max_sla_hours``; the first one whose
        bound covers ``sla_hours`` wins.
        """
        bounded = sorted(
            (b for b in bands if b.max_sla_hours is not None),
            key=lambda b: b.max_sla_hours,
        )
        for band in bounded:
            if sla_hours <= band.max_sla_hours:
                return band.label
        for band in bands:
            if band.max_sla_hours is None:
                return band.label
        return bounded[-1].label if bounded else "N/A"

    @staticmethod
    def is_breached(sla_deadline: Any, resolved_at: Any, now: Any) -> bool:
        """
        Whether the SLA was missed: resolved after the deadline, or still
        unresolved past it. Tickets without a deadline never breach.
        """
        if sla_deadline is None:
            return False
        deadline = parse_instant(sla_deadline)
        if resolved_at is not None:
            return parse_instant(resolved_at) > deadline
        return parse_instant(now) > deadline


DEFAULT_PRIORITY_BANDS = [
    PriorityBand(label="P1", max_sla_hours=4),
    PriorityBand(label="P2", max_sla_hours=24),
    PriorityBand(label="P3", max_sla_hours=None),
]


class HelpdeskRules(BaseModel):
    """
    Tunable helpdesk rules loaded from YAML.

    This is a value object - immutable and defined by its attributes.
    """
    priority_bands: List[PriorityBand] = Field(
        default_factory=lambda: list(DEFAULT_PRIORITY_BANDS),
        description="Priority badge per SLA window"
    )
    comment_merge_window_seconds: float = Field(
        default=120,
        ge=0,
        description="Max gap between an audit action and the comment it absorbs"
    )
    display_timezone: str = Field(
        default="Asia/Kolkata",
        description="Timezone for dates shown to people"
    )

    model_config = {"frozen": True}

    @field_validator("priority_bands")
    @classmethod
    def validate_priority_bands(cls, v: List[PriorityBand]) -> List[PriorityBand]:
        """At least one band is required so every ticket gets a badge."""
        if not v:
            return list(DEFAULT_PRIORITY_BANDS)
        return v

    @field_validator("display_timezone")
    @classmethod
    def validate_display_timezone(cls, v: str) -> str:
        try:
            get_zone(v)
        except ConfigurationException as exc:
            raise ValueError(exc.message) from exc
        return v

    @property
    def comment_merge_window(self) -> timedelta:
        return timedelta(seconds=self.comment_merge_window_seconds)

    def priority_for(self, sla_hours: float) -> str:
        return SLACalculator.priority_for_sla_hours(sla_hours, self.priority_bands)
