"""
SLA Domain Layer
================

Domain layer for the SLA module.

Contains:
- Value Objects: SLAReading, PriorityBand, HelpdeskRules
- Domain Services: SLAClock (classification and countdown), SLACalculator
- Entities: TicketSLAStatus, SLASweepResult

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from mantra.sla.domain.value_objects import (
    DEFAULT_PRIORITY_BANDS,
    HelpdeskRules,
    PriorityBand,
    SLACalculator,
    SLAClock,
    SLAReading,
    format_countdown,
)
from mantra.sla.domain.entities import SLASweepResult, TicketSLAStatus

__all__ = [
    # Value Objects & Services
    "DEFAULT_PRIORITY_BANDS",
    "HelpdeskRules",
    "PriorityBand",
    "SLACalculator",
    "SLAClock",
    "SLAReading",
    "format_countdown",
    # Entities
    "SLASweepResult",
    "TicketSLAStatus",
]
