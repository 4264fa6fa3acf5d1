"""
SLA Domain Entities
====================

Pairs a ticket snapshot with its SLA reading.
"""

from dataclasses import dataclass, field
from typing import Optional

from mantra.config import SLAClassification
from mantra.sla.domain.value_objects import SLAReading
from mantra.tickets.domain import TicketSnapshot


@dataclass(frozen=True)
class TicketSLAStatus:
    """SLA state of one ticket at one instant."""

    ticket: TicketSnapshot
    reading: SLAReading
    priority: Optional[str] = None

    @property
    def classification(self) -> SLAClassification:
        return self.reading.classification


@dataclass
class SLASweepResult:
    """Outcome of one monitor sweep over open tickets."""

    tickets_evaluated: int = 0
    overdue: int = 0
    newly_overdue: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "tickets_evaluated": self.tickets_evaluated,
            "overdue": self.overdue,
            "newly_overdue": list(self.newly_overdue),
        }
