"""
SLA Application Layer
=====================

Contains:
- Services: SLAService, SLAMonitor
- Provider interfaces: IRulesProvider
- DTOs: API response models
"""

from mantra.sla.application.dto import (
    DashboardResponse,
    DashboardSummary,
    SLAPreviewResponse,
    SLAReadingResponse,
    TicketSLAResponse,
)
from mantra.sla.application.services import (
    IRulesProvider,
    SLAMonitor,
    SLAService,
    evaluate_ticket,
    summarize,
)

__all__ = [
    # DTOs
    "DashboardResponse",
    "DashboardSummary",
    "SLAPreviewResponse",
    "SLAReadingResponse",
    "TicketSLAResponse",
    # Services
    "SLAMonitor",
    "SLAService",
    "evaluate_ticket",
    "summarize",
    # Interfaces
    "IRulesProvider",
]
