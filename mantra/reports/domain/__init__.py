"""
Reports Domain Layer
====================

Pure aggregations over ticket snapshots.

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from mantra.reports.domain.aggregations import (
    UNCATEGORIZED,
    UNKNOWN_STATUS,
    AgentRow,
    CategoryCell,
    CreatedClosedPoint,
    SLABreachPoint,
    StatusCount,
    StatusSummary,
    agent_report,
    category_heatmap,
    sla_breaches_by_day,
    status_summary,
    tickets_created_vs_closed,
)

__all__ = [
    "UNCATEGORIZED",
    "UNKNOWN_STATUS",
    "AgentRow",
    "CategoryCell",
    "CreatedClosedPoint",
    "SLABreachPoint",
    "StatusCount",
    "StatusSummary",
    "agent_report",
    "category_heatmap",
    "sla_breaches_by_day",
    "status_summary",
    "tickets_created_vs_closed",
]
