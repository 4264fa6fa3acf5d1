"""
Reports Application Services
============================

Loads ticket snapshots through the ticket repository and runs the report
aggregations over them.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Tuple

from mantra.reports.application.dto import (
    AgentRowResponse,
    CategoryCellResponse,
    CreatedClosedPointResponse,
    ReportsOverviewResponse,
    SLABreachPointResponse,
    StatusSummaryResponse,
)
from mantra.reports.application.export import (
    export_rows,
    export_to_csv,
    export_to_xlsx,
    generate_export_filename,
)
from mantra.reports.domain import (
    agent_report,
    category_heatmap,
    sla_breaches_by_day,
    status_summary,
    tickets_created_vs_closed,
)
from mantra.shared.infrastructure.logging import get_logger, log_latency
from mantra.shared.timestamps import get_zone
from mantra.sla.application import IRulesProvider
from mantra.tickets.application import ITicketRepository, TicketFilters, utc_now

logger = get_logger(__name__)


class ReportsService:
    """Service behind the reports page, summary widget and export."""

    def __init__(
        self,
        ticket_repository: ITicketRepository,
        rules_provider: IRulesProvider,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._ticket_repo = ticket_repository
        self._rules_provider = rules_provider
        self._clock = clock

    async def overview(self, filters: TicketFilters) -> ReportsOverviewResponse:
        tz_name = self._rules_provider.get_rules().display_timezone
        now = self._clock()
        tickets = await self._ticket_repo.list_snapshots(filters)

        with log_latency(logger, "reports_overview", ticket_count=len(tickets)):
            return ReportsOverviewResponse(
                generated_at=now,
                ticket_count=len(tickets),
                tickets_created_vs_closed=[
                    CreatedClosedPointResponse.model_validate(p)
                    for p in tickets_created_vs_closed(tickets, tz_name)
                ],
                sla_breaches=[
                    SLABreachPointResponse.model_validate(p)
                    for p in sla_breaches_by_day(tickets, now, tz_name)
                ],
                categories=[CategoryCellResponse.model_validate(c) for c in category_heatmap(tickets)],
                agents=[AgentRowResponse.model_validate(a) for a in agent_report(tickets)],
            )

    async def summary(self) -> StatusSummaryResponse:
        tickets = await self._ticket_repo.list_snapshots(TicketFilters())
        return StatusSummaryResponse.model_validate(status_summary(tickets, self._clock()))

    async def export_csv(self, filters: TicketFilters) -> Tuple[str, str]:
        """
        CSV export of matching tickets, newest first.

        The agent filter matches the assignee only.

        Returns:
            ``(filename, content)``; the filename has the ``.csv`` extension
        """
        basename, rows = await self._export_rows(filters)
        return self._exported(f"{basename}.csv", rows, export_to_csv(rows))

    async def export_xlsx(self, filters: TicketFilters) -> Tuple[str, bytes]:
        """Same rows as :meth:`export_csv`, as a workbook with one ``Tickets`` sheet."""
        basename, rows = await self._export_rows(filters)
        return self._exported(f"{basename}.xlsx", rows, export_to_xlsx(rows))

    async def _export_rows(self, filters: TicketFilters) -> Tuple[str, List[Dict[str, Any]]]:
        tz_name = self._rules_provider.get_rules().display_timezone
        scoped = filters.model_copy(update={"agent_scope": "assigned"})
        tickets = await self._ticket_repo.list_snapshots(scoped)

        today = self._clock().astimezone(get_zone(tz_name)).date()
        return generate_export_filename(scoped, today), export_rows(tickets, tz_name)

    @staticmethod
    def _exported(filename: str, rows: List[Dict[str, Any]], content):
        logger.info("Tickets exported", extra={"rows": len(rows), "export_file": filename})
        return filename, content
