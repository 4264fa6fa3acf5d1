"""
Reports Controllers (API Routes)
================================

FastAPI routes for report charts, the status summary and the ticket exports.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from mantra.infrastructure.database import get_session
from mantra.reports.application import (
    ReportsOverviewResponse,
    ReportsService,
    StatusSummaryResponse,
    XLSX_MEDIA_TYPE,
)
from mantra.shared.api.dependencies import get_rules_provider, get_ticket_filters
from mantra.sla.application import IRulesProvider
from mantra.tickets.application import TicketFilters
from mantra.tickets.infrastructure import SQLAlchemyTicketRepository

router = APIRouter(prefix="/reports", tags=["Reports"])


# ========== Dependencies ==========

async def get_reports_service(
    session: AsyncSession = Depends(get_session),
    rules_provider: IRulesProvider = Depends(get_rules_provider),
) -> ReportsService:
    tz_name = rules_provider.get_rules().display_timezone
    return ReportsService(SQLAlchemyTicketRepository(session, tz_name), rules_provider)


# ========== Route Handlers ==========

@router.get("/overview", response_model=ReportsOverviewResponse, summary="Report charts")
async def get_overview(
    filters: TicketFilters = Depends(get_ticket_filters),
    service: ReportsService = Depends(get_reports_service),
):
    """
    Created vs closed per day, SLA breaches per day, the category heatmap
    and the per-agent status table for the matching tickets.
    """
    return await service.overview(filters)


@router.get("/summary", response_model=StatusSummaryResponse, summary="Ticket status summary")
async def get_summary(service: ReportsService = Depends(get_reports_service)):
    return await service.summary()


@router.get(
    "/export.csv",
    summary="Export tickets as CSV",
    response_class=Response,
    responses={
        200: {"content": {"text/csv": {}}},
        422: {"description": "No tickets match the filters"},
    },
)
async def export_csv(
    filters: TicketFilters = Depends(get_ticket_filters),
    service: ReportsService = Depends(get_reports_service),
):
    filename, content = await service.export_csv(filters)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/export.xlsx",
    summary="Export tickets as an XLSX workbook",
    response_class=Response,
    responses={
        200: {"content": {XLSX_MEDIA_TYPE: {}}},
        422: {"description": "No tickets match the filters"},
    },
)
async def export_xlsx(
    filters: TicketFilters = Depends(get_ticket_filters),
    service: ReportsService = Depends(get_reports_service),
):
    filename, content = await service.export_xlsx(filters)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


reports_router = router
