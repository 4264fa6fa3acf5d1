"""
Reports Application Layer
=========================

Contains:
- Services: ReportsService
- Export: row formatting, CSV and XLSX rendering, file naming
- DTOs: report response models
"""

from mantra.reports.application.dto import (
    AgentRowResponse,
    CategoryCellResponse,
    CreatedClosedPointResponse,
    ReportsOverviewResponse,
    SLABreachPointResponse,
    StatusCountResponse,
    StatusSummaryResponse,
)
from mantra.reports.application.export import (
    XLSX_MEDIA_TYPE,
    export_rows,
    export_to_csv,
    export_to_xlsx,
    format_ticket_for_export,
    generate_export_filename,
)
from mantra.reports.application.services import ReportsService

__all__ = [
    "AgentRowResponse",
    "CategoryCellResponse",
    "CreatedClosedPointResponse",
    "ReportsOverviewResponse",
    "SLABreachPointResponse",
    "StatusCountResponse",
    "StatusSummaryResponse",
    "XLSX_MEDIA_TYPE",
    "export_rows",
    "export_to_csv",
    "export_to_xlsx",
    "format_ticket_for_export",
    "generate_export_filename",
    "ReportsService",
]
