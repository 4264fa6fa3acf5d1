"""
Ticket Export
=============

Flattens ticket snapshots into spreadsheet rows and writes them as CSV
or as an XLSX workbook.
"""

import csv
import io
import math
from datetime import date
from typing import Any, Dict, Iterable, List, Union

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from mantra.core import ValidationException
from mantra.shared.timestamps import format_ticket_datetime
from mantra.tickets.application import TicketFilters
from mantra.tickets.domain import TicketSnapshot

EXPORT_BASENAME = "tickets_export"
NOT_AVAILABLE = "N/A"


def _number(value: float) -> Union[int, float]:
    return int(value) if float(value).is_integer() else value


def _resolution_hours(ticket: TicketSnapshot) -> Union[int, str]:
    if ticket.resolved_at is None or ticket.created_at is None:
        return NOT_AVAILABLE
    hours = (ticket.resolved_at - ticket.created_at).total_seconds() / 3600
    # Half hours round up
    return math.floor(hours + 0.5)


def format_ticket_for_export(ticket: TicketSnapshot, tz_name: str) -> Dict[str, Any]:
    """One export row; keys are the column headers in output order."""
    return {
        "Ticket ID": ticket.display_id,
        "Title": ticket.title,
        "Description": ticket.description,
        "Status": (ticket.status or NOT_AVAILABLE).upper().replace("_", " "),
        "Priority": ticket.urgency_label or NOT_AVAILABLE,
        "SLA Hours": _number(ticket.urgency_sla_hours) if ticket.urgency_sla_hours else NOT_AVAILABLE,
        "Category": ticket.category_name or NOT_AVAILABLE,
        "Created By": ticket.creator_name or NOT_AVAILABLE,
        "Assigned To": ticket.assignee_name or "Unassigned",
        "L3 Escalation": "Yes" if ticket.is_l3 else "No",
        "Created Date": format_ticket_datetime(ticket.created_at, tz_name),
        "SLA Deadline": format_ticket_datetime(ticket.sla_deadline, tz_name),
        "Resolved Date": (
            format_ticket_datetime(ticket.resolved_at, tz_name) if ticket.resolved_at else "Not Resolved"
        ),
        "Resolution Time (Hours)": _resolution_hours(ticket),
    }


def export_to_csv(rows: List[Dict[str, Any]]) -> str:
    """
    Render rows as CSV with a header line taken from the first row.

    Fields holding a comma, quote or newline are quoted; quotes are doubled.

    Raises:
        ValidationException: if there are no rows
    """
    if not rows:
        raise ValidationException("No data to export")

    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=list(rows[0].keys()),
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
        extrasaction="ignore",
    )
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue().rstrip("\n")


XLSX_SHEET_TITLE = "Tickets"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def export_to_xlsx(rows: List[Dict[str, Any]]) -> bytes:
    """
    Render rows as a one-sheet workbook with a header row taken from the
    first row. Column widths fit the longest cell, clamped to 10..50.

    Raises:
        ValidationException: if there are no rows
    """
    if not rows:
        raise ValidationException("No data to export")

    headers = list(rows[0].keys())
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = XLSX_SHEET_TITLE
    sheet.append(headers)
    for row in rows:
        sheet.append([row.get(header) for header in headers])

    for index, header in enumerate(headers, start=1):
        longest = max([len(header)] + [len(str(row.get(header) or "")) for row in rows])
        sheet.column_dimensions[get_column_letter(index)].width = min(max(longest + 2, 10), 50)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def generate_export_filename(filters: TicketFilters, today: date) -> str:
    """``tickets_export[_{from}_to_{to}]_{today}``, without extension."""
    suffix = ""
    if filters.date_from and filters.date_to:
        suffix = f"_{filters.date_from.isoformat()}_to_{filters.date_to.isoformat()}"
    return f"{EXPORT_BASENAME}{suffix}_{today.isoformat()}"


def export_rows(tickets: Iterable[TicketSnapshot], tz_name: str) -> List[Dict[str, Any]]:
    return [format_ticket_for_export(ticket, tz_name) for ticket in tickets]
