from datetime import date
from io import BytesIO
from unittest.mock import AsyncMock

import pytest
from openpyxl import load_workbook

from mantra.core import ValidationException
from mantra.reports.application import (
    ReportsService,
    export_to_csv,
    export_to_xlsx,
    format_ticket_for_export,
    generate_export_filename,
)
from mantra.reports.domain import (
    agent_report,
    category_heatmap,
    sla_breaches_by_day,
    status_summary,
    tickets_created_vs_closed,
)
from mantra.tickets.application import ITicketRepository, TicketFilters

from conftest import make_ticket, utc

IST = "Asia/Kolkata"
NOW = utc(2024, 1, 10, 12, 0)


class TestAggregations:
    def test_created_vs_closed_by_display_day(self):
        tickets = [
            make_ticket(id="a", created_at=utc(2024, 1, 1, 0, 0)),
            # 20:00 UTC falls on the next IST day
            make_ticket(id="b", created_at=utc(2024, 1, 1, 20, 0), status="closed",
                        resolved_at=utc(2024, 1, 3, 1, 0)),
            make_ticket(id="c", created_at=utc(2024, 1, 2, 1, 0), status="resolved",
                        resolved_at=utc(2024, 1, 2, 3, 0)),
        ]

        points = tickets_created_vs_closed(tickets, IST)

        assert [(p.date, p.created, p.closed) for p in points] == [
            ("2024-01-01", 1, 0),
            ("2024-01-02", 2, 0),
            ("2024-01-03", 0, 1),
        ]

    def test_sla_breaches_per_creation_day(self):
        tickets = [
            make_ticket(id="open-late"),
            make_ticket(id="fixed-in-time", status="resolved", resolved_at=utc(2024, 1, 1, 3, 0)),
            make_ticket(id="no-deadline", sla_deadline=None),
        ]

        (point,) = sla_breaches_by_day(tickets, NOW, IST)

        assert point.date == "2024-01-01"
        assert point.total == 3
        assert point.breaches == 1
        assert point.percentage == pytest.approx(100 / 3)

    def test_category_heatmap(self):
        tickets = [
            make_ticket(category_name="Network"),
            make_ticket(category_name="Network"),
            make_ticket(category_name="Hardware"),
            make_ticket(category_name=None),
        ]

        cells = {c.category: (c.count, c.intensity) for c in category_heatmap(tickets)}

        assert cells == {"Network": (2, 100.0), "Hardware": (1, 50.0), "Uncategorized": (1, 50.0)}
        assert category_heatmap([]) == []

    def test_agent_report_counts_assigned_tickets(self):
        tickets = [
            make_ticket(status="new"),
            make_ticket(status="in_progress"),
            make_ticket(status="closed"),
            make_ticket(assigned_to=None, assignee_name=None),
        ]

        rows = {r.agent_id: r for r in agent_report(tickets)}

        assert rows["u-agent"].agent_name == "Arjun"
        assert (rows["u-agent"].new, rows["u-agent"].in_progress, rows["u-agent"].closed) == (1, 1, 1)
        assert rows["u-agent"].total == 3
        assert rows["u-creator"].total == 0

    def test_status_summary(self):
        tickets = [
            make_ticket(status="new", created_at=utc(2024, 1, 9, 0, 0)),
            make_ticket(status="new", created_at=utc(2024, 1, 1, 0, 0)),
            make_ticket(status=None, created_at=utc(2024, 1, 8, 0, 0)),
        ]

        summary = status_summary(tickets, NOW)

        assert {c.status: c.count for c in summary.weekly} == {"new": 1, "unknown": 1}
        assert {c.status: c.count for c in summary.all_time} == {"new": 2, "unknown": 1}


class TestExport:
    def test_row_layout(self):
        ticket = make_ticket(status="resolved", resolved_at=utc(2024, 1, 1, 2, 30), is_l3=True)

        row = format_ticket_for_export(ticket, IST)

        assert list(row) == [
            "Ticket ID", "Title", "Description", "Status", "Priority", "SLA Hours",
            "Category", "Created By", "Assigned To", "L3 Escalation", "Created Date",
            "SLA Deadline", "Resolved Date", "Resolution Time (Hours)",
        ]
        assert row["Ticket ID"] == "IT-0001"
        assert row["Status"] == "RESOLVED"
        assert row["Priority"] == "Critical"
        assert row["SLA Hours"] == 4
        assert row["L3 Escalation"] == "Yes"
        assert row["Created Date"] == "Jan 1, 2024 5:30 AM IST"
        assert row["SLA Deadline"] == "Jan 1, 2024 9:30 AM IST"
        assert row["Resolved Date"] == "Jan 1, 2024 8:00 AM IST"
        # 2.5 hours rounds up
        assert row["Resolution Time (Hours)"] == 3

    def test_row_fallbacks(self):
        ticket = make_ticket(
            status="in_progress",
            urgency_label=None,
            urgency_sla_hours=None,
            category_name=None,
            assigned_to=None,
            assignee_name=None,
            sla_deadline=None,
        )

        row = format_ticket_for_export(ticket, IST)

        assert row["Status"] == "IN PROGRESS"
        assert row["Priority"] == "N/A"
        assert row["SLA Hours"] == "N/A"
        assert row["Category"] == "N/A"
        assert row["Assigned To"] == "Unassigned"
        assert row["SLA Deadline"] == "Not set"
        assert row["Resolved Date"] == "Not Resolved"
        assert row["Resolution Time (Hours)"] == "N/A"

    def test_csv_quotes_only_when_needed(self):
        rows = [
            {"Title": 'Say "hi", please', "Notes": "line one\nline two", "Count": 3},
            {"Title": "plain", "Notes": "", "Count": 0},
        ]

        content = export_to_csv(rows)

        assert content == (
            "Title,Notes,Count\n"
            '"Say ""hi"", please","line one\nline two",3\n'
            "plain,,0"
        )

    def test_csv_requires_rows(self):
        with pytest.raises(ValidationException, match="No data to export"):
            export_to_csv([])

    def test_xlsx_workbook(self):
        rows = [
            {"Title": 'Say "hi", please', "Notes": "x" * 80, "Count": 3},
            {"Title": "plain", "Notes": "short", "Count": 0},
        ]

        workbook = load_workbook(BytesIO(export_to_xlsx(rows)))
        sheet = workbook["Tickets"]

        assert workbook.sheetnames == ["Tickets"]
        assert [list(r) for r in sheet.iter_rows(values_only=True)] == [
            ["Title", "Notes", "Count"],
            ['Say "hi", please', "x" * 80, 3],
            ["plain", "short", 0],
        ]
        assert sheet.column_dimensions["A"].width == 18
        assert sheet.column_dimensions["B"].width == 50
        assert sheet.column_dimensions["C"].width == 10

    def test_xlsx_requires_rows(self):
        with pytest.raises(ValidationException, match="No data to export"):
            export_to_xlsx([])

    def test_filename(self):
        ranged = TicketFilters(date_from=date(2024, 1, 1), date_to=date(2024, 1, 31))

        assert generate_export_filename(TicketFilters(), date(2024, 2, 1)) == "tickets_export_2024-02-01"
        assert generate_export_filename(ranged, date(2024, 2, 1)) == (
            "tickets_export_2024-01-01_to_2024-01-31_2024-02-01"
        )
        assert generate_export_filename(
            TicketFilters(date_from=date(2024, 1, 1)), date(2024, 2, 1)
        ) == "tickets_export_2024-02-01"


class TestReportsService:
    @pytest.fixture
    def repo(self):
        repo = AsyncMock(spec=ITicketRepository)
        repo.list_snapshots.return_value = [make_ticket(), make_ticket(id="t-2", status="closed",
                                                                       resolved_at=utc(2024, 1, 2, 0, 0))]
        return repo

    @pytest.mark.asyncio
    async def test_overview(self, repo, rules_provider):
        overview = await ReportsService(repo, rules_provider, clock=lambda: NOW).overview(TicketFilters())

        assert overview.ticket_count == 2
        assert overview.generated_at == NOW
        assert [p.date for p in overview.tickets_created_vs_closed] == ["2024-01-01", "2024-01-02"]
        assert overview.categories[0].category == "Network"
        assert overview.agents[-1].agent_id == "u-agent"

    @pytest.mark.asyncio
    async def test_export_scopes_agent_filter_to_assignee(self, repo, rules_provider):
        service = ReportsService(repo, rules_provider, clock=lambda: NOW)

        filename, content = await service.export_csv(TicketFilters(agent_id="u-agent"))

        scoped = repo.list_snapshots.await_args.args[0]
        assert scoped.agent_scope == "assigned"
        assert scoped.agent_id == "u-agent"
        assert filename == "tickets_export_2024-01-10.csv"
        assert content.splitlines()[0].startswith("Ticket ID,Title,Description,Status")
        assert len(content.splitlines()) == 3

    @pytest.mark.asyncio
    async def test_xlsx_export_has_same_rows(self, repo, rules_provider):
        service = ReportsService(repo, rules_provider, clock=lambda: NOW)

        filename, content = await service.export_xlsx(TicketFilters())

        rows = list(load_workbook(BytesIO(content))["Tickets"].iter_rows(values_only=True))
        assert filename == "tickets_export_2024-01-10.xlsx"
        assert rows[0][:4] == ("Ticket ID", "Title", "Description", "Status")
        assert [r[3] for r in rows[1:]] == ["IN PROGRESS", "CLOSED"]

    @pytest.mark.asyncio
    async def test_export_with_no_tickets(self, repo, rules_provider):
        repo.list_snapshots.return_value = []

        with pytest.raises(ValidationException):
            await ReportsService(repo, rules_provider).export_csv(TicketFilters())

    @pytest.mark.asyncio
    async def test_summary(self, repo, rules_provider):
        summary = await ReportsService(repo, rules_provider, clock=lambda: NOW).summary()

        assert {c.status: c.count for c in summary.all_time} == {"in_progress": 1, "closed": 1}
        assert summary.weekly == []
