from unittest.mock import AsyncMock

import pytest

from mantra.config import SLAClassification
from mantra.core import ConfigurationException, ResourceNotFoundException
from mantra.sla.application import SLAMonitor, SLAService, evaluate_ticket, summarize
from mantra.sla.domain import HelpdeskRules
from mantra.tickets.application import ITicketRepository, TicketFilters

from conftest import StaticRulesProvider, make_ticket, utc

NOW = utc(2024, 1, 1, 5, 0)


def _tickets():
    return [
        make_ticket(id="t-overdue"),
        make_ticket(id="t-on-track", sla_deadline=utc(2024, 1, 1, 8, 0)),
        make_ticket(id="t-late", status="resolved", resolved_at=utc(2024, 1, 1, 4, 30)),
        make_ticket(id="t-on-time", status="closed", resolved_at=utc(2024, 1, 1, 3, 0)),
        make_ticket(id="t-no-sla", sla_deadline=None, urgency_sla_hours=None),
    ]


@pytest.fixture
def ticket_repo():
    repo = AsyncMock(spec=ITicketRepository)
    repo.list_snapshots.return_value = _tickets()
    repo.get_snapshot.return_value = make_ticket(sla_deadline=utc(2024, 1, 1, 6, 30))
    return repo


@pytest.fixture
def service(ticket_repo, rules_provider):
    return SLAService(ticket_repo, rules_provider, clock=lambda: NOW)


class TestSLAService:
    @pytest.mark.asyncio
    async def test_reading_for_ticket(self, service):
        response = await service.reading_for_ticket("t-1")

        assert response.ticket_id == "t-1"
        assert response.display_id == "IT-0001"
        assert response.priority == "P1"
        assert response.sla.classification == "on_track"
        assert response.sla.countdown == "1h 30m"
        assert response.sla.deadline_display == "Jan 1, 2024 at 12:00 PM IST"

    @pytest.mark.asyncio
    async def test_missing_ticket(self, service, ticket_repo):
        ticket_repo.get_snapshot.return_value = None

        with pytest.raises(ResourceNotFoundException):
            await service.reading_for_ticket("nope")

    @pytest.mark.asyncio
    async def test_dashboard_summary(self, service):
        dashboard = await service.dashboard(TicketFilters())

        summary = dashboard.summary
        assert dashboard.total_count == 5
        assert summary.total_tickets == 5
        assert summary.overdue_count == 1
        assert summary.on_track_count == 1
        assert summary.resolved_late_count == 1
        assert summary.resolved_on_time_count == 1
        assert summary.not_set_count == 1
        assert summary.breach_rate == 50.0

    @pytest.mark.asyncio
    async def test_classification_filter_keeps_full_summary(self, service):
        dashboard = await service.dashboard(TicketFilters(), SLAClassification.OVERDUE)

        assert [t.ticket_id for t in dashboard.tickets] == ["t-overdue"]
        assert dashboard.total_count == 1
        assert dashboard.summary.total_tickets == 5

    @pytest.mark.asyncio
    async def test_dashboard_passes_filters_through(self, service, ticket_repo):
        filters = TicketFilters(status="new", limit=10)

        await service.dashboard(filters)

        ticket_repo.list_snapshots.assert_awaited_once_with(filters)

    def test_preview(self, service):
        preview = service.preview(24, created_at=utc(2024, 1, 1, 0, 0))

        assert preview.priority == "P2"
        assert preview.deadline == utc(2024, 1, 2, 0, 0)
        assert preview.deadline_display == "Jan 2, 2024 at 5:30 AM IST"

    def test_preview_defaults_to_now(self, service):
        assert service.preview(4).created_at == NOW

    @pytest.mark.asyncio
    async def test_repository_is_required_for_reads(self, rules_provider):
        with pytest.raises(ConfigurationException):
            await SLAService(None, rules_provider).dashboard(TicketFilters())

    def test_preview_uses_configured_bands(self):
        rules = HelpdeskRules(priority_bands=[{"label": "Urgent", "max_sla_hours": 48}])

        preview = SLAService(None, StaticRulesProvider(rules)).preview(30)

        assert preview.priority == "Urgent"


def test_summarize_without_deadlines():
    statuses = [evaluate_ticket(make_ticket(sla_deadline=None), HelpdeskRules(), NOW)]

    assert summarize(statuses).breach_rate == 0.0


def test_priority_only_attached_with_sla_hours():
    status = evaluate_ticket(make_ticket(urgency_sla_hours=None), HelpdeskRules(), NOW)

    assert status.priority is None


class TestSLAMonitor:
    def test_reports_each_ticket_once(self, rules_provider):
        monitor = SLAMonitor(rules_provider)

        first = monitor.sweep(_tickets(), NOW)
        second = monitor.sweep(_tickets(), NOW)

        assert first.tickets_evaluated == 3
        assert first.newly_overdue == ["t-overdue"]
        assert second.overdue == 1
        assert second.newly_overdue == []

    def test_ticket_becoming_overdue_later_is_reported(self, rules_provider):
        monitor = SLAMonitor(rules_provider)
        monitor.sweep(_tickets(), NOW)

        later = monitor.sweep(_tickets(), utc(2024, 1, 1, 9, 0))

        assert later.newly_overdue == ["t-on-track"]
        assert monitor.overdue_ticket_ids == {"t-overdue", "t-on-track"}

    def test_resolved_ticket_leaves_overdue_set(self, rules_provider):
        monitor = SLAMonitor(rules_provider)
        monitor.sweep([make_ticket(id="t-x")], NOW)

        monitor.sweep([make_ticket(id="t-x", status="resolved", resolved_at=NOW)], NOW)

        assert monitor.overdue_ticket_ids == set()

    @pytest.mark.asyncio
    async def test_run_lists_all_tickets(self, rules_provider, ticket_repo):
        result = await SLAMonitor(rules_provider).run(ticket_repo, now=NOW)

        ticket_repo.list_snapshots.assert_awaited_once_with(TicketFilters())
        assert result.overdue == 1
