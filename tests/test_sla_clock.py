from datetime import timedelta

import pytest

from mantra.config import SLAClassification, TicketStatus
from mantra.core import InvalidTimestampException, ValidationException
from mantra.sla.domain import (
    DEFAULT_PRIORITY_BANDS,
    HelpdeskRules,
    PriorityBand,
    SLACalculator,
    SLAClock,
    format_countdown,
)


def test_countdown_uses_days_hours_minutes():
    assert format_countdown(timedelta(milliseconds=90_000_000)) == "1d 1h 0m"
    assert format_countdown(timedelta(hours=2, minutes=5, seconds=59)) == "2h 5m"
    assert format_countdown(timedelta(seconds=59)) == "0m"
    assert format_countdown(timedelta(minutes=42)) == "42m"


def test_open_ticket_before_deadline_is_on_track_with_countdown():
    reading = SLAClock.evaluate(
        "in_progress",
        "2024-01-01T04:00:00Z",
        None,
        "2024-01-01T02:30:00Z",
    )

    assert reading.classification == SLAClassification.ON_TRACK
    assert reading.countdown == "1h 30m"
    assert reading.label == "1h 30m"
    assert reading.remaining_seconds == 5400.0


def test_open_ticket_past_deadline_is_overdue_without_countdown():
    reading = SLAClock.evaluate(
        TicketStatus.IN_PROGRESS,
        "2024-01-01T04:00:00Z",
        None,
        "2024-01-01T05:00:00Z",
    )

    assert reading.classification == SLAClassification.OVERDUE
    assert reading.countdown is None
    assert reading.label == "OVERDUE"


def test_deadline_equal_to_now_is_overdue():
    reading = SLAClock.evaluate("new", "2024-01-01T04:00:00Z", None, "2024-01-01T04:00:00Z")

    assert reading.classification == SLAClassification.OVERDUE


def test_resolved_before_deadline_is_on_time():
    reading = SLAClock.evaluate(
        "resolved",
        "2024-01-01T04:00:00Z",
        "2024-01-01T03:30:00Z",
        "2024-01-01T09:00:00Z",
    )

    assert reading.classification == SLAClassification.RESOLVED_ON_TIME
    assert reading.countdown is None


def test_resolved_exactly_at_deadline_is_on_time():
    reading = SLAClock.evaluate("closed", "2024-01-01T04:00:00Z", "2024-01-01T04:00:00Z", "2024-01-02T00:00:00Z")

    assert reading.classification == SLAClassification.RESOLVED_ON_TIME


def test_closed_after_deadline_is_late():
    reading = SLAClock.evaluate("closed", "2024-01-01T04:00:00Z", "2024-01-01T04:00:01Z", "2024-01-02T00:00:00Z")

    assert reading.classification == SLAClassification.RESOLVED_LATE
    assert reading.label == "RESOLVED LATE"


def test_closed_without_resolution_time_falls_back_to_now():
    on_time = SLAClock.evaluate("closed", "2024-01-01T04:00:00Z", None, "2024-01-01T03:00:00Z")
    late = SLAClock.evaluate("closed", "2024-01-01T04:00:00Z", None, "2024-01-01T05:00:00Z")

    assert on_time.classification == SLAClassification.RESOLVED_ON_TIME
    assert late.classification == SLAClassification.RESOLVED_LATE


def test_missing_deadline_is_not_set():
    reading = SLAClock.evaluate("new", None, None, "2024-01-01T00:00:00Z")

    assert reading.classification == SLAClassification.NOT_SET
    assert reading.label == "NOT SET"


def test_offset_less_timestamps_are_utc():
    naive = SLAClock.evaluate("new", "2024-01-01T00:00:00", None, "2023-12-31T23:00:00Z")
    explicit = SLAClock.evaluate("new", "2024-01-01T00:00:00Z", None, "2023-12-31T23:00:00Z")

    assert naive == explicit
    assert naive.countdown == "1h 0m"


def test_malformed_deadline_raises():
    with pytest.raises(InvalidTimestampException):
        SLAClock.evaluate("new", "not a date", None, "2024-01-01T00:00:00Z")


def test_malformed_now_raises_even_without_deadline():
    with pytest.raises(InvalidTimestampException):
        SLAClock.evaluate("new", None, None, "yesterday")


def test_p1_ticket_end_to_end():
    created = "2024-01-01T00:00:00Z"
    deadline = SLACalculator.calculate_deadline(created, 4)

    overdue = SLAClock.evaluate("in_progress", deadline, None, "2024-01-01T05:00:00Z")
    resolved = SLAClock.evaluate("resolved", deadline, "2024-01-01T03:30:00Z", "2024-01-01T05:00:00Z")

    assert deadline.isoformat() == "2024-01-01T04:00:00+00:00"
    assert overdue.classification == SLAClassification.OVERDUE
    assert resolved.classification == SLAClassification.RESOLVED_ON_TIME


def test_negative_sla_hours_rejected():
    with pytest.raises(ValidationException):
        SLACalculator.calculate_deadline("2024-01-01T00:00:00Z", -1)


@pytest.mark.parametrize("sla_hours", [float("inf"), float("nan"), 1e12, 24 * 366 * 9000])
def test_unrepresentable_sla_hours_rejected(sla_hours):
    with pytest.raises(ValidationException):
        SLACalculator.calculate_deadline("2024-01-01T00:00:00Z", sla_hours)


def test_deadline_with_store_shaped_creation_time():
    reading = SLAClock.evaluate("new", "2024-01-01T04:00:00.12345+00:00", None, "2024-01-01T02:30:00Z")

    assert reading.classification == SLAClassification.ON_TRACK
    assert reading.countdown == "1h 30m"


@pytest.mark.parametrize(
    "sla_hours, expected",
    [(1, "P1"), (4, "P1"), (8, "P2"), (24, "P2"), (72, "P3")],
)
def test_priority_bands(sla_hours, expected):
    assert SLACalculator.priority_for_sla_hours(sla_hours, DEFAULT_PRIORITY_BANDS) == expected


def test_priority_bands_without_catch_all_use_widest():
    bands = [PriorityBand(label="Fast", max_sla_hours=2), PriorityBand(label="Slow", max_sla_hours=10)]

    assert SLACalculator.priority_for_sla_hours(50, bands) == "Slow"


def test_is_breached():
    assert SLACalculator.is_breached("2024-01-01T04:00:00Z", "2024-01-01T05:00:00Z", "2024-01-01T03:00:00Z")
    assert not SLACalculator.is_breached("2024-01-01T04:00:00Z", "2024-01-01T03:00:00Z", "2024-01-02T00:00:00Z")
    assert SLACalculator.is_breached("2024-01-01T04:00:00Z", None, "2024-01-01T04:00:01Z")
    assert not SLACalculator.is_breached(None, None, "2024-01-01T04:00:01Z")


def test_rules_reject_unknown_timezone():
    with pytest.raises(ValueError):
        HelpdeskRules(display_timezone="Mars/Olympus")


def test_rules_merge_window():
    assert HelpdeskRules().comment_merge_window == timedelta(seconds=120)
    assert HelpdeskRules(priority_bands=[]).priority_for(3) == "P1"
