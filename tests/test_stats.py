from datetime import datetime, timezone

import pytest

from stats import (
    dashboard_data,
    parse_timestamp,
    payment_stats,
    payment_windows,
    total_revenue,
)
from tests.conftest import make_contact, make_enrollment

# Monday
NOW = datetime(2026, 10, 5, 12, 0)


def paid(amount, when, status="success"):
    return make_enrollment("E", "A", "a@example.com", "Course", amount, status, when)


def test_parse_timestamp_variants():
    assert parse_timestamp("2026-10-05T09:30:00") == datetime(2026, 10, 5, 9, 30)
    assert parse_timestamp("2026-10-05") == datetime(2026, 10, 5)
    expected = datetime(2026, 10, 5, 9, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert parse_timestamp("2026-10-05T09:00:00.000Z") == expected
    assert parse_timestamp("not a date") is None
    assert parse_timestamp(None) is None


def test_week_starts_on_sunday():
    windows = payment_windows(NOW)
    assert windows["week"] == datetime(2026, 10, 4)
    assert windows["month"] == datetime(2026, 10, 1)
    assert windows["year"] == datetime(2026, 1, 1)
    # on a Sunday the week starts that same day
    assert payment_windows(datetime(2026, 10, 4, 8, 0))["week"] == datetime(2026, 10, 4)


def test_worked_example():
    enrollments = [
        paid(100, "2026-10-05T09:00:00"),
        paid(200, "2026-09-25T12:00:00"),
        paid(300, "2026-08-26T12:00:00"),
    ]
    stats = payment_stats(enrollments, NOW)
    assert stats.today == 100
    assert stats.thisWeek == 100
    assert stats.thisMonth == 100
    assert stats.thisYear == 600


def test_window_starts_are_inclusive():
    enrollments = [
        paid(10, "2026-10-04T00:00:00"),
        paid(20, "2026-10-03T23:59:59"),
        paid(40, "2026-10-01T00:00:00"),
        paid(80, "2026-01-01T00:00:00"),
        paid(160, "2025-12-31T23:59:59"),
    ]
    stats = payment_stats(enrollments, datetime(2026, 10, 10, 12, 0))
    assert stats.thisWeek == 10
    assert stats.thisMonth == 70
    assert stats.thisYear == 150


def test_only_successful_payments_count():
    enrollments = [
        paid(100, "2026-10-05T09:00:00"),
        paid(500, "2026-10-05T09:00:00", status="pending"),
        paid(700, "2026-10-05T09:00:00", status="failed"),
    ]
    stats = payment_stats(enrollments, NOW)
    assert stats.today == stats.thisYear == 100
    assert total_revenue(enrollments) == 100


@pytest.mark.parametrize("now", [
    datetime(2026, 3, 10, 9, 0),
    datetime(2026, 10, 5, 12, 0),
    datetime(2026, 12, 31, 23, 0),
])
def test_windows_are_nested(now):
    enrollments = [
        paid(1, "2025-12-31T22:00:00"),
        paid(2, "2026-01-01T05:00:00"),
        paid(4, "2026-02-28T10:00:00"),
        paid(8, "2026-03-01T08:00:00"),
        paid(16, "2026-10-04T10:00:00"),
        paid(32, "2026-10-05T11:00:00"),
        paid(64, "2026-12-31T10:00:00"),
    ]
    past = [e for e in enrollments if parse_timestamp(e["paymentInfo"]["paymentDate"]) <= now]
    stats = payment_stats(past, now)
    assert stats.today <= stats.thisWeek <= stats.thisMonth <= stats.thisYear


def test_missing_amount_counts_as_zero():
    enrollment = paid(None, "2026-10-05T09:00:00")
    assert payment_stats([enrollment], NOW).today == 0
    assert total_revenue([enrollment]) == 0


def test_dashboard_data(mongo):
    mongo["contacts"].insert_many([
        make_contact("C-1", "A", "a@example.com", "X", "2026-10-04T10:00:00"),
        make_contact("C-2", "B", "b@example.com", "X", "2026-09-28T12:00:00"),
        make_contact("C-3", "C", "c@example.com", "X", "2026-09-01T10:00:00"),
    ])
    mongo["enrollments"].insert_many([
        make_enrollment("E-1", "A", "a@example.com", "X", 100, "success", "2026-10-05T09:00:00"),
        make_enrollment("E-2", "B", "b@example.com", "X", 200, "success", "2026-09-25T12:00:00"),
        make_enrollment("E-3", "C", "c@example.com", "X", 400, "pending", "2026-10-02T12:00:00"),
    ])
    data = dashboard_data(mongo, NOW)
    assert data.totalContacts == 3
    assert data.totalEnrollments == 3
    assert data.totalRevenue == 300
    # cutoff is 2026-09-28T12:00:00, inclusive
    assert data.recentContacts == 2
    assert data.recentEnrollments == 2
    assert data.recentRevenue == 100
    assert data.paymentStats.today == 100
    assert data.paymentStats.thisYear == 300


def test_week_may_reach_into_previous_month():
    # Thursday 1 Jan: the week began on Sunday 28 Dec
    now = datetime(2026, 1, 1, 9, 0)
    enrollments = [paid(50, "2025-12-29T10:00:00"), paid(5, "2026-01-01T08:00:00")]
    stats = payment_stats(enrollments, now)
    assert stats.today == 5
    assert stats.thisWeek == 55
    assert stats.thisMonth == 5
    assert stats.thisYear == 5


def test_naive_datetimes_are_utc():
    expected = datetime(2026, 10, 5, 9, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert parse_timestamp(datetime(2026, 10, 5, 9, 0)) == expected
    assert parse_timestamp(datetime(2026, 10, 5, 9, 0)) == parse_timestamp("2026-10-05T09:00:00Z")


def test_string_amounts_are_coerced():
    enrollments = [
        paid("4999", "2026-10-05T09:00:00"),
        paid("1.5", "2026-10-05T09:00:00"),
        paid("n/a", "2026-10-05T09:00:00"),
    ]
    stats = payment_stats(enrollments, NOW)
    assert stats.today == 5000.5
    assert total_revenue(enrollments) == 5000.5
