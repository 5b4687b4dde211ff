from datetime import datetime, timezone

import pytest

from solplan.models.errors import ConfigurationError
from solplan.models.projection.dca_schedule import calculate_dca_schedule, days_since


def test_monthly_schedule_clamps_month_ends():
    sched = calculate_dca_schedule("2024-01-31", "monthly", 250, now=datetime(2024, 4, 15))
    assert sched.all_due_dates == [datetime(2024, 2, 29), datetime(2024, 3, 31)]
    assert sched.next_dca_date == datetime(2024, 4, 30)
    assert sched.missed_count == 2
    assert sched.missed_total == 500
    assert sched.completed_estimate == 0


def test_weekly_schedule_counts_due_date_equal_to_now():
    sched = calculate_dca_schedule(datetime(2024, 1, 1), "weekly", 10, now=datetime(2024, 1, 22))
    assert sched.total_due_count == 3
    assert sched.next_dca_date == datetime(2024, 1, 29)


def test_nothing_due_yet():
    sched = calculate_dca_schedule("2024-06-01T09:00:00", "yearly", 1000, now=datetime(2024, 12, 31))
    assert sched.missed_count == 0
    assert sched.missed_total == 0
    assert sched.next_dca_date == datetime(2025, 6, 1, 9, 0)


def test_daily_schedule():
    sched = calculate_dca_schedule("2024-03-01", "daily", 5, now=datetime(2024, 3, 11))
    assert sched.missed_count == 10


def test_unknown_frequency():
    with pytest.raises(ConfigurationError):
        calculate_dca_schedule("2024-01-01", "fortnightly", 10, now=datetime(2024, 2, 1))


def test_days_since():
    assert days_since("2024-01-01", now=datetime(2024, 1, 11)) == 10


def test_zoned_activation_with_naive_now_reads_now_as_utc():
    sched = calculate_dca_schedule("2024-01-01T00:00:00Z", "monthly", 100, now=datetime(2024, 2, 1))
    assert sched.missed_count == 1
    assert sched.next_dca_date == datetime(2024, 3, 1, tzinfo=timezone.utc)


def test_naive_activation_with_zoned_now():
    now = datetime(2024, 1, 15, tzinfo=timezone.utc)
    sched = calculate_dca_schedule("2024-01-01", "weekly", 10, now=now)
    assert sched.missed_count == 2
    assert days_since("2024-01-01", now=now) == 14
