from datetime import date

import pytest

from trackers.performance_agent.backend.forms import DailyRecord, Entry
from trackers.performance_agent.backend.periods import (
    date_key,
    mean_performance,
    period_filter,
    period_for_date,
    period_summary,
)


def _records():
    return {
        "2025-09-01": DailyRecord(normal=Entry(performance=7.0, hours=8)),
        "2025-09-10": {"normal": {"performance": 9.0, "hours": 8}},
        "2025-09-12": DailyRecord(forklift=Entry(performance=20.0, hours=8)),
        "2025-09-20": DailyRecord(
            normal=Entry(performance=8.0, hours=8), forklift=Entry(performance=10.0, hours=8)
        ),
        "2025-10-05": DailyRecord(normal=Entry(performance=100.0, hours=8)),
        "not-a-date": {"normal": {"performance": 50}},
    }


def test_period_for_date():
    assert period_for_date(date(2025, 9, 15)) == "first half"
    assert period_for_date(date(2025, 9, 16)) == "second half"
    assert period_filter("second half")(date(2025, 2, 28))
    assert not period_filter("first half")(date(2025, 2, 28))


def test_mean_performance_filters_by_predicate_and_track():
    records = _records()
    september_first_half = lambda d: d.month == 9 and d.day <= 15  # noqa: E731
    assert mean_performance(records, september_first_half, "normal") == pytest.approx(8.0)
    assert mean_performance(records, september_first_half, "forklift") == pytest.approx(20.0)


def test_mean_performance_treats_non_numeric_as_zero():
    records = {
        "2025-09-01": {"normal": {"performance": "abc", "hours": 8}},
        "2025-09-02": {"normal": {"hours": 8}},
        "2025-09-03": {"normal": {"performance": 6.0, "hours": 8}},
    }
    assert mean_performance(records, lambda d: True) == pytest.approx(2.0)


def test_mean_performance_empty_selection_is_zero():
    assert mean_performance({}, lambda d: True) == 0
    assert mean_performance(_records(), lambda d: d.year == 1999) == 0


def test_period_summary_uses_same_half_of_same_month():
    summary = period_summary(_records(), date(2025, 9, 3))
    assert summary["period"] == "first half"
    assert summary["entries"] == 2
    assert summary["mean_performance"] == 8.0
    assert summary["percentage"] == 110


def test_period_summary_all_months():
    summary = period_summary(_records(), date(2025, 9, 3), all_months=True)
    assert summary["entries"] == 3
    assert summary["mean_performance"] == pytest.approx(38.67)


def test_date_key_is_zero_padded():
    assert date_key(date(2025, 3, 7)) == "2025-03-07"


def test_period_summary_rounds_mean_half_up_before_rescaling():
    records = {
        "2025-09-01": DailyRecord(normal=Entry(performance=10.5, hours=8)),
        "2025-09-02": DailyRecord(normal=Entry(performance=10.75, hours=8)),
    }
    summary = period_summary(records, date(2025, 9, 3))
    assert summary["mean_performance"] == 10.63
    assert summary["percentage"] == 147
