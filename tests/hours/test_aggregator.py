from __future__ import annotations

from datetime import date, time

import pytest

from timeclock.attendance.model import AttendanceRecord
from timeclock.core.enums import EmploymentType
from timeclock.hours.aggregator import HoursAggregator, HoursTargets

# Wednesday; ISO week is Mon 2025-03-10 .. Sun 2025-03-16
REF = date(2025, 3, 12)

_next_id = iter(range(1, 10_000))


def worked(employee_id: int, day: date, hours: int, *, deleted: bool = False) -> AttendanceRecord:
    rec = AttendanceRecord(record_id=next(_next_id), employee_id=employee_id, work_date=day)
    rec = rec.with_times(clock_in=time(8, 0), clock_out=time(8 + hours, 0))
    return rec.with_times(clock_in=rec.clock_in, clock_out=rec.clock_out, deleted=deleted)


def test_deleted_records_are_excluded():
    records = [
        worked(1, date(2025, 3, 10), 8),
        worked(1, date(2025, 3, 11), 8),
        worked(1, date(2025, 3, 12), 8, deleted=True),
    ]

    summary = HoursAggregator().summarize(records, REF, {1: EmploymentType.FULL_TIME})[1]

    assert summary.week_hours == 16
    assert summary.month_hours == 16


def test_week_and_month_windows():
    records = [
        worked(1, date(2025, 3, 9), 4),  # Sunday of the previous week, same month
        worked(1, date(2025, 3, 16), 2),  # Sunday closing the week
        worked(1, date(2025, 3, 17), 1),  # next week, same month
        worked(1, date(2025, 2, 28), 8),  # previous month
    ]

    summary = HoursAggregator().summarize(records, REF)[1]

    assert summary.week_hours == 2
    assert summary.month_hours == 7


def test_week_straddling_month_boundary():
    # ISO week of 2025-04-01 starts Monday 2025-03-31
    records = [worked(1, date(2025, 3, 31), 8), worked(1, date(2025, 4, 1), 6)]

    summary = HoursAggregator().summarize(records, date(2025, 4, 1))[1]

    assert summary.week_hours == 14
    assert summary.month_hours == 6


def test_targets_by_employment_type():
    result = HoursAggregator().summarize(
        [worked(1, REF, 8), worked(2, REF, 4)],
        REF,
        {1: EmploymentType.FULL_TIME, 2: EmploymentType.PART_TIME},
    )

    assert (result[1].week_target, result[1].month_target) == (48, 192)
    assert (result[2].week_target, result[2].month_target) == (24, 96)


def test_configurable_targets():
    aggregator = HoursAggregator(HoursTargets({"full_time": (40, 160), "part_time": (20, 80)}))
    result = aggregator.summarize([worked(1, REF, 8)], REF, {1: EmploymentType.FULL_TIME})
    assert result[1].week_target == 40


def test_rank_by_month_hours_with_stable_ties():
    records = [
        worked(3, date(2025, 3, 3), 5),
        worked(1, date(2025, 3, 4), 5),
        worked(2, date(2025, 3, 5), 9),
    ]

    result = HoursAggregator().summarize(records, REF)

    assert list(result) == [2, 3, 1]
    assert [result[i].rank for i in (2, 3, 1)] == [1, 2, 3]


def test_employees_without_records_get_zero_rows():
    result = HoursAggregator().summarize([worked(1, REF, 3)], REF, {1: EmploymentType.FULL_TIME, 5: EmploymentType.PART_TIME})

    assert result[5].week_hours == 0
    assert result[5].rank == 2


def test_progress_and_display_rounding():
    rec = AttendanceRecord(record_id=1, employee_id=1, work_date=REF).with_times(clock_in=time(9, 10), clock_out=time(16, 45))

    summary = HoursAggregator().summarize([rec], REF, {1: EmploymentType.PART_TIME})[1]
    shown = summary.display()

    assert summary.week_hours == 7.58
    assert shown["week_hours"] == 7.6
    assert shown["week_progress"] == pytest.approx(31.6)
    assert shown["week_complete"] is False


def test_progress_is_capped_and_complete_flag():
    records = [worked(2, date(2025, 3, d), 8) for d in (10, 11, 12, 13)]

    summary = HoursAggregator().summarize(records, REF, {2: EmploymentType.PART_TIME})[2]

    assert summary.week_hours == 32
    assert summary.week_progress == 100
    assert summary.week_complete is True
    assert summary.month_complete is False


def test_team_overview():
    result = HoursAggregator().summarize([worked(1, REF, 8), worked(2, REF, 4)], REF)
    overview = HoursAggregator.team_overview(result)

    assert overview.employee_count == 2
    assert overview.total_week_hours == 12
    assert overview.average_month_hours == 6


def test_team_overview_empty():
    overview = HoursAggregator.team_overview({})
    assert overview.employee_count == 0
    assert overview.average_week_hours == 0
