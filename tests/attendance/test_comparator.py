from datetime import time

import pytest

from timeclock.attendance.comparator import ScheduleComparator, classify
from timeclock.attendance.factory import ComparisonStrategyFactory
from timeclock.attendance.strategies.arrival_strategy import ArrivalStrategy
from timeclock.attendance.strategies.departure_strategy import DepartureStrategy
from timeclock.core.enums import ClockEventKind


@pytest.mark.parametrize(
    "actual, delay, flagged",
    [
        (time(8, 40), -20, False),
        (time(9, 0), 0, False),
        (time(9, 15), 15, False),
        (time(9, 16), 16, True),
    ],
)
def test_arrival_grace_is_fifteen_minutes(actual, delay, flagged):
    result = classify(time(9, 0), actual, ClockEventKind.ARRIVAL)

    assert result.delay_minutes == delay
    assert result.flagged is flagged


@pytest.mark.parametrize(
    "actual, delay, flagged",
    [
        (time(17, 30), -30, False),
        (time(17, 0), 0, False),
        (time(16, 59), 1, True),
    ],
)
def test_any_early_departure_is_flagged(actual, delay, flagged):
    result = classify(time(17, 0), actual, ClockEventKind.DEPARTURE)

    assert result.delay_minutes == delay
    assert result.flagged is flagged


def test_seconds_are_ignored():
    assert classify(time(9, 0), time(9, 15, 59), ClockEventKind.ARRIVAL).flagged is False


def test_no_schedule_never_flags():
    result = ScheduleComparator().classify(None, time(23, 0), ClockEventKind.ARRIVAL)
    assert result.flagged is False
    assert result.delay_minutes == 0


def test_factory_picks_strategy_and_grace():
    factory = ComparisonStrategyFactory(late_grace_minutes=5, early_exit_grace_minutes=10)

    arrival = factory.for_kind(ClockEventKind.ARRIVAL)
    departure = factory.for_kind("departure")

    assert isinstance(arrival, ArrivalStrategy) and arrival.grace_minutes == 5
    assert isinstance(departure, DepartureStrategy) and departure.grace_minutes == 10


def test_custom_grace_periods_apply():
    comparator = ScheduleComparator(ComparisonStrategyFactory(late_grace_minutes=5, early_exit_grace_minutes=10))

    assert comparator.classify(time(9, 0), time(9, 6), ClockEventKind.ARRIVAL).flagged is True
    assert comparator.classify(time(17, 0), time(16, 50), ClockEventKind.DEPARTURE).flagged is False
