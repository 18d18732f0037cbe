from datetime import datetime, timedelta

import pytest

from core.contracts import TimeInterval
from core.slots import (
    find_next_available_slot, round_to_interval, next_business_day, is_lunch_time
)

# 2026-10-19 is a Monday
MONDAY = datetime(2026, 10, 19)


def on(day_offset, hour, minute=0):
    return MONDAY + timedelta(days=day_offset, hours=hour, minutes=minute)


@pytest.mark.parametrize("value,expected", [
    (on(0, 10, 7), on(0, 10, 15)),
    (on(0, 10, 50), on(0, 11, 0)),
    (on(0, 10, 0), on(0, 10, 0)),
    (on(0, 23, 55), on(1, 0, 0)),
])
def test_round_to_interval(value, expected):
    assert round_to_interval(value) == expected


def test_round_drops_seconds():
    assert round_to_interval(on(0, 10, 15) + timedelta(seconds=40)) == on(0, 10, 15)


def test_next_business_day_skips_weekend():
    assert next_business_day(on(4, 15)) == on(7, 0)


def test_lunch_window():
    assert is_lunch_time(on(0, 12, 30))
    assert is_lunch_time(on(0, 13, 29))
    assert not is_lunch_time(on(0, 13, 30))


def test_free_calendar_rounds_start():
    assert find_next_available_slot(on(0, 10, 7), 30, []) == on(0, 10, 15)


def test_before_hours_moves_to_opening():
    assert find_next_available_slot(on(0, 7), 30, []) == on(0, 9)


def test_after_hours_moves_to_next_day():
    assert find_next_available_slot(on(0, 18), 30, []) == on(1, 9)


def test_friday_evening_moves_to_monday():
    assert find_next_available_slot(on(4, 17, 30), 30, []) == on(7, 9)


def test_weekend_moves_to_monday():
    assert find_next_available_slot(on(5, 10), 30, []) == on(7, 9)


def test_moves_past_conflicting_block():
    events = [TimeInterval(on(0, 9), on(0, 10), "Standup", "calendar")]
    assert find_next_available_slot(on(0, 9), 30, events) == on(0, 10, 15)


def test_task_blocks_too():
    events = [TimeInterval(on(0, 9), on(0, 9, 45), "Write", "task")]
    assert find_next_available_slot(on(0, 9), 30, events) == on(0, 10)


def test_skips_lunch():
    assert find_next_available_slot(on(0, 12, 30), 30, []) == on(0, 13, 30)


def test_task_ending_in_lunch_moves_after_it():
    assert find_next_available_slot(on(0, 12), 60, []) == on(0, 13, 30)


def test_task_ending_at_lunch_fits():
    assert find_next_available_slot(on(0, 12), 30, []) == on(0, 12)


def test_full_day_moves_to_next_day():
    events = [TimeInterval(on(0, 9), on(0, 17), "Offsite", "calendar")]
    assert find_next_available_slot(on(0, 9), 30, events) == on(1, 9)


def test_gives_up_after_two_weeks():
    events = [TimeInterval(on(0, 0), on(30, 0), "Vacation", "calendar")]
    assert find_next_available_slot(on(0, 9), 30, events) is None


def test_unusable_events_are_ignored():
    events = [TimeInterval("garbage", on(0, 11), "Bad", "calendar")]
    assert find_next_available_slot(on(0, 9), 30, events) == on(0, 9)


def test_enormous_duration_takes_rest_of_day():
    assert find_next_available_slot(on(0, 9), 6_000_000_000, []) == on(0, 9)


def test_search_past_last_date_finds_nothing():
    assert find_next_available_slot(datetime(9999, 12, 31, 18, 0), 30, []) is None
