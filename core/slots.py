# core/slots.py
"""
Free slot search for Groov.
Finds the next start time inside business hours that avoids lunch,
weekends and every existing time block.
"""
import math
from datetime import datetime, timedelta
from typing import Iterable, Optional, Union

from core import config
from core.contracts import TimeInterval
from core.conflicts import interval_bounds, overlaps
from core.timeparse import start_of_day


def round_to_interval(dt: datetime) -> datetime:
    """
    Round minutes up to the next interval mark, dropping seconds.

    Examples:
        10:07 -> 10:15
        10:50 -> 11:00
        10:15:40 -> 10:15
    """
    interval = config.MINUTES_INTERVAL
    rounded = math.ceil(dt.minute / interval) * interval
    base = dt.replace(minute=0, second=0, microsecond=0)
    return base + timedelta(minutes=rounded)


def is_weekend(dt: datetime) -> bool:
    return dt.weekday() >= 5


def next_business_day(dt: datetime) -> datetime:
    """Start of the next weekday after dt."""
    day = dt + timedelta(days=1)
    while is_weekend(day):
        day += timedelta(days=1)
    return start_of_day(day)


def business_start(dt: datetime) -> datetime:
    return dt.replace(hour=config.BUSINESS_START_HOUR, minute=0, second=0, microsecond=0)


def business_end(dt: datetime) -> datetime:
    return dt.replace(hour=config.BUSINESS_END_HOUR, minute=0, second=0, microsecond=0)


def within_business_hours(dt: datetime) -> bool:
    return config.BUSINESS_START_HOUR <= dt.hour < config.BUSINESS_END_HOUR


def lunch_window(dt: datetime) -> tuple[datetime, datetime]:
    start = dt.replace(hour=config.LUNCH_START_HOUR, minute=config.LUNCH_START_MINUTE,
                       second=0, microsecond=0)
    end = dt.replace(hour=config.LUNCH_END_HOUR, minute=config.LUNCH_END_MINUTE,
                     second=0, microsecond=0)
    return start, end


def is_lunch_time(dt: datetime) -> bool:
    total = dt.hour * 60 + dt.minute
    lunch_start = config.LUNCH_START_HOUR * 60 + config.LUNCH_START_MINUTE
    lunch_end = config.LUNCH_END_HOUR * 60 + config.LUNCH_END_MINUTE
    return lunch_start <= total < lunch_end


def find_next_available_slot(
    start: datetime,
    duration: Union[int, float],
    existing: Iterable[TimeInterval]
) -> Optional[datetime]:
    """
    Find the next free start time at or after start.

    Args:
        start: Earliest acceptable start
        duration: Task length in minutes
        existing: Time blocks to avoid (any source)

    Returns:
        Start of the first free slot, or None if nothing fits within
        MAX_DAYS_TO_CHECK business days
    """
    blocks = []
    for item in existing:
        bounds = interval_bounds(item, start)
        if bounds is not None:
            blocks.append(bounds)

    try:
        return _scan(start, duration, blocks)
    except OverflowError:
        # Search ran past the last representable date
        return None


def _scan(start: datetime, duration, blocks: list[tuple[datetime, datetime]]) -> Optional[datetime]:
    slot = round_to_interval(start)

    if slot.hour < config.BUSINESS_START_HOUR:
        slot = business_start(slot)
    if slot.hour >= config.BUSINESS_END_HOUR or is_weekend(slot):
        slot = business_start(next_business_day(slot))

    current_day = start_of_day(slot)
    days_checked = 0

    while days_checked < config.MAX_DAYS_TO_CHECK:
        if is_weekend(current_day):
            current_day = next_business_day(current_day)
            slot = business_start(current_day)
            continue

        if slot.hour >= config.BUSINESS_END_HOUR or slot.date() != current_day.date():
            current_day = next_business_day(current_day)
            slot = business_start(current_day)
            days_checked += 1
            continue

        slot = round_to_interval(slot)

        # Only the rest of today counts; a task crossing lunch loses an hour
        available = (business_end(current_day) - slot).total_seconds() // 60
        lunch_start, lunch_end = lunch_window(current_day)
        if slot < lunch_start and slot + timedelta(minutes=min(duration, available)) > lunch_start:
            available -= config.LUNCH_MINUTES

        effective = min(duration, available)
        end = slot + timedelta(minutes=effective)

        if is_lunch_time(slot) or (effective > 0 and is_lunch_time(end - timedelta(minutes=1))):
            slot = lunch_end
            continue

        adjusted_end = end
        if slot < lunch_start and end > lunch_start:
            adjusted_end = end + timedelta(minutes=config.LUNCH_MINUTES)

        occupied = False
        for block_start, block_end in blocks:
            if overlaps(slot, adjusted_end, block_start, block_end):
                occupied = True
                next_slot = round_to_interval(block_end + timedelta(minutes=1))
                if next_slot.hour >= config.BUSINESS_END_HOUR or next_slot.date() != current_day.date():
                    slot = business_end(current_day)
                else:
                    slot = next_slot
                break

        if occupied:
            continue

        last_minute = slot + timedelta(minutes=max(effective - 1, 0))
        if within_business_hours(slot) and within_business_hours(last_minute):
            return round_to_interval(slot)

        slot += timedelta(minutes=config.MINUTES_INTERVAL)

    return None
