# core/conflicts.py
"""
Conflict detection for Groov.
Finds existing time blocks that overlap a proposed slot and splits them
into movable (our own tasks) and immovable (external calendar events).
"""
from datetime import datetime, timedelta
from typing import Iterable, Optional, Union

from core.contracts import TimeInterval, ConflictResult

IMMOVABLE_SOURCE = "calendar"


def coerce_instant(value: Union[datetime, str, None], reference: datetime) -> Optional[datetime]:
    """
    Turn a timestamp into a datetime comparable with reference.

    Strings are read as ISO-8601. Naive values take reference's tzinfo;
    aware values against a naive reference become naive local time.

    Returns:
        datetime, or None if the value is missing or unparseable
    """
    if value is None:
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None

    if reference.tzinfo is None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    if reference.tzinfo is not None and value.tzinfo is None:
        return value.replace(tzinfo=reference.tzinfo)
    return value


def end_after(start: datetime, minutes: Union[int, float]) -> datetime:
    """
    start + minutes, or the last representable instant when that overflows.

    Durations read from titles are unbounded ("for 100000000 hours").
    """
    try:
        return start + timedelta(minutes=minutes)
    except (OverflowError, ValueError):
        return datetime.max.replace(tzinfo=start.tzinfo)


def interval_bounds(item: TimeInterval, reference: datetime) -> Optional[tuple[datetime, datetime]]:
    """(start, end) of an item aligned to reference, or None if either is unusable."""
    start = coerce_instant(item.start, reference)
    end = coerce_instant(item.end, reference)
    if start is None or end is None:
        return None
    return start, end


def overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """Half-open overlap test: touching endpoints do not count."""
    return other_start < end and start < other_end


def detect_conflicts(
    candidate_start: datetime,
    duration_minutes: Union[int, float],
    existing: Iterable[Union[TimeInterval, dict]]
) -> ConflictResult:
    """
    Detect existing items overlapping [candidate_start, candidate_start + duration).

    Args:
        candidate_start: Proposed start time
        duration_minutes: Proposed duration in minutes
        existing: TimeIntervals or event records (start_time, end_time, title, source)

    Returns:
        ConflictResult; both lists keep input order. Items whose timestamps
        are missing or unparseable are skipped.
    """
    candidate_end = end_after(candidate_start, duration_minutes)
    result = ConflictResult()

    for item in existing:
        if isinstance(item, dict):
            item = TimeInterval.from_record(item)

        bounds = interval_bounds(item, candidate_start)
        if bounds is None:
            continue

        if overlaps(candidate_start, candidate_end, *bounds):
            if item.source == IMMOVABLE_SOURCE:
                result.immoveable_conflicts.append(item)
            else:
                result.moveable_conflicts.append(item)

    return result


def count_unusable(existing: Iterable[TimeInterval], reference: datetime) -> int:
    """Number of items detect_conflicts would skip."""
    return sum(1 for item in existing if interval_bounds(item, reference) is None)
