# core/timeparse.py
"""
Time parsing utilities for Groov.
Extracts day, time, and duration hints from task titles.
"""
import re
from datetime import datetime, timedelta
from typing import Optional, Tuple, Union
import dateparser

from core.contracts import ParsedScheduleHints

Minutes = Union[int, float]

# Ordered: first valid match wins. ASCII-only digits, spaces and word boundaries.
TIME_PATTERNS = [
    re.compile(r'\bat\s+(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<meridiem>am|pm)\b', re.IGNORECASE | re.ASCII),
    re.compile(r'\bat\s+(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\b', re.IGNORECASE | re.ASCII),  # 24-hour
    re.compile(r'\b(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<meridiem>am|pm)\b', re.IGNORECASE | re.ASCII),
    re.compile(r"\bat\s+(?P<hour>\d{1,2})\s*o['’‘]?clock\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\b(?P<hour>\d{1,2})\s*o['’‘]?clock\b", re.IGNORECASE | re.ASCII),
]

DAY_PATTERNS = [
    re.compile(r'\bon\s+(?P<day>monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b', re.IGNORECASE | re.ASCII),
    re.compile(r'\b(?P<day>monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b', re.IGNORECASE | re.ASCII),
    re.compile(r'\bon\s+(?P<day>mon|tue|wed|thu|fri|sat|sun)\b', re.IGNORECASE | re.ASCII),
    re.compile(r'\b(?P<day>mon|tue|wed|thu|fri|sat|sun)\b', re.IGNORECASE | re.ASCII),
]

DURATION_PATTERNS = [
    re.compile(r'\bfor\s+(?P<value>\d+(?:\.\d+)?)\s*(?:hour|hours|hr|hrs)\b', re.IGNORECASE | re.ASCII),
    re.compile(r'\bfor\s+(?P<value>\d+(?:\.\d+)?)\s*(?:minute|minutes|min|mins)\b', re.IGNORECASE | re.ASCII),
    re.compile(r'\bfor\s+(?P<value>\d+(?:\.\d+)?)\s*(?:h)\b', re.IGNORECASE | re.ASCII),
    re.compile(r'\b(?P<value>\d+(?:\.\d+)?)\s*(?:hour|hours|hr|hrs)\s*(?:long|duration)?\b', re.IGNORECASE | re.ASCII),
    re.compile(r'\b(?P<value>\d+(?:\.\d+)?)\s*(?:minute|minutes|min|mins)\s*(?:long|duration)?\b', re.IGNORECASE | re.ASCII),
    re.compile(r'\b(?P<value>\d+(?:\.\d+)?)\s*(?:h)\s*(?:long|duration)?\b', re.IGNORECASE | re.ASCII),
]

HOUR_TOKENS = ('hour', 'hr', 'h')

# 0=Sunday .. 6=Saturday
DAY_NAMES = {
    'sunday': 0, 'sun': 0,
    'monday': 1, 'mon': 1,
    'tuesday': 2, 'tue': 2,
    'wednesday': 3, 'wed': 3,
    'thursday': 4, 'thu': 4,
    'friday': 5, 'fri': 5,
    'saturday': 6, 'sat': 6,
}


def start_of_day(dt: datetime) -> datetime:
    """Midnight of dt's date, keeping its tzinfo."""
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def _strip_phrase(title: str, phrase: str, prepositions: str) -> str:
    """Remove the first occurrence of phrase, then tidy spaces and a leading preposition."""
    cleaned = title.replace(phrase, '', 1).strip()
    cleaned = re.sub(r'\s+', ' ', cleaned)
    cleaned = re.sub(rf'^(?:{prepositions})\s+', '', cleaned, flags=re.IGNORECASE)
    return cleaned.strip()


def parse_duration(title: str) -> Tuple[Optional[Minutes], str]:
    """
    Parse a duration from the title, return (minutes, cleaned title).

    Examples:
        "Workout for 1.5 hours" -> (90, "Workout")
        "Standup 15 min" -> (15, "Standup")
        "Deep work 2h long" -> (120, "Deep work")
    """
    for pattern in DURATION_PATTERNS:
        match = pattern.search(title)
        if not match:
            continue

        value = float(match.group('value'))
        if value <= 0:
            continue

        matched = match.group(0)
        if any(token in matched.lower() for token in HOUR_TOKENS):
            minutes = value * 60
        else:
            minutes = value

        if minutes.is_integer():
            minutes = int(minutes)

        return minutes, _strip_phrase(title, matched, 'for|of')

    return None, title


def parse_day(title: str, base_date: datetime) -> Tuple[Optional[datetime], str]:
    """
    Parse a weekday name from the title, return (start of that day, cleaned title).

    The day always lands in the future: naming today's weekday means next week.

    Examples (base_date on a Monday):
        "Submit report on Friday" -> (Friday in 4 days, "Submit report")
        "Gym mon" -> (Monday in 7 days, "Gym")
    """
    for pattern in DAY_PATTERNS:
        match = pattern.search(title)
        if not match:
            continue

        target = DAY_NAMES.get(match.group('day').lower())
        if target is None:
            continue

        current = (base_date.weekday() + 1) % 7
        days_until = target - current
        if days_until <= 0:
            days_until += 7

        day = start_of_day(base_date + timedelta(days=days_until))
        return day, _strip_phrase(title, match.group(0), 'at|on')

    return None, title


def parse_time(title: str, base_date: datetime) -> Tuple[Optional[datetime], str]:
    """
    Parse a time of day from the title, return (base_date at that time, cleaned title).

    Examples:
        "Call John at 3pm" -> (15:00, "Call John")
        "Standup at 9:30" -> (09:30, "Standup")
        "Lunch 12 o'clock" -> (12:00, "Lunch")
    """
    for pattern in TIME_PATTERNS:
        match = pattern.search(title)
        if not match:
            continue

        groups = match.groupdict()
        hour = int(groups['hour'])
        minute = int(groups['minute']) if groups.get('minute') else 0
        meridiem = (groups.get('meridiem') or '').lower()

        if meridiem == 'pm' and hour != 12:
            hour += 12
        elif meridiem == 'am' and hour == 12:
            hour = 0

        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            continue

        time = base_date.replace(hour=hour, minute=minute, second=0, microsecond=0)
        return time, _strip_phrase(title, match.group(0), 'at|on')

    return None, title


def parse_task_title(title: str, base_date: Optional[datetime] = None) -> ParsedScheduleHints:
    """
    Parse a task title for duration, day and time hints.

    Duration is stripped first, then the day, then the time; each step
    works on the title left by the previous one.

    Args:
        title: Raw task title
        base_date: Reference "now" (defaults to the current local time)

    Returns:
        ParsedScheduleHints with the cleaned title
    """
    if base_date is None:
        base_date = datetime.now()

    duration, working = parse_duration(title)
    day, working = parse_day(working, base_date)
    parsed_time, working = parse_time(working, day or base_date)

    time = None
    if day and parsed_time:
        time = day.replace(hour=parsed_time.hour, minute=parsed_time.minute, second=0, microsecond=0)
    elif parsed_time:
        time = parsed_time

    if day is None and time is not None:
        day = start_of_day(time)

    return ParsedScheduleHints(
        clean_title=working if working.strip() else title,
        time=time,
        day=day,
        duration=duration,
    )


def parse_when(text: str, now: datetime) -> Optional[datetime]:
    """
    Parse a free-form date/time entry such as "next monday 9am" or "2026-10-20 14:00".

    Returns:
        datetime carrying now's tzinfo, or None if nothing was understood
    """
    if not text or not text.strip():
        return None

    relative_base = now.replace(tzinfo=None)
    try:
        parsed = dateparser.parse(
            text,
            settings={
                'PREFER_DATES_FROM': 'future',
                'RELATIVE_BASE': relative_base,
            }
        )
    except (ValueError, OverflowError):
        return None

    if parsed is None:
        return None
    if parsed.tzinfo is None and now.tzinfo is not None:
        parsed = parsed.replace(tzinfo=now.tzinfo)
    return parsed
