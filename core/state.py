# core/state.py
"""
State management for Groov session.
Keeps tasks and calendar events in the Streamlit session state.
"""
from datetime import datetime
from typing import Iterable, Optional
from zoneinfo import ZoneInfo
import uuid

from core import config
from core.contracts import TimeInterval
from core.conflicts import end_after


def ensure_session_defaults(st_session_state):
    """Initialize session state with default values."""
    if 'tasks' not in st_session_state:
        st_session_state.tasks = []
    if 'calendar_events' not in st_session_state:
        st_session_state.calendar_events = []
    if 'messages' not in st_session_state:
        st_session_state.messages = []
    if 'pending' not in st_session_state:
        st_session_state.pending = None
    if 'tz_name' not in st_session_state:
        st_session_state.tz_name = config.DEFAULT_TZ
    if 'version' not in st_session_state:
        st_session_state.version = 0


def get_tz(st_session_state) -> ZoneInfo:
    """Get current timezone as ZoneInfo object."""
    return ZoneInfo(st_session_state.get("tz_name", config.DEFAULT_TZ))


def now_local(st_session_state) -> datetime:
    """Get current datetime in user's timezone."""
    return datetime.now(get_tz(st_session_state))


def generate_id() -> str:
    """Generate unique ID for task and event entries."""
    return str(uuid.uuid4())[:8]


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def add_task(st_session_state, title: str, start: Optional[datetime] = None,
             duration: Optional[int] = None, notes: Optional[str] = None) -> dict:
    """
    Add a new task, scheduled if start and duration are given.

    Returns:
        Created task entry
    """
    end = end_after(start, duration) if start and duration else None
    entry = {
        'id': generate_id(),
        'title': title,
        'notes': notes,
        'start_time': _iso(start),
        'end_time': _iso(end),
        'duration': duration,
        'completed': False,
        'created_at': now_local(st_session_state).isoformat(),
    }
    st_session_state.tasks.append(entry)
    st_session_state.version += 1
    return entry


def get_task(st_session_state, task_id: str) -> Optional[dict]:
    for task in st_session_state.tasks:
        if task['id'] == task_id:
            return task
    return None


def update_task(st_session_state, task_id: str, changes: dict) -> bool:
    """
    Update an existing task.

    Returns:
        True if updated, False if not found
    """
    task = get_task(st_session_state, task_id)
    if task is None:
        return False
    task.update(changes)
    st_session_state.version += 1
    return True


def schedule_task(st_session_state, task_id: str, start: datetime, duration: int,
                  title: Optional[str] = None) -> bool:
    """Place a task on the calendar at start for duration minutes."""
    changes = {
        'start_time': start.isoformat(),
        'end_time': end_after(start, duration).isoformat(),
        'duration': duration,
    }
    if title:
        changes['title'] = title
    return update_task(st_session_state, task_id, changes)


def unschedule_task(st_session_state, task_id: str) -> bool:
    """Take a task off the calendar."""
    return update_task(st_session_state, task_id, {'start_time': None, 'end_time': None})


def delete_task(st_session_state, task_id: str) -> bool:
    """
    Delete a task.

    Returns:
        True if deleted, False if not found
    """
    initial_len = len(st_session_state.tasks)
    st_session_state.tasks = [t for t in st_session_state.tasks if t['id'] != task_id]
    if len(st_session_state.tasks) < initial_len:
        st_session_state.version += 1
        return True
    return False


def mark_complete(st_session_state, task_id: str) -> bool:
    """Mark a task as completed."""
    return update_task(st_session_state, task_id, {'completed': True})


def add_calendar_event(st_session_state, title: str, start: datetime, end: datetime) -> dict:
    """Add an external calendar event; these never move."""
    entry = {
        'id': generate_id(),
        'title': title,
        'start_time': start.isoformat(),
        'end_time': end.isoformat(),
        'source': 'calendar',
    }
    st_session_state.calendar_events.append(entry)
    st_session_state.version += 1
    return entry


def delete_calendar_event(st_session_state, event_id: str) -> bool:
    initial_len = len(st_session_state.calendar_events)
    st_session_state.calendar_events = [
        e for e in st_session_state.calendar_events if e['id'] != event_id
    ]
    if len(st_session_state.calendar_events) < initial_len:
        st_session_state.version += 1
        return True
    return False


def get_unscheduled_tasks(st_session_state) -> list[dict]:
    """Open tasks with no time block."""
    return [
        t for t in st_session_state.tasks
        if not t.get('completed') and not (t.get('start_time') and t.get('end_time'))
    ]


def get_day_tasks(st_session_state, day: datetime) -> list[dict]:
    """Scheduled tasks starting on day's date, sorted by start."""
    day_iso = day.date().isoformat()
    tasks = [t for t in st_session_state.tasks if (t.get('start_time') or '')[:10] == day_iso]
    return sorted(tasks, key=lambda t: t['start_time'])


def events_in_scope(st_session_state, exclude_ids: Iterable[str] = ()) -> list[TimeInterval]:
    """
    Every time block the new task must respect.

    Scheduled tasks come first (source "task"), then calendar events
    (source "calendar"). Tasks in exclude_ids are left out.
    """
    excluded = set(exclude_ids)
    intervals = [
        TimeInterval.from_record(t, source="task")
        for t in st_session_state.tasks
        if t.get('start_time') and t.get('end_time') and t['id'] not in excluded
    ]
    intervals.extend(
        TimeInterval.from_record(e, source="calendar")
        for e in st_session_state.calendar_events
    )
    return intervals


def push_message(st_session_state, text: str):
    """Queue a user-facing notice."""
    st_session_state.messages.append(text)


def set_pending(st_session_state, proposal: dict):
    """Park a proposal until the user picks a conflict resolution."""
    st_session_state.pending = proposal


def clear_pending(st_session_state):
    st_session_state.pending = None
