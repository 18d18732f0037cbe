from datetime import datetime

from core.state import (
    add_task, update_task, schedule_task, unschedule_task, delete_task, mark_complete,
    add_calendar_event, delete_calendar_event, get_unscheduled_tasks, get_day_tasks,
    events_in_scope, set_pending, clear_pending, push_message, get_task
)


def test_defaults(session):
    assert session.tasks == []
    assert session.calendar_events == []
    assert session.pending is None
    assert session.version == 0


def test_add_scheduled_task(session):
    task = add_task(session, "Write", datetime(2026, 10, 19, 10, 0), 45)
    assert task['start_time'] == "2026-10-19T10:00:00"
    assert task['end_time'] == "2026-10-19T10:45:00"
    assert task['completed'] is False
    assert session.version == 1


def test_add_unscheduled_task(session):
    task = add_task(session, "Someday")
    assert task['start_time'] is None
    assert get_unscheduled_tasks(session) == [task]


def test_schedule_and_unschedule(session):
    task = add_task(session, "Read")
    assert schedule_task(session, task['id'], datetime(2026, 10, 19, 14, 0), 30, title="Read book")
    assert task['end_time'] == "2026-10-19T14:30:00"
    assert task['title'] == "Read book"
    assert get_unscheduled_tasks(session) == []

    assert unschedule_task(session, task['id'])
    assert task['start_time'] is None


def test_update_missing_task(session):
    assert not update_task(session, "nope", {'title': 'x'})


def test_delete_and_complete(session):
    keep = add_task(session, "Keep", datetime(2026, 10, 19, 9, 0), 30)
    drop = add_task(session, "Drop")
    assert delete_task(session, drop['id'])
    assert not delete_task(session, drop['id'])
    assert mark_complete(session, keep['id'])
    assert get_task(session, keep['id'])['completed']


def test_completed_tasks_are_not_unscheduled(session):
    task = add_task(session, "Done already")
    mark_complete(session, task['id'])
    assert get_unscheduled_tasks(session) == []


def test_day_tasks_sorted(session):
    late = add_task(session, "Late", datetime(2026, 10, 19, 15, 0), 30)
    early = add_task(session, "Early", datetime(2026, 10, 19, 9, 0), 30)
    add_task(session, "Other day", datetime(2026, 10, 20, 9, 0), 30)
    assert get_day_tasks(session, datetime(2026, 10, 19, 12, 0)) == [early, late]


def test_events_in_scope(session):
    task = add_task(session, "Write", datetime(2026, 10, 19, 10, 0), 60)
    skipped = add_task(session, "Moving", datetime(2026, 10, 19, 11, 0), 60)
    add_task(session, "Unscheduled")
    event = add_calendar_event(session, "Standup", datetime(2026, 10, 19, 9, 0), datetime(2026, 10, 19, 9, 15))

    intervals = events_in_scope(session, exclude_ids=[skipped['id']])
    assert [(i.title, i.source) for i in intervals] == [("Write", "task"), ("Standup", "calendar")]
    assert intervals[0].id == task['id']
    assert intervals[1].id == event['id']


def test_delete_calendar_event(session):
    event = add_calendar_event(session, "Standup", datetime(2026, 10, 19, 9, 0), datetime(2026, 10, 19, 9, 15))
    assert delete_calendar_event(session, event['id'])
    assert session.calendar_events == []


def test_pending_and_messages(session):
    set_pending(session, {'title': 'x'})
    assert session.pending == {'title': 'x'}
    clear_pending(session)
    assert session.pending is None
    push_message(session, "hello")
    assert session.messages == ["hello"]
