from datetime import datetime

import pytest

from core.contracts import BotEnvelope, BotRequest, ConflictResolution, TimeInterval
from core.state import (
    add_task, add_calendar_event, events_in_scope, get_task, get_unscheduled_tasks
)
from brain.bots.plan_create import CreateBot
from brain.bots.auto_schedule import AutoScheduleBot
from brain.merge import handle_envelope, apply_resolution, move_moveable_tasks

# 2026-10-19 is a Monday
NOW = datetime(2026, 10, 19, 10, 0)


def at(hour, minute=0):
    return NOW.replace(hour=hour, minute=minute)


def create(session, text):
    request = BotRequest(user_text=text, now_iso=NOW.isoformat(), tz_name="UTC",
                         events=events_in_scope(session))
    handle_envelope(session, CreateBot().run(request))


def test_create_action_adds_task(session):
    create(session, "Call John at 3pm for 30 min")
    [task] = session.tasks
    assert task['title'] == "Call John"
    assert task['start_time'] == "2026-10-19T15:00:00"
    assert session.pending is None
    assert session.messages


def test_conflict_parks_proposal(session):
    add_calendar_event(session, "Client", at(15), at(16))
    create(session, "Call John at 3pm for 30 min")
    assert session.tasks == []
    assert session.pending['title'] == "Call John"


def test_schedule_anyway(session):
    add_calendar_event(session, "Client", at(15), at(16))
    create(session, "Call John at 3pm for 30 min")
    summary = apply_resolution(session, session.pending, ConflictResolution("schedule_anyway"))
    assert summary['saved']['start_time'] == "2026-10-19T15:00:00"
    assert session.pending is None


def test_reschedule_new_task_after_blocking_event(session):
    add_calendar_event(session, "Client", at(15), at(16))
    create(session, "Call John at 3pm for 30 min")
    summary = apply_resolution(session, session.pending, ConflictResolution("reschedule_new_task"))
    assert summary['saved']['start_time'] == "2026-10-19T16:15:00"


def test_move_moveable_tasks(session):
    gym = add_task(session, "Gym", at(15), 60)
    create(session, "Call John at 3pm for 30 min")
    summary = apply_resolution(session, session.pending, ConflictResolution("move_moveable_tasks"))

    assert summary['saved']['start_time'] == "2026-10-19T15:00:00"
    assert get_task(session, gym['id'])['start_time'] == "2026-10-19T15:30:00"
    assert get_task(session, gym['id'])['end_time'] == "2026-10-19T16:30:00"
    assert summary['moved'][0]['old_start'] == "2026-10-19T15:00:00"


def test_cancel_discards(session):
    add_calendar_event(session, "Client", at(15), at(16))
    create(session, "Call John at 3pm for 30 min")
    summary = apply_resolution(session, session.pending, ConflictResolution("cancel"))
    assert summary['saved'] is None
    assert session.tasks == []
    assert session.pending is None
    assert session.messages[-1] == "No problem! Discarded."


def test_resolution_continues_auto_schedule(session):
    add_calendar_event(session, "Client", at(15), at(16))
    call = add_task(session, "Call at 3pm for 30 min")
    email = add_task(session, "Email Bob")

    request = BotRequest(user_text="", now_iso=NOW.isoformat(), tz_name="UTC",
                         events=events_in_scope(session))
    handle_envelope(session, AutoScheduleBot().run(request, get_unscheduled_tasks(session)))
    assert session.pending['task_id'] == call['id']

    apply_resolution(session, session.pending, ConflictResolution("schedule_anyway"))
    assert get_task(session, call['id'])['title'] == "Call"
    assert get_task(session, call['id'])['start_time'] == "2026-10-19T15:00:00"
    assert get_task(session, email['id'])['start_time'] == "2026-10-19T10:00:00"
    assert get_unscheduled_tasks(session) == []


def test_delete_and_complete_actions(session):
    drop = add_task(session, "Drop")
    keep = add_task(session, "Keep")
    envelope = BotEnvelope(stage="PLAN_CREATE", immediate_actions=[
        {'type': 'delete', 'id': drop['id']},
        {'type': 'complete', 'id': keep['id']},
    ])
    assert handle_envelope(session, envelope)
    assert [t['id'] for t in session.tasks] == [keep['id']]
    assert session.tasks[0]['completed']


def test_unknown_resolution_is_rejected():
    with pytest.raises(ValueError):
        ConflictResolution("ignore")


def test_resolution_request_needs_a_proposal():
    with pytest.raises(ValueError):
        BotEnvelope(stage="PLAN_CREATE", ask_resolution=True)


def test_enormous_duration_task_is_saved(session):
    create(session, "Project for 100000000 hours at 3pm")
    [task] = session.tasks
    assert task['start_time'] == "2026-10-19T15:00:00"
    assert task['end_time'] == datetime.max.isoformat()


def test_conflicts_without_id_match_by_time(session):
    gym = add_task(session, "Gym", at(15), 60)
    proposal = {'title': "Call", 'duration': 30}
    moved = move_moveable_tasks(session, proposal, at(15),
                                [TimeInterval(at(15), at(16), "Gym", "task")])
    assert [m['id'] for m in moved] == [gym['id']]
    assert get_task(session, gym['id'])['start_time'] == "2026-10-19T15:30:00"
