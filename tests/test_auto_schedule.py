from datetime import datetime

from core.contracts import BotRequest, TimeInterval
from brain.bots.auto_schedule import AutoScheduleBot, first_start_for, order_entries

# 2026-10-19 is a Monday
NOW = datetime(2026, 10, 19, 10, 0)


def request(events=(), now=NOW):
    return BotRequest(user_text="", now_iso=now.isoformat(), tz_name="UTC", events=list(events))


def test_emails_first_then_the_rest():
    tasks = [
        {'id': 'a', 'title': 'Write blog post for 1 hour'},
        {'id': 'b', 'title': 'Email the team'},
    ]
    envelope = AutoScheduleBot().run(request(), tasks)
    assert [(a['task_id'], a['start_time'], a['duration']) for a in envelope.immediate_actions] == [
        ('b', "2026-10-19T10:00:00", 15),
        ('a', "2026-10-19T10:15:00", 60),
    ]
    assert envelope.immediate_actions[1]['title'] == "Write blog post"


def test_tomorrow_starts_at_opening(make_llm):
    tasks = [{'id': 'a', 'title': 'Review notes'}]
    envelope = AutoScheduleBot(make_llm("30")).run(request(), tasks, section="tomorrow")
    [action] = envelope.immediate_actions
    assert action['start_time'] == "2026-10-20T09:00:00"


def test_timed_task_keeps_its_time():
    tasks = [
        {'id': 'a', 'title': 'Email Bob'},
        {'id': 'b', 'title': 'Call at 3pm for 30 min'},
    ]
    envelope = AutoScheduleBot().run(request(), tasks)
    assert [a['task_id'] for a in envelope.immediate_actions] == ['b', 'a']
    assert envelope.immediate_actions[0]['start_time'] == "2026-10-19T15:00:00"


def test_untimed_tasks_avoid_timed_ones():
    tasks = [
        {'id': 'a', 'title': 'Sync at 10am for 1 hour'},
        {'id': 'b', 'title': 'Send invoice'},
    ]
    envelope = AutoScheduleBot().run(request(), tasks)
    starts = {a['task_id']: a['start_time'] for a in envelope.immediate_actions}
    assert starts == {'a': "2026-10-19T10:00:00", 'b': "2026-10-19T11:15:00"}


def test_conflict_stops_and_keeps_the_rest():
    events = [TimeInterval(datetime(2026, 10, 19, 15), datetime(2026, 10, 19, 16), "Client", "calendar")]
    tasks = [
        {'id': 'a', 'title': 'Call at 3pm for 30 min'},
        {'id': 'b', 'title': 'Email Bob'},
    ]
    envelope = AutoScheduleBot().run(request(events), tasks)
    assert envelope.ask_resolution
    assert envelope.immediate_actions == []
    proposal = envelope.proposal
    assert proposal['task_id'] == 'a'
    assert proposal['section'] == 'today'
    assert [e['task_id'] for e in proposal['remaining']] == ['b']


def test_nothing_to_schedule():
    envelope = AutoScheduleBot().run(request(), [])
    assert envelope.immediate_actions == []
    assert "Nothing to schedule" in envelope.user_facing


def test_first_start_after_hours_moves_to_next_business_day():
    assert first_start_for("today", datetime(2026, 10, 23, 18, 0)) == datetime(2026, 10, 26, 9, 0)
    assert first_start_for("today", datetime(2026, 10, 19, 7, 10)) == datetime(2026, 10, 19, 9, 0)


def test_order_is_stable_within_groups():
    entries = [
        {'task_id': 1, 'specified_time': None, 'is_email': False},
        {'task_id': 2, 'specified_time': None, 'is_email': True},
        {'task_id': 3, 'specified_time': None, 'is_email': False},
        {'task_id': 4, 'specified_time': "2026-10-19T15:00:00", 'is_email': False},
    ]
    assert [e['task_id'] for e in order_entries(entries)] == [4, 2, 1, 3]
