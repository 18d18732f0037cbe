# brain/merge.py
"""
Merger: Applies BotEnvelope actions and conflict resolutions to session state.
Centralizes state mutations from bot responses.
"""
import logging
from datetime import datetime
from typing import Optional

from core.contracts import BotEnvelope, ConflictResolution, TimeInterval
from core.conflicts import coerce_instant, end_after, interval_bounds
from core.slots import find_next_available_slot
from core.state import (
    add_task, get_task, schedule_task, delete_task, mark_complete,
    events_in_scope, push_message, set_pending, clear_pending, now_local
)
from brain.bots.auto_schedule import schedule_entries

logger = logging.getLogger(__name__)


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def handle_envelope(st_session_state, envelope: BotEnvelope) -> bool:
    """
    Apply BotEnvelope to session state.

    Args:
        st_session_state: Streamlit session state
        envelope: Bot response envelope

    Returns:
        True if state was mutated, False otherwise
    """
    state_mutated = False

    if envelope.user_facing:
        push_message(st_session_state, envelope.user_facing)

    for action in envelope.immediate_actions:
        action_type = action.get('type')

        if action_type == 'create':
            add_task(
                st_session_state,
                title=action.get('title', 'New Task'),
                start=_parse_iso(action.get('start_time')),
                duration=action.get('duration'),
                notes=action.get('notes'),
            )
            state_mutated = True

        elif action_type == 'schedule':
            schedule_task(
                st_session_state,
                action['task_id'],
                _parse_iso(action['start_time']),
                action['duration'],
                title=action.get('title'),
            )
            state_mutated = True

        elif action_type == 'delete':
            delete_task(st_session_state, action.get('id'))
            state_mutated = True

        elif action_type == 'complete':
            mark_complete(st_session_state, action.get('id'))
            state_mutated = True

    # Conflicts wait for the user's choice
    if envelope.ask_resolution and envelope.proposal:
        set_pending(st_session_state, envelope.proposal)

    return state_mutated


def _save_proposal(st_session_state, proposal: dict, start: Optional[datetime]) -> Optional[dict]:
    """Create the proposed task, or place the existing one, at start."""
    task_id = proposal.get('task_id')
    duration = proposal['duration']
    if task_id:
        if start is not None:
            schedule_task(st_session_state, task_id, start, duration, title=proposal['title'])
        return get_task(st_session_state, task_id)
    return add_task(st_session_state, proposal['title'], start, duration, proposal.get('notes'))


def _matching_tasks(st_session_state, conflict: TimeInterval, reference: datetime) -> list[dict]:
    """Tasks behind a movable conflict: by id, else by identical start and end."""
    if conflict.id:
        task = get_task(st_session_state, conflict.id)
        return [task] if task else []

    bounds = interval_bounds(conflict, reference)
    if bounds is None:
        return []
    return [
        t for t in st_session_state.tasks
        if interval_bounds(TimeInterval.from_record(t), reference) == bounds
    ]


def _task_minutes(task: dict, reference: datetime):
    start = coerce_instant(task.get('start_time'), reference)
    end = coerce_instant(task.get('end_time'), reference)
    if start is None or end is None:
        return task.get('duration')
    return int((end - start).total_seconds() // 60)


def move_moveable_tasks(st_session_state, proposal: dict, start: datetime,
                        conflicts: list[TimeInterval]) -> list[dict]:
    """
    Move every task behind the given conflicts out of the new task's way.

    Each one goes to the next free slot after the new task ends.

    Returns:
        List of {id, title, old_start, new_start} for the tasks moved
    """
    to_move = []
    for conflict in conflicts:
        matches = _matching_tasks(st_session_state, conflict, start)
        if not matches:
            logger.warning(f"   ⚠️ No matching task found for conflict: {conflict.title}")
        to_move.extend(m for m in matches if m not in to_move)

    excluded = [t['id'] for t in to_move]
    if proposal.get('task_id'):
        excluded.append(proposal['task_id'])
    events = events_in_scope(st_session_state, exclude_ids=excluded)
    events.append(TimeInterval(start, end_after(start, proposal['duration']),
                               proposal['title'], "task", proposal.get('task_id')))

    search_from = end_after(start, proposal['duration'])
    moved = []
    for task in to_move:
        minutes = _task_minutes(task, start)
        if not minutes:
            continue
        slot = find_next_available_slot(search_from, minutes, events)
        if slot is None:
            logger.warning(f"   ⚠️ Could not find available slot for: {task['title']}")
            continue
        old_start = task.get('start_time')
        schedule_task(st_session_state, task['id'], slot, minutes)
        events.append(TimeInterval(slot, end_after(slot, minutes), task['title'], "task", task['id']))
        moved.append({'id': task['id'], 'title': task['title'],
                      'old_start': old_start, 'new_start': slot.isoformat()})
        logger.info(f"   ↪️ Moved '{task['title']}' {old_start} -> {slot.isoformat()}")

    if len(moved) != len(to_move):
        logger.warning(f"   ⚠️ Expected to move {len(to_move)} tasks but only moved {len(moved)}")
    return moved


def apply_resolution(st_session_state, proposal: dict, resolution: ConflictResolution) -> dict:
    """
    Apply the user's answer to a conflict prompt.

    Args:
        st_session_state: Streamlit session state
        proposal: Pending proposal (from CreateBot or AutoScheduleBot)
        resolution: Chosen action

    Returns:
        {'action', 'saved': task or None, 'moved': [...]}
    """
    logger.info(f"🔧 Resolving conflict for '{proposal['title']}' with {resolution.action}")
    clear_pending(st_session_state)
    summary = {'action': resolution.action, 'saved': None, 'moved': []}

    if resolution.action == 'cancel':
        push_message(st_session_state, "No problem! Discarded.")
        return summary

    start = _parse_iso(proposal['start_time'])

    if resolution.action == 'schedule_anyway':
        summary['saved'] = _save_proposal(st_session_state, proposal, start)
        push_message(st_session_state, f"Saved ✅ **{proposal['title']}** despite the overlap.")

    elif resolution.action == 'reschedule_new_task':
        excluded = [proposal['task_id']] if proposal.get('task_id') else []
        events = events_in_scope(st_session_state, exclude_ids=excluded)
        slot = find_next_available_slot(start, proposal['duration'], events)
        if slot is None:
            push_message(st_session_state, f"Couldn't find a later slot for **{proposal['title']}**.")
            if not proposal.get('task_id'):
                summary['saved'] = _save_proposal(st_session_state, proposal, None)
        else:
            summary['saved'] = _save_proposal(st_session_state, proposal, slot)
            push_message(st_session_state, f"Saved ✅ **{proposal['title']}** at {slot.strftime('%A %H:%M')}.")

    elif resolution.action == 'move_moveable_tasks':
        conflicts = resolution.moveable_conflicts_to_move or [
            TimeInterval.from_record(c) for c in proposal.get('moveable_conflicts', [])
        ]
        summary['moved'] = move_moveable_tasks(st_session_state, proposal, start, conflicts)
        summary['saved'] = _save_proposal(st_session_state, proposal, start)
        push_message(st_session_state,
                     f"Saved ✅ **{proposal['title']}** and moved {len(summary['moved'])} of your tasks.")

    if proposal.get('remaining'):
        # Carry on with the rest of an auto-schedule run
        now = _parse_iso(proposal.get('now')) or now_local(st_session_state)
        envelope = schedule_entries(proposal['remaining'], events_in_scope(st_session_state),
                                    proposal.get('section', 'today'), now)
        handle_envelope(st_session_state, envelope)

    return summary
