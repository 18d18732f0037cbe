# brain/bots/auto_schedule.py
"""
Auto-Schedule Bot: Handles AUTO_SCHEDULE stage.
Places a batch of unscheduled tasks on today's or tomorrow's calendar.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from core.contracts import BotRequest, BotEnvelope, Section, TimeInterval
from core.conflicts import detect_conflicts, end_after
from core.llm import LLM
from core.slots import (
    find_next_available_slot, round_to_interval, business_start,
    next_business_day, is_weekend
)
from core import config
from core.timeparse import parse_task_title
from brain.estimator import resolve_duration, is_email_task
from brain.bots.plan_create import build_proposal, describe_conflicts

logger = logging.getLogger(__name__)


def target_date_for(section: Section, now: datetime) -> datetime:
    today = round_to_interval(now)
    if section == "tomorrow":
        return today + timedelta(days=1)
    return today


def first_start_for(section: Section, now: datetime) -> datetime:
    """Where the search for untimed tasks begins."""
    if section == "tomorrow":
        return business_start(target_date_for(section, now))

    current = round_to_interval(now)
    if is_weekend(current) or current.hour >= config.BUSINESS_END_HOUR:
        return business_start(next_business_day(current))
    if current.hour < config.BUSINESS_START_HOUR:
        return business_start(current)
    return current


def order_entries(entries: list[dict]) -> list[dict]:
    """Timed tasks first, then emails, then everything else; stable otherwise."""
    def key(entry):
        if entry['specified_time']:
            return 0
        return 1 if entry['is_email'] else 2
    return sorted(entries, key=key)


def schedule_action(entry: dict, start: datetime) -> dict:
    return {
        'type': 'schedule',
        'task_id': entry['task_id'],
        'title': entry['title'],
        'start_time': start.isoformat(),
        'duration': entry['duration'],
    }


def schedule_entries(entries: list[dict], events: list[TimeInterval],
                     section: Section, now: datetime) -> BotEnvelope:
    """
    Schedule prepared entries against events.

    Timed entries keep their time unless they conflict; the first conflict
    stops the run and asks for a resolution, carrying the rest of the plan.
    Untimed entries go into free slots one after another.
    """
    events = list(events)
    actions = []
    entries = order_entries(entries)

    for index, entry in enumerate(entries):
        if not entry['specified_time']:
            continue
        start = datetime.fromisoformat(entry['specified_time'])
        conflicts = detect_conflicts(start, entry['duration'], events)

        if conflicts.has_conflicts:
            logger.info(f"   ⚠️ '{entry['title']}' conflicts with {conflicts.total} events - asking user")
            remaining = entries[index + 1:]
            proposal = build_proposal(
                entry['title'], start, entry['duration'], conflicts=conflicts,
                task_id=entry['task_id'], section=section, now=now.isoformat(),
                remaining=remaining,
            )
            friendly = start.strftime("%A %H:%M")
            return BotEnvelope(
                stage="AUTO_SCHEDULE",
                user_facing=f"⚠️ **{entry['title']}** at {friendly} overlaps with: {describe_conflicts(conflicts)}",
                ask_resolution=True,
                proposal=proposal,
                immediate_actions=actions,
            )

        actions.append(schedule_action(entry, start))
        events.append(TimeInterval(start, end_after(start, entry['duration']),
                                   entry['title'], "task", entry['task_id']))

    cursor = first_start_for(section, now)
    unplaced = []
    for entry in entries:
        if entry['specified_time']:
            continue
        slot = find_next_available_slot(cursor, entry['duration'], events)
        if slot is None:
            unplaced.append(entry['title'])
            continue
        end = end_after(slot, entry['duration'])
        actions.append(schedule_action(entry, slot))
        events.append(TimeInterval(slot, end, entry['title'], "task", entry['task_id']))
        cursor = end

    message = f"📅 Scheduled {len(actions)} tasks."
    if unplaced:
        message += f" No free slot for: {', '.join(unplaced)}."
    logger.info(f"   ✅ {message}")

    return BotEnvelope(stage="AUTO_SCHEDULE", user_facing=message, immediate_actions=actions)


class AutoScheduleBot:
    """Bot for scheduling every open task in one go."""

    def __init__(self, llm: Optional[LLM] = None):
        self.llm = llm

    def prepare(self, tasks: list[dict], section: Section, now: datetime) -> list[dict]:
        """Parse titles and settle durations for each task."""
        target = target_date_for(section, now)
        entries = []
        for task in tasks:
            hints = parse_task_title(task['title'], target)
            duration = resolve_duration(self.llm, hints, task.get('notes'))
            entries.append({
                'task_id': task['id'],
                'title': hints.clean_title,
                'duration': duration,
                'is_email': is_email_task(hints.clean_title),
                'specified_time': hints.time.isoformat() if hints.time else None,
            })
        return entries

    def run(self, request: BotRequest, tasks: list[dict], section: Section = "today") -> BotEnvelope:
        """
        Process auto-schedule request.

        Args:
            request: BotRequest carrying now and the existing events
            tasks: Unscheduled task records (id, title, notes)
            section: "today" or "tomorrow"

        Returns:
            BotEnvelope with schedule actions, or a resolution request
        """
        logger.info(f"🗓️ Auto-scheduling {len(tasks)} tasks for {section}")
        if not tasks:
            return BotEnvelope(stage="AUTO_SCHEDULE", user_facing="Nothing to schedule. 🎉")

        entries = self.prepare(tasks, section, request.now)
        return schedule_entries(entries, request.events, section, request.now)
