# brain/bots/plan_create.py
"""
Create Bot: Handles PLAN_CREATE stage.
Reads schedule hints from a new task's title, picks a slot and checks it for conflicts.
"""
import logging
from datetime import datetime
from typing import Optional

from core.contracts import BotRequest, BotEnvelope, ConflictResult
from core.conflicts import detect_conflicts, count_unusable, end_after
from core.llm import LLM
from core.slots import find_next_available_slot, business_start
from core.timeparse import parse_task_title
from brain.estimator import resolve_duration

logger = logging.getLogger(__name__)


def describe_conflicts(conflicts: ConflictResult, limit: int = 2) -> str:
    """Short list of conflicting titles, calendar events first."""
    items = conflicts.immoveable_conflicts + conflicts.moveable_conflicts
    names = ", ".join(f"**{c.title or 'Untitled Event'}**" for c in items[:limit])
    if len(items) > limit:
        names += f" and {len(items) - limit} more"
    return names


def build_proposal(title: str, start: Optional[datetime], duration, hints=None,
                   conflicts: Optional[ConflictResult] = None, **extra) -> dict:
    """Proposal dict shared by the bots and the merger."""
    end = end_after(start, duration) if start else None
    conflicts = conflicts or ConflictResult()
    proposal = {
        'title': title,
        'start_time': start.isoformat() if start else None,
        'end_time': end.isoformat() if end else None,
        'duration': duration,
        'hints': hints.to_dict() if hints else None,
        'moveable_conflicts': [c.to_record() for c in conflicts.moveable_conflicts],
        'immoveable_conflicts': [c.to_record() for c in conflicts.immoveable_conflicts],
    }
    proposal.update(extra)
    return proposal


class CreateBot:
    """Bot for creating new tasks from a free-text title."""

    def __init__(self, llm: Optional[LLM] = None):
        """
        Initialize create bot.

        Args:
            llm: LLM instance for duration estimates (None falls back to the default)
        """
        self.llm = llm

    def run(self, request: BotRequest) -> BotEnvelope:
        """
        Process create request.

        Args:
            request: BotRequest whose user_text is the task title

        Returns:
            BotEnvelope that either creates the task or asks how to resolve conflicts
        """
        now = request.now
        hints = parse_task_title(request.user_text, now)
        logger.info(f"📝 Parsed '{request.user_text}' -> '{hints.clean_title}' "
                    f"(time={hints.has_time}, day={hints.has_day}, duration={hints.has_duration})")

        if hints.has_duration:
            duration = hints.duration
        else:
            duration = resolve_duration(self.llm, hints, request.notes)

        skipped = count_unusable(request.events, now)
        if skipped:
            logger.warning(f"   ⚠️ Skipping {skipped} events with unusable timestamps")

        if hints.has_time:
            return self._handle_requested_time(request, hints, duration)

        search_from = business_start(hints.day) if hints.has_day else now
        start = find_next_available_slot(search_from, duration, request.events)

        if start is None:
            logger.info("   ❌ No free slot found - saving unscheduled")
            proposal = build_proposal(hints.clean_title, None, duration, hints, notes=request.notes)
            return BotEnvelope(
                stage="PLAN_CREATE",
                user_facing=f"I couldn't find a free slot for **{hints.clean_title}**. Added it to your list unscheduled.",
                immediate_actions=[dict(proposal, type='create')],
            )

        proposal = build_proposal(hints.clean_title, start, duration, hints, notes=request.notes)
        friendly = start.strftime("%A, %B %d at %H:%M")
        return BotEnvelope(
            stage="PLAN_CREATE",
            user_facing=f"Added **{hints.clean_title}** on {friendly} ({duration} minutes).",
            immediate_actions=[dict(proposal, type='create')],
        )

    def _handle_requested_time(self, request: BotRequest, hints, duration) -> BotEnvelope:
        """The title named a time: keep it, but check it first."""
        start = hints.time
        conflicts = detect_conflicts(start, duration, request.events)
        proposal = build_proposal(hints.clean_title, start, duration, hints, conflicts, notes=request.notes)
        friendly = start.strftime("%A, %B %d at %H:%M")

        if not conflicts.has_conflicts:
            return BotEnvelope(
                stage="PLAN_CREATE",
                user_facing=f"Added **{hints.clean_title}** on {friendly} ({duration} minutes).",
                immediate_actions=[dict(proposal, type='create')],
            )

        logger.info(f"   ⚠️ {len(conflicts.moveable_conflicts)} movable / "
                    f"{len(conflicts.immoveable_conflicts)} immovable conflicts")

        if conflicts.total == 1:
            lead = "Your task would overlap with an existing event"
        else:
            lead = f"Your task would overlap with {conflicts.total} existing events"

        return BotEnvelope(
            stage="PLAN_CREATE",
            user_facing=f"⚠️ **Time conflict detected!** {lead} on {friendly}: {describe_conflicts(conflicts)}",
            ask_resolution=True,
            proposal=proposal,
        )
