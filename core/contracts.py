# core/contracts.py
"""
Contracts module: Type definitions and data structures for Groov.
Defines what the parser, conflict detector, bots and merger exchange.
"""
from typing import Literal, Optional, Any, Union
from dataclasses import dataclass, field
from datetime import datetime

# Where an existing time block comes from
EventSource = Literal["task", "calendar"]

# Auto-schedule target sections
Section = Literal["today", "tomorrow"]

ResolutionAction = Literal[
    "schedule_anyway", "move_moveable_tasks", "reschedule_new_task", "cancel"
]
RESOLUTION_ACTIONS = ("schedule_anyway", "move_moveable_tasks", "reschedule_new_task", "cancel")


@dataclass
class ParsedScheduleHints:
    """Schedule hints extracted from a free-text task title."""
    clean_title: str
    time: Optional[datetime] = None
    day: Optional[datetime] = None  # start of the resolved day
    duration: Optional[Union[int, float]] = None  # minutes

    @property
    def has_time(self) -> bool:
        return self.time is not None

    @property
    def has_day(self) -> bool:
        return self.day is not None

    @property
    def has_duration(self) -> bool:
        return self.duration is not None

    def to_dict(self) -> dict:
        """Serializable view, used in proposals."""
        return {
            'clean_title': self.clean_title,
            'has_time': self.has_time,
            'has_day': self.has_day,
            'has_duration': self.has_duration,
            'time': self.time.isoformat() if self.time else None,
            'day': self.day.isoformat() if self.day else None,
            'duration': self.duration,
        }


@dataclass
class TimeInterval:
    """An existing commitment: a scheduled task or a synced calendar event."""
    start: Union[datetime, str, None]
    end: Union[datetime, str, None]
    title: Optional[str] = None
    source: EventSource = "task"  # unknown tags are treated as movable
    id: Optional[str] = None

    @classmethod
    def from_record(cls, record: dict, source: Optional[EventSource] = None) -> "TimeInterval":
        """
        Build from an event/task record.

        Args:
            record: Dict with start_time, end_time and optionally title, source, id
            source: Overrides the record's own source tag
        """
        return cls(
            start=record.get('start_time'),
            end=record.get('end_time'),
            title=record.get('title'),
            source=source or record.get('source') or "task",
            id=record.get('id'),
        )

    def to_record(self) -> dict:
        start = self.start.isoformat() if isinstance(self.start, datetime) else self.start
        end = self.end.isoformat() if isinstance(self.end, datetime) else self.end
        return {
            'id': self.id,
            'title': self.title,
            'start_time': start,
            'end_time': end,
            'source': self.source,
        }


@dataclass
class ConflictResult:
    """Overlapping intervals split by whether they can be moved."""
    moveable_conflicts: list[TimeInterval] = field(default_factory=list)
    immoveable_conflicts: list[TimeInterval] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.moveable_conflicts) + len(self.immoveable_conflicts)

    @property
    def has_conflicts(self) -> bool:
        return self.total > 0


@dataclass
class ConflictResolution:
    """User's answer to a conflict prompt."""
    action: ResolutionAction
    moveable_conflicts_to_move: list[TimeInterval] = field(default_factory=list)

    def __post_init__(self):
        if self.action not in RESOLUTION_ACTIONS:
            raise ValueError(f"Unknown resolution action: {self.action}")


@dataclass
class BotRequest:
    """Standardized request to any bot."""
    user_text: str
    now_iso: str  # ISO datetime string
    tz_name: str  # IANA timezone name
    events: list[TimeInterval] = field(default_factory=list)  # Existing time blocks
    notes: Optional[str] = None

    @property
    def now(self) -> datetime:
        """Convenience: parse now_iso to datetime."""
        return datetime.fromisoformat(self.now_iso)


@dataclass
class BotEnvelope:
    """Standardized response from any bot."""
    stage: Literal["PLAN_CREATE", "AUTO_SCHEDULE"]

    # User-facing message
    user_facing: str = ""

    # Conflict flow: proposal waits for a ConflictResolution
    ask_resolution: bool = False
    proposal: Optional[dict] = None

    # Actions that can be applied straight away
    immediate_actions: list[dict] = field(default_factory=list)

    def __post_init__(self):
        if self.ask_resolution and not self.proposal:
            raise ValueError("BotEnvelope asking for a resolution needs a proposal")
