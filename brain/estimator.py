# brain/estimator.py
"""
Duration estimation: how long will a task take?
Keyword rules first, then the title's own hint, then the LLM.
"""
import logging
import re
from typing import Optional

from core import config
from core.contracts import ParsedScheduleHints
from core.llm import LLM

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r'email|e-mail|send')
SLIDES_RE = re.compile(r'slide|slides|prep|preparing|presentation')

ESTIMATE_PROMPT = """Estimate how long in minutes the following task will take: "{context}".
Choose from these common durations: 15, 30, 45, 60, 90, 120, 180, 240, 300, 360 (6 hours max).
For most tasks, choose between 15-60 minutes. Only use longer durations (90+ minutes) for complex tasks like:
- Detailed analysis or research
- Creating comprehensive presentations or documents
- Complex coding projects
- Deep work sessions
- Workshop preparation
- Major project work

Consider both the task title and description (if provided) to make a more accurate estimate.
Respond with just one number representing the minutes."""


def is_email_task(clean_title: str) -> bool:
    return bool(EMAIL_RE.search(clean_title.lower()))


def heuristic_duration(clean_title: str) -> Optional[int]:
    """Fixed durations for emails and slide prep."""
    title = clean_title.lower()
    if EMAIL_RE.search(title):
        return 15
    if SLIDES_RE.search(title):
        return 30
    return None


def snap_duration(minutes: int) -> int:
    """Closest allowed duration."""
    return min(config.VALID_DURATIONS, key=lambda d: abs(d - minutes))


def estimate_duration(llm: Optional[LLM], title: str, notes: Optional[str] = None) -> int:
    """
    Ask the LLM how many minutes a task needs.

    Args:
        llm: LLM instance, or None when no API key is configured
        title: Task title (already cleaned of schedule hints)
        notes: Optional description for extra context

    Returns:
        One of VALID_DURATIONS, or DEFAULT_DURATION when the estimate fails
    """
    if llm is None:
        logger.warning("⚠️ No LLM configured - using default duration")
        return config.DEFAULT_DURATION

    context = title
    if notes and notes.strip():
        context += f"\n\nDescription: {notes.strip()}"

    try:
        text = llm.generate(ESTIMATE_PROMPT.format(context=context))
    except Exception as e:
        logger.error(f"❌ Duration estimate failed: {e}")
        return config.DEFAULT_DURATION

    match = re.search(r'\d+', text or '')
    minutes = int(match.group(0)) if match else 0
    if minutes <= 0:
        logger.warning(f"⚠️ Invalid duration returned: {text!r}")
        return config.DEFAULT_DURATION

    snapped = snap_duration(minutes)
    if snapped != minutes:
        logger.info(f"   Estimated {minutes} minutes, using closest valid duration: {snapped}")
    return snapped


def resolve_duration(llm: Optional[LLM], hints: ParsedScheduleHints,
                     notes: Optional[str] = None):
    """Duration for a parsed task: keyword rule, then explicit hint, then estimate."""
    fixed = heuristic_duration(hints.clean_title)
    if fixed is not None:
        return fixed
    if hints.has_duration:
        return hints.duration
    return estimate_duration(llm, hints.clean_title, notes)
