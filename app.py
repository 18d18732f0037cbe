# app.py
"""
Groov - Tasks and a weekly calendar in one place.
Type a task like "Call John on Friday at 3pm for 30 min" and Groov schedules it.
"""
import os
import logging
import streamlit as st
from datetime import timedelta

# Setup logger for debugging
logger = logging.getLogger(__name__)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Core imports
from core.contracts import BotRequest, ConflictResolution, TimeInterval
from core.llm import LLM
from core.state import (
    ensure_session_defaults, now_local, events_in_scope, get_unscheduled_tasks,
    get_day_tasks, add_calendar_event, delete_calendar_event, mark_complete, delete_task
)
from core.timeparse import parse_task_title, parse_when

# Brain imports
from brain.merge import handle_envelope, apply_resolution
from brain.bots.plan_create import CreateBot
from brain.bots.auto_schedule import AutoScheduleBot

# Page config
st.set_page_config(
    page_title="Groov - Tasks & Calendar",
    page_icon="🗓️",
    layout="wide",
    initial_sidebar_state="collapsed"
)

st.markdown("""
<style>
    :root {
        --primary: #6366f1;
        --primary-dark: #4f46e5;
    }

    .section-header {
        background: linear-gradient(135deg, #f8fafc 0%, #e2e8f0 100%);
        padding: 0.75rem 1.25rem;
        border-radius: 10px;
        margin: 1rem 0 0.75rem 0;
        border-left: 4px solid var(--primary);
    }

    .section-header h3 {
        margin: 0;
        color: var(--primary-dark);
        font-size: 1.15rem;
    }

    @media (max-width: 480px) {
        [data-testid="column"] {
            padding: 0.15rem !important;
            font-size: 0.75rem;
        }
    }
</style>
""", unsafe_allow_html=True)

# Initialize session state
ensure_session_defaults(st.session_state)


def load_api_key() -> str:
    """GEMINI_API_KEY from Streamlit secrets, else the environment."""
    try:
        key = st.secrets.get("GEMINI_API_KEY", "")
    except FileNotFoundError:
        key = ""
    return key or os.getenv("GEMINI_API_KEY", "")


API_KEY = load_api_key()
if not API_KEY:
    st.warning("⚠️ GEMINI_API_KEY not set - durations default to 30 minutes.")


@st.cache_resource
def init_brain():
    """Initialize the bots."""
    llm = LLM(api_key=API_KEY) if API_KEY else None
    return CreateBot(llm), AutoScheduleBot(llm)


create_bot, auto_bot = init_brain()

tz_options = [
    "America/Phoenix", "America/Los_Angeles", "America/Denver",
    "America/Chicago", "America/New_York", "Europe/London",
    "Europe/Paris", "Asia/Tokyo", "Asia/Shanghai", "UTC"
]
if st.session_state.tz_name not in tz_options:
    tz_options = [st.session_state.tz_name] + tz_options

# Top Navigation Bar
col_nav_left, col_nav_center, col_nav_right = st.columns([2, 2, 3])

with col_nav_left:
    st.markdown("## 🗓️ Groov")

with col_nav_center:
    st.session_state.tz_name = st.selectbox(
        "Timezone", tz_options,
        index=tz_options.index(st.session_state.tz_name),
        label_visibility="collapsed"
    )

with col_nav_right:
    as_of_text = st.text_input("Plan as of", placeholder="now (or e.g. 'next monday 9am')")

now = now_local(st.session_state)
if as_of_text:
    as_of = parse_when(as_of_text, now)
    if as_of is None:
        st.caption(f"🤷 Couldn't read '{as_of_text}' - using now.")
    else:
        now = as_of
st.caption(f"🕒 {now.strftime('%A %Y-%m-%d %H:%M')}")


def make_request(text: str = "", notes: str = None) -> BotRequest:
    return BotRequest(
        user_text=text,
        now_iso=now.isoformat(),
        tz_name=st.session_state.tz_name,
        events=events_in_scope(st.session_state),
        notes=notes,
    )


st.divider()

# Notices
for message in st.session_state.messages[-3:]:
    st.info(message)

col_left, col_right = st.columns([1, 2])

with col_left:
    st.markdown('<div class="section-header"><h3>➕ New Task</h3></div>', unsafe_allow_html=True)

    title = st.text_input("Task", placeholder="Call John on Friday at 3pm for 30 min", key="new_title")
    notes = st.text_area("Notes", height=68, key="new_notes")

    if title.strip():
        hints = parse_task_title(title, now)
        preview = [f"**{hints.clean_title}**"]
        if hints.has_day:
            preview.append(f"📅 {hints.day.strftime('%A %b %d')}")
        if hints.has_time:
            preview.append(f"⏰ {hints.time.strftime('%H:%M')}")
        if hints.has_duration:
            preview.append(f"⏳ {hints.duration} min")
        st.markdown(" · ".join(preview))

    if st.button("Add task", use_container_width=True, disabled=not title.strip()):
        try:
            envelope = create_bot.run(make_request(title, notes))
            handle_envelope(st.session_state, envelope)
        except Exception as e:
            logger.error(f"❌ Create failed: {e}")
            st.session_state.messages.append("😕 Oops! Something went wrong. Please try again.")
        st.rerun()

    # Conflict resolution
    pending = st.session_state.pending
    if pending:
        st.markdown('<div class="section-header"><h3>⚠️ Time Conflict</h3></div>', unsafe_allow_html=True)
        st.markdown(f"**{pending['title']}** at {pending['start_time'][11:16]}")

        if pending['immoveable_conflicts']:
            st.markdown("Fixed calendar events:")
            for c in pending['immoveable_conflicts']:
                st.markdown(f"- {c['title'] or 'Untitled Event'} ({c['start_time'][11:16]} - {c['end_time'][11:16]})")
        if pending['moveable_conflicts']:
            st.markdown("Your tasks:")
            for c in pending['moveable_conflicts']:
                st.markdown(f"- {c['title'] or 'Untitled Event'} ({c['start_time'][11:16]} - {c['end_time'][11:16]})")

        choice = None
        if pending['immoveable_conflicts'] and st.button("Schedule Anyway", use_container_width=True):
            choice = ConflictResolution("schedule_anyway")
        if pending['moveable_conflicts'] and st.button("Move Your Tasks & Schedule Here", use_container_width=True):
            choice = ConflictResolution(
                "move_moveable_tasks",
                [TimeInterval.from_record(c) for c in pending['moveable_conflicts']]
            )
        if st.button("Schedule This Task Later", use_container_width=True):
            choice = ConflictResolution("reschedule_new_task")
        if st.button("Cancel", use_container_width=True):
            choice = ConflictResolution("cancel")

        if choice:
            apply_resolution(st.session_state, pending, choice)
            st.rerun()

    # Unscheduled tasks
    st.markdown('<div class="section-header"><h3>📋 Unscheduled</h3></div>', unsafe_allow_html=True)
    unscheduled = get_unscheduled_tasks(st.session_state)
    if unscheduled:
        for task in unscheduled:
            st.markdown(f"• {task['title']}")
        col_a, col_b = st.columns(2)
        section = None
        with col_a:
            if st.button("Auto-schedule today", use_container_width=True):
                section = "today"
        with col_b:
            if st.button("Auto-schedule tomorrow", use_container_width=True):
                section = "tomorrow"
        if section:
            with st.spinner("🤔 Planning..."):
                try:
                    envelope = auto_bot.run(make_request(), unscheduled, section)
                    handle_envelope(st.session_state, envelope)
                except Exception as e:
                    logger.error(f"❌ Auto-schedule failed: {e}")
                    st.session_state.messages.append("😕 Oops! Something went wrong. Please try again.")
            st.rerun()
    else:
        st.caption("Nothing waiting. 🎉")

    # Calendar events (fixed)
    st.markdown('<div class="section-header"><h3>📌 Calendar Events</h3></div>', unsafe_allow_html=True)
    with st.form(key="event_form", clear_on_submit=True):
        event_title = st.text_input("Event")
        event_when = st.text_input("When", placeholder="friday 2pm")
        event_minutes = st.number_input("Minutes", min_value=5, max_value=720, value=60, step=5)
        submitted = st.form_submit_button("Add event", use_container_width=True)
    if submitted:
        start = parse_when(event_when, now)
        if start is None:
            st.error(f"Couldn't read '{event_when}'.")
        else:
            add_calendar_event(st.session_state, event_title or "Event", start,
                               start + timedelta(minutes=int(event_minutes)))
            st.rerun()

    for event in st.session_state.calendar_events:
        col1, col2 = st.columns([4, 1])
        with col1:
            st.markdown(f"📌 {event['title']} · {event['start_time'][:16].replace('T', ' ')}")
        with col2:
            if st.button("✕", key=f"del_ev_{event['id']}"):
                delete_calendar_event(st.session_state, event['id'])
                st.rerun()

with col_right:
    st.markdown('<div class="section-header"><h3>📅 Weekly Calendar</h3></div>', unsafe_allow_html=True)

    start_week = now - timedelta(days=now.weekday())
    week_dates = [start_week + timedelta(days=i) for i in range(7)]

    cols = st.columns(7)
    for i, d in enumerate(week_dates):
        with cols[i]:
            marker = '📍' if d.date() == now.date() else ''
            st.markdown(f"**{d.strftime('%a')}**  \n{marker}{d.strftime('%d')}")

            day_iso = d.date().isoformat()
            for event in st.session_state.calendar_events:
                if event['start_time'][:10] == day_iso:
                    st.markdown(f"📌 {event['start_time'][11:16]}")
                    st.caption(event['title'][:15])

            for task in get_day_tasks(st.session_state, d):
                status = "✅" if task['completed'] else "🔵"
                st.markdown(f"{status} {task['start_time'][11:16]}")
                st.caption(task['title'][:15])
                if not task['completed'] and st.button("Done", key=f"done_{task['id']}"):
                    mark_complete(st.session_state, task['id'])
                    st.rerun()
                if st.button("🗑️", key=f"del_{task['id']}"):
                    delete_task(st.session_state, task['id'])
                    st.rerun()

st.divider()
st.markdown("""
<div style="text-align: center; color: #94a3b8; font-size: 0.875rem;">
    Groov | Powered by Gemini AI | Built with Streamlit
</div>
""", unsafe_allow_html=True)
