"""
main.py  –  Streamlit page for the shared weekly calendar
──────────────────────────────────────────────────────────
Run with:
    streamlit run main.py

Everyone on the page sees the same week grid; reservations live in a
Firestore collection (or in memory with CALENDAR_BACKEND=memory) and
show up for other users on the next snapshot.
"""

import atexit
import logging
import sys

import streamlit as st
import structlog

from shared_calendar import LiveCache, get_settings, get_store
from shared_calendar.grid import DAYS, SLOT_COUNT, slot_end_label, slot_label
from shared_calendar.render import grid_html, render_week
from shared_calendar.selection import SelectionState
from shared_calendar.session import (
    active_user,
    load_week,
    manage_users,
    pick_user,
    selection,
    week_window,
)
from shared_calendar.store import StoreError


def configure_logging(level: str) -> None:
    """Configure structlog + stdlib logging."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(message)s",
        stream=sys.stdout,
    )
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


LOGGER = structlog.get_logger(__name__)


st.set_page_config(page_title="Shared Weekly Calendar", layout="wide")


# ───────────────────────────────────────────────────────────────
# 1.  One live cache per process, shared by every browser session
# ───────────────────────────────────────────────────────────────
@st.cache_resource(show_spinner=False)
def live_cache() -> LiveCache:
    settings = get_settings()
    configure_logging(settings.log_level)
    cache = LiveCache(get_store(settings), settings).mount()
    atexit.register(cache.unmount)
    return cache


cache = live_cache()
store = cache.store
settings = cache.settings


# ───────────────────────────────────────────────────────────────
# 2.  Who am I?
# ───────────────────────────────────────────────────────────────
st.title("📅  Shared Weekly Calendar")

user = pick_user(store, cache)
manage_users(store, cache)
if user:
    st.write(f"Logged in as **{user}**")
else:
    st.caption("Pick or create a user to reserve time.")


# ───────────────────────────────────────────────────────────────
# 3.  Week navigation
# ───────────────────────────────────────────────────────────────
week = week_window()
machine, gesture = selection(store, cache)

prev_col, today_col, next_col, jump_col, label_col = st.columns([1, 1, 1, 2, 4])
if prev_col.button("◀ Prev"):
    week.prev()
if today_col.button("This week"):
    week.jump_to_today()
if next_col.button("Next ▶"):
    week.next()
picked = jump_col.date_input("Jump to", value=None, label_visibility="collapsed")
if picked is not None and picked != st.session_state.get("last_jump"):
    week.jump_to_date(picked)
st.session_state["last_jump"] = picked
label_col.markdown(f"**{week.label}**")


# ───────────────────────────────────────────────────────────────
# 4.  Confirmation dialog for a pending range
# ───────────────────────────────────────────────────────────────
@st.dialog("Add Description", on_dismiss=machine.cancel)
def confirm_dialog():
    sel = machine.selection
    st.write(f"{sel.day} · {slot_label(sel.start_slot)} – {slot_end_label(sel.end_slot)}")
    description = st.text_input("What are you doing?")
    ends = list(range(sel.start_slot, SLOT_COUNT))
    end = st.selectbox(
        "Until",
        ends,
        index=ends.index(sel.end_slot),
        format_func=slot_end_label,
    )
    cancel_col, save_col = st.columns(2)
    if cancel_col.button("Cancel"):
        machine.cancel()
        st.rerun()
    if save_col.button("Save", type="primary"):
        machine.set_end(end)
        try:
            machine.confirm(description, active_user(), week.key)
        except StoreError as err:
            LOGGER.error("reservation_write_failed", error=str(err))
        st.rerun()


if machine.state is SelectionState.PENDING_CONFIRM:
    confirm_dialog()


# ───────────────────────────────────────────────────────────────
# 5.  The grid, refreshed so other users' snapshots show up
# ───────────────────────────────────────────────────────────────
@st.fragment(run_every=settings.refresh_seconds)
def week_view():
    grid = render_week(cache.reservations_at(load_week()), week, machine)
    st.markdown(grid_html(grid), unsafe_allow_html=True)

    with st.expander("Tap a start and an end slot to reserve, tap your own slot to remove it",
                     expanded=True):
        header = st.columns(len(DAYS) + 1)
        for col, day, d in zip(header[1:], DAYS, grid.dates):
            col.markdown(f"**{day}** {d:%b} {d.day}")
        for slot, row in enumerate(grid.rows):
            cols = st.columns(len(DAYS) + 1)
            cols[0].caption(slot_label(slot))
            for col, cell in zip(cols[1:], row):
                text = " | ".join(seg.text for seg in cell.segments) or "·"
                clicked = col.button(
                    text,
                    key=f"cell-{cell.day}-{slot}",
                    type="primary" if cell.highlighted else "secondary",
                    use_container_width=True,
                )
                if not clicked:
                    continue
                try:
                    gesture.on_tap(cell.day, slot, active_user(), week.key)
                except StoreError as err:
                    LOGGER.error("reservation_delete_failed", error=str(err))
                st.rerun()


week_view()
