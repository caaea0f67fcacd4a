"""Per-browser session state: active user, shown week, selection."""

from datetime import date

import streamlit as st
import structlog

from .cache import LiveCache
from .registry import delete_user, save_user
from .selection import SelectionMachine, recognizer_for
from .store import DocumentStore, StoreError
from .week import WeekWindow, monday, ymd

LOGGER = structlog.get_logger(__name__)

USER_PARAM = "user"      # kept in the URL so a reload keeps the name


def active_user() -> str:
    if "user" not in st.session_state:
        st.session_state["user"] = st.query_params.get(USER_PARAM, "").strip()
    return st.session_state["user"]


def set_active_user(name: str) -> None:
    name = (name or "").strip()
    st.session_state["user"] = name
    if name:
        st.query_params[USER_PARAM] = name
    else:
        st.query_params.pop(USER_PARAM, None)


def load_week() -> str:
    """Monday of the week this session was opened in."""
    if "load_week" not in st.session_state:
        st.session_state["load_week"] = ymd(monday(date.today()))
    return st.session_state["load_week"]


def week_window() -> WeekWindow:
    if "week" not in st.session_state:
        st.session_state["week"] = WeekWindow()
    return st.session_state["week"]


def selection(store: DocumentStore, cache: LiveCache):
    """The session's state machine and the gesture recognizer feeding it."""
    if "machine" not in st.session_state:
        machine = SelectionMachine(store, cache, load_week_key=load_week())
        st.session_state["machine"] = machine
        # buttons cannot report hover, so taps drive the machine
        st.session_state["gesture"] = recognizer_for(
            machine, pointer_hover=False, single_tap=cache.settings.single_tap
        )
    return st.session_state["machine"], st.session_state["gesture"]


def pick_user(store: DocumentStore, cache: LiveCache) -> str:
    """Select an existing name or type a new one; returns the active user."""
    user = active_user()
    names = cache.user_names
    options = [""] + names + ([user] if user and user not in names else [])

    left, middle, right = st.columns([3, 3, 1])
    chosen = left.selectbox(
        "User",
        options,
        index=options.index(user),
        format_func=lambda n: n or "Select or create user",
        label_visibility="collapsed",
        key=f"pick-user-{user}",
    )
    if chosen != user:
        set_active_user(chosen)
        user = chosen
    typed = middle.text_input("New user", placeholder="New user", label_visibility="collapsed")
    if right.button("Save User"):
        try:
            saved = save_user(store, cache, typed or user)
        except StoreError as err:
            LOGGER.error("save_user_failed", error=str(err))
            saved = None
        if saved:
            set_active_user(saved)
            st.rerun()
    return user


def manage_users(store: DocumentStore, cache: LiveCache) -> None:
    if not cache.users:
        return
    with st.expander("Manage Users"):
        for name in cache.user_names:
            label, button = st.columns([5, 1])
            label.write(name)
            if button.button("Delete", key=f"delete-user-{name}"):
                try:
                    delete_user(store, cache, name, cascade=cache.settings.cascade_user_delete)
                except StoreError as err:
                    LOGGER.error("delete_user_failed", name=name, error=str(err))
                if active_user() == name:
                    set_active_user("")
                st.rerun()
