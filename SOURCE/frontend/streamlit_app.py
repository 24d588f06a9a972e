"""
Streamlit frontend for the AI notes app.
"""

from __future__ import annotations

import html
from typing import Any, Callable, Optional, Tuple

import streamlit as st

from ainotes import create_controller
from ainotes.config import get_settings
from ainotes.controller import NotesController
from ainotes.identity import PkceFlowStore
from ainotes.logging import get_logger, setup_logging
from ainotes.schemas import Note, NoteId
from ainotes.view import StreamlitConfirm, busy_note_id, note_action, toast_css_class


setup_logging()
logger = get_logger("frontend")


def inject_styles(seconds: float) -> None:
    st.markdown(
        f"""
        <style>
        /* Toast styling with fade-out once the notification expires */
        .app-toast {{
            padding: 0.9rem 1.2rem;
            border-radius: 0.75rem;
            margin-bottom: 0.5rem;
            font-weight: 500;
            animation: toast-fade {seconds}s forwards;
        }}
        .toast-success {{
            background-color: rgba(46, 204, 113, 0.2);
            color: #2ecc71;
        }}
        .toast-danger {{
            background-color: rgba(231, 76, 60, 0.2);
            color: #e74c3c;
        }}
        .toast-warning {{
            background-color: rgba(241, 196, 15, 0.2);
            color: #d4ac0d;
        }}
        .toast-info {{
            background-color: rgba(52, 152, 219, 0.2);
            color: #3498db;
        }}
        @keyframes toast-fade {{
            0%, 90% {{ opacity: 1; }}
            100% {{ opacity: 0; display: none; }}
        }}
        </style>
        """,
        unsafe_allow_html=True,
    )


@st.cache_resource
def get_flow_store() -> PkceFlowStore:
    return PkceFlowStore()


def get_confirm() -> StreamlitConfirm:
    return st.session_state.setdefault("confirm", StreamlitConfirm())


def get_controller() -> NotesController:
    controller = st.session_state.get("controller")
    if controller is None:
        controller = create_controller(get_confirm(), flows=get_flow_store())
        controller.initialize()
        st.session_state["controller"] = controller
    return controller


# -- callbacks ---------------------------------------------------------


def run_confirmed(name: str, *args: Any) -> None:
    getattr(get_controller(), name)(*args)
    if get_confirm().pending:
        st.session_state["pending_action"] = (name, args)


def approve_pending() -> None:
    get_confirm().approve()
    pending: Optional[Tuple[str, Tuple[Any, ...]]] = st.session_state.pop(
        "pending_action", None
    )
    if pending:
        name, args = pending
        getattr(get_controller(), name)(*args)


def reject_pending() -> None:
    get_confirm().reject()
    st.session_state.pop("pending_action", None)


def add_note() -> None:
    controller = get_controller()
    controller.set_draft(st.session_state.get("draft_input", ""))
    controller.add_note()
    st.session_state["draft_input"] = controller.state.draft


def request_summary(note_id: NoteId, content: str) -> None:
    # Runs after the next render so the row can show its busy label first.
    st.session_state["summarize_request"] = (note_id, content)


def run_requested_summary(controller: NotesController) -> None:
    request = st.session_state.pop("summarize_request", None)
    if request is None or controller.state.session is None:
        return
    with st.spinner("Summarizing..."):
        controller.summarize(*request)
    st.rerun()


def sign_out() -> None:
    get_controller().sign_out()
    st.session_state.pop("sign_in_url", None)


def handle_oauth_callback(controller: NotesController) -> None:
    params = st.query_params
    if "code" in params:
        controller.complete_sign_in(params["code"], params.get("flow", ""))
        st.session_state.pop("sign_in_url", None)
        params.clear()
    elif "error" in params:
        logger.info("Provider returned an error: %s", params.get("error_description"))
        params.clear()


# -- widgets -----------------------------------------------------------


def render_toast(
    visible: bool, message: str, severity: str, on_dismiss: Callable[[], None]
) -> None:
    if not visible:
        return
    body_col, close_col = st.columns([12, 1])
    body_col.markdown(
        f"<div class='app-toast {toast_css_class(severity)}' role='alert'>"
        f"{html.escape(message)}</div>",
        unsafe_allow_html=True,
    )
    close_col.button("✕", key="toast_dismiss", on_click=on_dismiss)


def render_pending_confirmation() -> None:
    prompt = get_confirm().pending
    if not prompt:
        return
    st.warning(prompt)
    yes_col, no_col = st.columns([1, 1])
    yes_col.button("Yes", key="confirm_yes", on_click=approve_pending)
    no_col.button("Cancel", key="confirm_no", on_click=reject_pending)


def render_note(note: Note, busy_id: Optional[NoteId]) -> None:
    action = note_action(note, busy_id)
    with st.container(border=True):
        text_col, button_col = st.columns([5, 1])
        with text_col:
            st.write(note.content)
            if note.summary:
                st.markdown(f"**Summary:** {note.summary}")
        with button_col:
            if action.show_summarize:
                st.button(
                    action.label,
                    key=f"summarize_{note.id}",
                    disabled=action.disabled,
                    on_click=request_summary,
                    args=(note.id, note.content),
                )
            st.button(
                "Delete",
                key=f"delete_{note.id}",
                on_click=run_confirmed,
                args=("delete_note", note.id),
            )


# -- screens -----------------------------------------------------------


def render_landing(controller: NotesController) -> None:
    st.title("AI Notes App")
    url = st.session_state.get("sign_in_url")
    if url is None:
        url = controller.sign_in()
        st.session_state["sign_in_url"] = url
    st.link_button("Sign in with GitHub", url, type="primary")


def render_workspace(controller: NotesController) -> None:
    title_col, clear_col, out_col = st.columns([4, 1, 1])
    title_col.title("AI Notes App")
    clear_col.button(
        "Clear All",
        key="clear_all",
        on_click=run_confirmed,
        args=("clear_all_notes",),
    )
    out_col.button("Sign out", key="sign_out", on_click=sign_out)
    st.caption(f"Signed in as {controller.state.session.user.display_name}")

    render_pending_confirmation()

    st.session_state.setdefault("draft_input", controller.state.draft)
    input_col, add_col = st.columns([6, 1])
    input_col.text_input(
        "Note",
        key="draft_input",
        placeholder="Write a note...",
        label_visibility="collapsed",
    )
    add_col.button("Add", key="add_note", on_click=add_note, type="primary")

    st.subheader("Your Notes")
    notes = controller.state.notes
    if not notes:
        st.caption("No notes yet.")
    request = st.session_state.get("summarize_request")
    busy_id = busy_note_id(request[0] if request else None, controller.state.loading_id)
    for note in notes:
        render_note(note, busy_id)


def main() -> None:
    st.set_page_config(page_title="AI Notes App", page_icon="📝")
    inject_styles(get_settings().notification_seconds)

    controller = get_controller()
    handle_oauth_callback(controller)

    if controller.state.session is None:
        render_landing(controller)
    else:
        render_workspace(controller)

    toast = controller.state.notification
    render_toast(
        toast.visible, toast.message, toast.severity, controller.dismiss_notification
    )

    run_requested_summary(controller)


if __name__ == "__main__":
    main()
