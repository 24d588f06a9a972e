"""Rendering tests for the Streamlit screens."""

from __future__ import annotations

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from ainotes.controller import DELETE_PROMPT, NotesController
from ainotes.view import StreamlitConfirm

from conftest import FakeIdentity, FakeNotesTable, FakeSummarizer, ManualScheduler, make_note, make_session


APP_PATH = Path(__file__).resolve().parents[1] / "SOURCE" / "frontend" / "streamlit_app.py"


def _app(identity, table):
    confirm = StreamlitConfirm()
    controller = NotesController(
        identity=identity,
        notes=table,
        summarizer=FakeSummarizer(),
        scheduler=ManualScheduler(),
        confirm=confirm,
    )
    controller.initialize()
    at = AppTest.from_file(str(APP_PATH))
    at.session_state["confirm"] = confirm
    at.session_state["controller"] = controller
    return at, controller


@pytest.fixture
def workspace():
    return _app(FakeIdentity(session=make_session()), FakeNotesTable([make_note(1, "buy milk")]))


def test_landing_offers_only_sign_in():
    identity = FakeIdentity(session=None)
    at, _ = _app(identity, FakeNotesTable())
    at.run()

    assert not at.exception
    assert at.title[0].value == "AI Notes App"
    assert identity.calls == ["sign_in:github"]
    assert len(at.text_input) == 0


def test_workspace_lists_notes(workspace):
    at, _ = workspace
    at.run()

    assert not at.exception
    assert at.subheader[0].value == "Your Notes"
    assert at.button(key="summarize_1").label == "Summarize"
    assert at.button(key="delete_1").label == "Delete"


def test_empty_workspace_message():
    at, _ = _app(FakeIdentity(session=make_session()), FakeNotesTable())
    at.run()
    assert any(caption.value == "No notes yet." for caption in at.caption)


def test_add_note_clears_input(workspace):
    at, controller = workspace
    at.run()
    at.text_input(key="draft_input").input("water plants")
    at.button(key="add_note").click().run()

    assert not at.exception
    assert controller.state.notes[0].content == "water plants"
    assert at.text_input(key="draft_input").value == ""
    assert controller.state.notification.message == "Note added!"


def test_summarize_hides_button(workspace):
    at, controller = workspace
    at.run()
    at.button(key="summarize_1").click().run()

    assert not at.exception
    assert controller.state.notes[0].summary == "Reminder to purchase milk."
    assert controller.state.loading_id is None
    assert not any(button.key == "summarize_1" for button in at.button)
    assert "summarize_request" not in at.session_state


def test_summarize_runs_after_busy_render(workspace):
    at, controller = workspace
    seen = []
    controller.summarizer.hook = lambda text: seen.append(controller.state.loading_id)
    at.run()
    at.button(key="summarize_1").click().run()

    assert seen == [1]
    assert controller.summarizer.prompts == ["buy milk"]
    assert controller.state.notification.message == "Note summarized!"


def test_workspace_shows_signed_in_user(workspace):
    at, _ = workspace
    at.run()
    assert any(caption.value == "Signed in as ada@example.com" for caption in at.caption)


def test_delete_requires_confirmation(workspace):
    at, controller = workspace
    at.run()
    at.button(key="delete_1").click().run()

    assert len(controller.state.notes) == 1
    assert any(warning.value == DELETE_PROMPT for warning in at.warning)

    at.button(key="confirm_yes").click().run()
    assert controller.state.notes == []
    assert controller.state.notification.message == "Note deleted!"


def test_cancelled_delete_keeps_note(workspace):
    at, controller = workspace
    at.run()
    at.button(key="delete_1").click().run()
    at.button(key="confirm_no").click().run()

    assert len(controller.state.notes) == 1
    assert not any(warning.value == DELETE_PROMPT for warning in at.warning)


def test_toast_dismiss(workspace):
    at, controller = workspace
    controller.notify("Signed out!")
    at.run()
    at.button(key="toast_dismiss").click().run()

    assert not controller.state.notification.visible
