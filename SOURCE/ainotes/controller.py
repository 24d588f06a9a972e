"""
Application controller: owns all client-side state and issues the calls to
the identity provider, the notes table and the summarizer.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

from .identity import IdentityError
from .logging import get_logger
from .notifications import DANGER, SUCCESS, Notification, ScheduledTask, Scheduler
from .schemas import AuthSession, AuthUser, Note, NoteCreate, NoteId, QueryResult


logger = get_logger("controller")

ConfirmFn = Callable[[str], bool]

DELETE_PROMPT = "Are you sure you want to delete this note?"
CLEAR_ALL_PROMPT = "Delete ALL notes?"


class IdentityProvider(Protocol):
    def get_current_session(self) -> Optional[AuthSession]: ...
    def subscribe(self, handler: Callable[[Optional[AuthSession]], None]) -> int: ...
    def unsubscribe(self, token: int) -> None: ...
    def sign_in(self, provider_id: str) -> str: ...
    def complete_sign_in(self, code: str, flow_id: str) -> Optional[AuthSession]: ...
    def sign_out(self) -> bool: ...
    def get_current_user(self) -> Optional[AuthUser]: ...


class DataGateway(Protocol):
    def select_all_ordered_by(self, column: str = ..., descending: bool = ...) -> QueryResult: ...
    def insert(self, record: NoteCreate) -> QueryResult: ...
    def delete_by_id(self, note_id: NoteId) -> QueryResult: ...
    def delete_all(self) -> QueryResult: ...
    def update_field_by_id(self, note_id: NoteId, field: str, value: object) -> QueryResult: ...


class SummarizationGateway(Protocol):
    def summarize(self, text: str) -> str: ...


@dataclass
class AppState:
    session: Optional[AuthSession] = None
    notes: List[Note] = field(default_factory=list)
    draft: str = ""
    notification: Notification = field(default_factory=Notification)
    loading_id: Optional[NoteId] = None


class NotesController:
    """
    Mediates every state transition of the notes client.

    Operations never raise: gateway failures become danger notifications and
    leave the state at its last known good value.
    """

    def __init__(
        self,
        identity: IdentityProvider,
        notes: DataGateway,
        summarizer: SummarizationGateway,
        scheduler: Scheduler,
        confirm: ConfirmFn,
        provider_id: str = "github",
        notification_seconds: float = 3.0,
    ) -> None:
        self.identity = identity
        self.notes = notes
        self.summarizer = summarizer
        self.scheduler = scheduler
        self.confirm = confirm
        self.provider_id = provider_id
        self.notification_seconds = notification_seconds
        self.state = AppState()
        self._subscription: Optional[int] = None
        self._expiry: Optional[ScheduledTask] = None
        self._notification_ids = itertools.count(1)
        self._notification_lock = threading.RLock()

    # -- notifications -------------------------------------------------

    def notify(self, message: str, severity: str = SUCCESS) -> None:
        with self._notification_lock:
            if self._expiry is not None:
                self._expiry.cancel()
            ident = next(self._notification_ids)
            self.state.notification = Notification(True, message, severity, ident)
            self._expiry = self.scheduler.call_later(
                self.notification_seconds, lambda: self._expire_notification(ident)
            )

    def _expire_notification(self, ident: int) -> None:
        # Runs on the timer thread.
        with self._notification_lock:
            current = self.state.notification
            if current.ident != ident:
                return
            self.state.notification = Notification.hidden(current.severity)
            self._expiry = None

    def dismiss_notification(self) -> None:
        with self._notification_lock:
            if self._expiry is not None:
                self._expiry.cancel()
                self._expiry = None
            current = self.state.notification
            self.state.notification = Notification.hidden(current.severity, current.message)

    # -- session -------------------------------------------------------

    def initialize(self) -> None:
        session = self.identity.get_current_session()
        self.state.session = session
        if session is not None:
            self.refresh_notes()
        if self._subscription is None:
            self._subscription = self.identity.subscribe(self._on_auth_change)

    def _on_auth_change(self, session: Optional[AuthSession]) -> None:
        logger.debug("Auth state changed; signed in: %s", session is not None)
        self.state.session = session
        if session is not None:
            self.refresh_notes()

    def close(self) -> None:
        if self._subscription is not None:
            self.identity.unsubscribe(self._subscription)
            self._subscription = None
        with self._notification_lock:
            if self._expiry is not None:
                self._expiry.cancel()
                self._expiry = None

    def sign_in(self) -> str:
        return self.identity.sign_in(self.provider_id)

    def complete_sign_in(self, code: str, flow_id: str) -> None:
        """Finish the provider redirect; the subscription picks up the session."""
        try:
            self.identity.complete_sign_in(code, flow_id)
        except IdentityError as exc:
            logger.info("Ignoring sign-in callback: %s", exc)

    def sign_out(self) -> None:
        if not self.identity.sign_out():
            logger.info("Sign-out was not acknowledged by the provider")
        self.state.notes = []
        self.notify("Signed out!")

    # -- notes ---------------------------------------------------------

    def refresh_notes(self) -> None:
        result = self.notes.select_all_ordered_by("created_at", descending=True)
        if not result.ok:
            self.notify("Failed to fetch notes", DANGER)
            return
        self.state.notes = list(result.data)

    def set_draft(self, text: str) -> None:
        self.state.draft = text

    def add_note(self) -> None:
        content = self.state.draft
        if not content.strip():
            return

        user = self.identity.get_current_user()
        if user is None:
            self.notify("User not logged in", DANGER)
            return

        result = self.notes.insert(NoteCreate(user_id=user.id, content=content))
        if not result.ok:
            self.notify("Failed to add note", DANGER)
            return

        self.state.notes = [*result.data, *self.state.notes]
        self.state.draft = ""
        logger.info("Added note for user %s", user.id)
        self.notify("Note added!")

    def delete_note(self, note_id: NoteId) -> None:
        if not self.confirm(DELETE_PROMPT):
            return

        result = self.notes.delete_by_id(note_id)
        if not result.ok:
            self.notify("Failed to delete note", DANGER)
            return

        self.state.notes = [note for note in self.state.notes if note.id != note_id]
        self.notify("Note deleted!")

    def clear_all_notes(self) -> None:
        if not self.confirm(CLEAR_ALL_PROMPT):
            return

        result = self.notes.delete_all()
        if not result.ok:
            self.notify("Failed to clear notes", DANGER)
            return

        self.state.notes = []
        self.notify("All notes deleted!")

    def summarize(self, note_id: NoteId, content: str) -> None:
        # The marker only tracks the most recently started summarization.
        try:
            self.state.loading_id = note_id
            summary = self.summarizer.summarize(content)
            # Neither the update nor the refresh outcome is checked here.
            self.notes.update_field_by_id(note_id, "summary", summary)
            self.refresh_notes()
            self.notify("Note summarized!")
        except Exception:
            logger.exception("Summarization of note %s failed", note_id)
            self.notify("Summarization failed", DANGER)
        finally:
            self.state.loading_id = None


__all__ = [
    "AppState",
    "NotesController",
    "IdentityProvider",
    "DataGateway",
    "SummarizationGateway",
    "ConfirmFn",
    "DELETE_PROMPT",
    "CLEAR_ALL_PROMPT",
]
