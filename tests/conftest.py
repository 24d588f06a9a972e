import datetime as dt
import itertools
from typing import Callable, List, Optional

import pytest

from ainotes.config import Settings
from ainotes.controller import NotesController
from ainotes.schemas import AuthSession, AuthUser, Note, NoteCreate, QueryResult


USER = AuthUser(id="user-1", email="ada@example.com")


def make_session(user: AuthUser = USER, expires_at: Optional[int] = None) -> AuthSession:
    return AuthSession(
        access_token="access-1",
        refresh_token="refresh-1",
        expires_at=expires_at,
        user=user,
    )


def make_note(note_id, content="buy milk", summary=None, user_id=USER.id) -> Note:
    return Note(
        id=note_id,
        user_id=user_id,
        content=content,
        summary=summary,
        created_at=dt.datetime(2025, 1, 1, tzinfo=dt.timezone.utc)
        + dt.timedelta(minutes=note_id if isinstance(note_id, int) else 0),
    )


class FakeIdentity:
    def __init__(self, session: Optional[AuthSession] = None, user: Optional[AuthUser] = USER):
        self.session = session
        self.user = user
        self.handlers = {}
        self.sign_out_result = True
        self.calls: List[str] = []
        self._tokens = itertools.count(1)

    def get_current_session(self):
        return self.session

    def subscribe(self, handler):
        token = next(self._tokens)
        self.handlers[token] = handler
        return token

    def unsubscribe(self, token):
        self.handlers.pop(token, None)

    def emit(self, session):
        self.session = session
        for handler in list(self.handlers.values()):
            handler(session)

    def sign_in(self, provider_id):
        self.calls.append(f"sign_in:{provider_id}")
        return f"https://auth.example.com/authorize?provider={provider_id}"

    def complete_sign_in(self, code, flow_id):
        self.calls.append(f"complete:{code}:{flow_id}")
        self.emit(make_session(self.user))
        return self.session

    def sign_out(self):
        self.calls.append("sign_out")
        self.emit(None)
        return self.sign_out_result

    def get_current_user(self):
        self.calls.append("get_user")
        return self.user


class FakeNotesTable:
    """In-memory stand-in for the hosted table that records every call."""

    def __init__(self, rows: Optional[List[Note]] = None):
        self.rows: List[Note] = list(rows or [])
        self.calls: List[tuple] = []
        self.fail: set = set()
        self._ids = itertools.count(100)

    def _error(self, name):
        return QueryResult(error=f"{name} failed") if name in self.fail else None

    def select_all_ordered_by(self, column="created_at", descending=True):
        self.calls.append(("select", column, descending))
        failed = self._error("select")
        if failed:
            return failed
        rows = sorted(self.rows, key=lambda n: getattr(n, column), reverse=descending)
        return QueryResult(data=[row.model_copy() for row in rows])

    def insert(self, record: NoteCreate):
        self.calls.append(("insert", record))
        failed = self._error("insert")
        if failed:
            return failed
        note = make_note(next(self._ids), content=record.content, user_id=record.user_id)
        self.rows.append(note)
        return QueryResult(data=[note.model_copy()])

    def delete_by_id(self, note_id):
        self.calls.append(("delete", note_id))
        failed = self._error("delete")
        if failed:
            return failed
        self.rows = [row for row in self.rows if row.id != note_id]
        return QueryResult()

    def delete_all(self):
        self.calls.append(("delete_all",))
        failed = self._error("delete_all")
        if failed:
            return failed
        self.rows = []
        return QueryResult()

    def update_field_by_id(self, note_id, field, value):
        self.calls.append(("update", note_id, field, value))
        failed = self._error("update")
        if failed:
            return failed
        self.rows = [
            row.model_copy(update={field: value}) if row.id == note_id else row
            for row in self.rows
        ]
        return QueryResult()


class FakeSummarizer:
    def __init__(self, reply: str = "Reminder to purchase milk."):
        self.reply = reply
        self.prompts: List[str] = []
        self.hook: Optional[Callable[[str], None]] = None

    def summarize(self, text):
        self.prompts.append(text)
        if self.hook is not None:
            self.hook(text)
        return self.reply


class ManualTask:
    def __init__(self, due: float, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by an explicit clock for timer tests."""

    def __init__(self):
        self.now = 0.0
        self.tasks: List[ManualTask] = []

    def call_later(self, delay, callback):
        task = ManualTask(self.now + delay, callback)
        self.tasks.append(task)
        return task

    def advance(self, seconds: float) -> None:
        self.now += seconds
        for task in list(self.tasks):
            if not task.cancelled and task.due <= self.now:
                self.tasks.remove(task)
                task.callback()


class ConfirmStub:
    def __init__(self, answer: bool = True):
        self.answer = answer
        self.prompts: List[str] = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        return self.answer


@pytest.fixture
def settings():
    s = Settings()
    s.supabase_url = "https://proj.supabase.co"
    s.supabase_anon_key = "anon-key"
    s.gemini_api_key = "gemini-key"
    s.app_url = "http://localhost:8501"
    s.request_timeout_seconds = 5
    return s


@pytest.fixture
def identity():
    return FakeIdentity(session=make_session())


@pytest.fixture
def table():
    return FakeNotesTable([make_note(1, "buy milk")])


@pytest.fixture
def summarizer():
    return FakeSummarizer()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def confirm():
    return ConfirmStub(True)


@pytest.fixture
def controller(identity, table, summarizer, scheduler, confirm):
    ctrl = NotesController(
        identity=identity,
        notes=table,
        summarizer=summarizer,
        scheduler=scheduler,
        confirm=confirm,
        notification_seconds=3,
    )
    ctrl.initialize()
    table.calls.clear()
    return ctrl
