"""
Pure rendering decisions shared by the Streamlit view.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .notifications import DANGER, INFO, SUCCESS, WARNING
from .schemas import Note, NoteId


@dataclass(frozen=True)
class NoteAction:
    show_summarize: bool
    label: str
    disabled: bool


def note_action(note: Note, loading_id: Optional[NoteId]) -> NoteAction:
    """Summarize control state for one note row."""
    busy = loading_id is not None and loading_id == note.id
    return NoteAction(
        show_summarize=not note.summary,
        label="Summarizing..." if busy else "Summarize",
        disabled=busy,
    )


def busy_note_id(requested_id: Optional[NoteId], loading_id: Optional[NoteId]) -> Optional[NoteId]:
    """Row to show as busy: a queued summarization request wins over the marker."""
    return requested_id if requested_id is not None else loading_id


_TOAST_CLASSES = {
    SUCCESS: "toast-success",
    DANGER: "toast-danger",
    WARNING: "toast-warning",
    INFO: "toast-info",
}


def toast_css_class(severity: str) -> str:
    return _TOAST_CLASSES.get(severity, "toast-info")


class StreamlitConfirm:
    """
    Two-step confirmation for a UI without blocking dialogs.

    The first call for a prompt records it as pending and answers ``False``;
    once the user approves, the replayed call for that prompt answers ``True``.
    """

    def __init__(self) -> None:
        self.pending: Optional[str] = None
        self._approved: Optional[str] = None

    def __call__(self, prompt: str) -> bool:
        if self._approved == prompt:
            self._approved = None
            return True
        self.pending = prompt
        return False

    def approve(self) -> None:
        self._approved = self.pending
        self.pending = None

    def reject(self) -> None:
        self.pending = None


__all__ = [
    "NoteAction",
    "StreamlitConfirm",
    "busy_note_id",
    "note_action",
    "toast_css_class",
]
