"""
Pydantic models for the records exchanged with the hosted services.
"""

from __future__ import annotations

import datetime as dt
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


NoteId = Union[int, str]


class Note(BaseModel):
    id: NoteId
    user_id: str
    content: str = Field(min_length=1)
    summary: Optional[str] = None
    created_at: dt.datetime

    model_config = ConfigDict(extra="ignore")


class NoteCreate(BaseModel):
    user_id: str
    content: str = Field(min_length=1)


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @property
    def display_name(self) -> str:
        return (
            self.user_metadata.get("user_name")
            or self.user_metadata.get("full_name")
            or self.email
            or self.id
        )


class AuthSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    user: AuthUser

    model_config = ConfigDict(extra="ignore")

    def is_expired(self, now: Optional[float] = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at <= (time.time() if now is None else now)


@dataclass
class QueryResult:
    """Outcome of one data-gateway call: rows on success, a message on failure."""

    data: List[Note] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


__all__ = [
    "NoteId",
    "Note",
    "NoteCreate",
    "AuthUser",
    "AuthSession",
    "QueryResult",
]
