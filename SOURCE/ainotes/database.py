"""
Data gateway for the hosted ``notes`` table, spoken over PostgREST.

Every call returns a ``QueryResult``; HTTP and transport failures become
``QueryResult.error`` rather than exceptions. Row-level security on the
server scopes every query to the signed-in user.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import requests
from pydantic import ValidationError
from requests.exceptions import RequestException

from .config import Settings, get_settings
from .logging import get_logger
from .schemas import Note, NoteCreate, NoteId, QueryResult


logger = get_logger("database")

TokenProvider = Callable[[], Optional[str]]


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        return str(
            payload.get("message")
            or payload.get("error")
            or payload.get("hint")
            or payload
        )
    return str(payload)


class NotesTable:
    """Query-style access to one externally managed table."""

    def __init__(
        self,
        settings: Settings | None = None,
        token_provider: TokenProvider | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.url = f"{settings.rest_url}/{settings.notes_table}"
        self.api_key = settings.supabase_anon_key
        self.timeout = settings.request_timeout_seconds
        self.token_provider = token_provider or (lambda: None)

    def _headers(self, **extra: str) -> Dict[str, str]:
        token = self.token_provider() or self.api_key
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        headers.update(extra)
        return headers

    def _request(
        self,
        method: str,
        params: Dict[str, str],
        json: Any = None,
        prefer: str = "return=minimal",
    ) -> QueryResult:
        try:
            response = requests.request(
                method,
                self.url,
                params=params,
                json=json,
                headers=self._headers(Prefer=prefer),
                timeout=self.timeout,
            )
        except RequestException as exc:
            logger.warning("%s %s failed: %s", method, self.url, exc)
            return QueryResult(error=str(exc))

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning(
                "%s %s returned %s: %s", method, self.url, response.status_code, message
            )
            return QueryResult(error=message)

        if not response.content:
            return QueryResult()
        try:
            rows: List[Dict[str, Any]] = response.json()
            return QueryResult(data=[Note.model_validate(row) for row in rows])
        except (ValueError, TypeError, ValidationError) as exc:
            logger.warning("Unreadable rows from %s: %s", self.url, exc)
            return QueryResult(error=f"Invalid response: {exc}")

    def select_all_ordered_by(
        self, column: str = "created_at", descending: bool = True
    ) -> QueryResult:
        direction = "desc" if descending else "asc"
        return self._request(
            "GET", {"select": "*", "order": f"{column}.{direction}"}
        )

    def insert(self, record: NoteCreate) -> QueryResult:
        return self._request(
            "POST",
            {"select": "*"},
            json=[record.model_dump()],
            prefer="return=representation",
        )

    def delete_by_id(self, note_id: NoteId) -> QueryResult:
        return self._request("DELETE", {"id": f"eq.{note_id}"})

    def delete_all(self) -> QueryResult:
        # PostgREST rejects unfiltered deletes; this filter matches every row.
        return self._request("DELETE", {"id": "neq.0"})

    def update_field_by_id(self, note_id: NoteId, field: str, value: Any) -> QueryResult:
        return self._request("PATCH", {"id": f"eq.{note_id}"}, json={field: value})


__all__ = ["NotesTable", "TokenProvider"]
