"""
Factory that wires the controller to the hosted services.
"""

from __future__ import annotations

from .config import Settings, get_settings
from .controller import ConfirmFn, NotesController
from .database import NotesTable
from .identity import PkceFlowStore, SupabaseAuth
from .logging import get_logger
from .notifications import Scheduler, ThreadingScheduler
from .summarizer import Summarizer


logger = get_logger("app")


def create_controller(
    confirm: ConfirmFn,
    flows: PkceFlowStore | None = None,
    scheduler: Scheduler | None = None,
    settings: Settings | None = None,
) -> NotesController:
    settings = settings or get_settings()

    if not settings.supabase_url or not settings.supabase_anon_key:
        logger.warning("SUPABASE_URL / SUPABASE_ANON_KEY not set - sign-in and storage will fail")
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY not set - summaries will fall back to the failure text")

    identity = SupabaseAuth(settings, flows)
    return NotesController(
        identity=identity,
        notes=NotesTable(settings, token_provider=identity.access_token),
        summarizer=Summarizer(settings),
        scheduler=scheduler or ThreadingScheduler(),
        confirm=confirm,
        provider_id=settings.oauth_provider,
        notification_seconds=settings.notification_seconds,
    )


__all__ = ["create_controller"]
