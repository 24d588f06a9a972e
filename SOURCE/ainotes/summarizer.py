"""
Summarization gateway backed by the Gemini ``generateContent`` endpoint.
"""

from __future__ import annotations

from typing import Any, Dict

import requests

from .config import Settings, get_settings
from .logging import get_logger


logger = get_logger("summarizer")

FAILED_SUMMARY = "⚠️ Failed to summarize"

PROMPT_TEMPLATE = "Summarize this note in 2-3 sentences: {text}"


class Summarizer:
    """
    Sends one prompt per note to a fixed Gemini model.

    Failures of any kind (missing key, network, quota, malformed payload)
    are logged and collapsed into ``FAILED_SUMMARY`` instead of raising.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.base_url = settings.gemini_base_url.rstrip("/")
        self.model = settings.gemini_model
        self.api_key = settings.gemini_api_key
        self.timeout = settings.request_timeout_seconds

    def summarize(self, text: str) -> str:
        try:
            summary = self._generate(PROMPT_TEMPLATE.format(text=text))
        except Exception as exc:
            logger.error("Gemini API error: %s", exc)
            return FAILED_SUMMARY
        logger.debug("Gemini summary: %s", summary)
        return summary

    def _generate(self, prompt: str) -> str:
        if not self.api_key:
            raise RuntimeError("GEMINI_API_KEY is not set")
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        response = requests.post(
            f"{self.base_url}/models/{self.model}:generateContent",
            params={"key": self.api_key},
            json=payload,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return self._extract_text(response.json())

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            feedback = data.get("promptFeedback") or {}
            raise ValueError(f"No candidates returned: {feedback}")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)
        if not text:
            raise ValueError("Empty response text")
        return text


__all__ = ["Summarizer", "FAILED_SUMMARY", "PROMPT_TEMPLATE"]
