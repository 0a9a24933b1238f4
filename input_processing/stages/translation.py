"""Message translation through the external classification service.

When the service is absent or a call fails, the original text is kept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .moderation import ResultSource

if TYPE_CHECKING:
    from core_router.adapters import ClassificationAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranslationResult:
    text: str
    target_language: str
    source: ResultSource


class Translator:
    """Translate text to a target language, falling back to the original."""

    def __init__(self, adapter: ClassificationAdapter | None = None):
        self.adapter = adapter

    def translate(self, text: str, target_language: str) -> TranslationResult:
        if self.adapter is None or target_language == "en" or not text:
            return TranslationResult(text, target_language, ResultSource.FALLBACK)

        outcome = self.adapter.classify(
            "translate",
            {"text": text, "targetLanguage": target_language, "sourceLanguage": "auto"},
        )
        translated = (outcome.data or {}).get("translatedText") if outcome.ok else None
        if isinstance(translated, str) and translated:
            return TranslationResult(translated, target_language, ResultSource.EXTERNAL)

        logger.warning(
            "Translation unavailable, keeping original text",
            extra={"target_language": target_language, "reason": outcome.error or "bad response"},
        )
        return TranslationResult(text, target_language, ResultSource.FALLBACK)
