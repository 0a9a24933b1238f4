"""Sentiment analysis module.

Same two-branch shape as moderation: the external classification service
first, then a bag-of-words vote over small positive/negative word lists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from .moderation import ResultSource

if TYPE_CHECKING:
    from core_router.adapters import ClassificationAdapter

logger = logging.getLogger(__name__)


class SentimentLabel(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


EMOTIONS = ("joy", "anger", "fear", "sadness", "surprise")

POSITIVE_WORDS = frozenset(
    {"good", "great", "excellent", "amazing", "wonderful", "fantastic", "love", "like", "happy", "pleased"}
)
NEGATIVE_WORDS = frozenset(
    {"bad", "terrible", "awful", "horrible", "hate", "dislike", "angry", "frustrated", "disappointed", "sad"}
)

DECISION_CONFIDENCE = 0.7
TIE_CONFIDENCE = 0.6


@dataclass(frozen=True)
class SentimentResult:
    """Emotional tone of a text."""

    label: SentimentLabel
    confidence: float
    emotions: dict[str, float] = field(default_factory=dict)
    source: ResultSource = ResultSource.FALLBACK

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "label": self.label.value,
            "confidence": self.confidence,
            "source": self.source.value,
        }
        if self.emotions:
            data["emotions"] = dict(self.emotions)
        return data


class SentimentAnalyzer:
    """Sentiment classifier with an external primary path and local fallback."""

    def __init__(self, adapter: ClassificationAdapter | None = None):
        self.adapter = adapter

    def analyze(self, text: str) -> SentimentResult:
        """Classify the sentiment of ``text``. Never raises."""
        if self.adapter is not None:
            outcome = self.adapter.classify("sentiment", {"text": text})
            if outcome.ok and outcome.data is not None:
                parsed = self._parse_external(outcome.data)
                if parsed is not None:
                    return parsed
                reason = "malformed sentiment response"
            else:
                reason = outcome.error or "unknown error"
            logger.warning("Sentiment service unavailable, using fallback", extra={"reason": reason})

        return self.fallback(text)

    @staticmethod
    def fallback(text: str) -> SentimentResult:
        """Majority vote of whole words against the positive/negative lists."""
        words = (text or "").lower().split()
        positive = sum(1 for w in words if w in POSITIVE_WORDS)
        negative = sum(1 for w in words if w in NEGATIVE_WORDS)

        if positive > negative:
            return SentimentResult(SentimentLabel.POSITIVE, DECISION_CONFIDENCE)
        if negative > positive:
            return SentimentResult(SentimentLabel.NEGATIVE, DECISION_CONFIDENCE)
        return SentimentResult(SentimentLabel.NEUTRAL, TIE_CONFIDENCE)

    @staticmethod
    def _parse_external(data: dict[str, Any]) -> SentimentResult | None:
        try:
            label = SentimentLabel(data.get("label"))
            confidence = float(data.get("confidence"))
        except (TypeError, ValueError):
            return None
        if not 0.0 <= confidence <= 1.0:
            return None

        emotions: dict[str, float] = {}
        raw = data.get("emotions")
        if isinstance(raw, dict):
            for name in EMOTIONS:
                value = raw.get(name)
                if isinstance(value, int | float) and not isinstance(value, bool):
                    emotions[name] = float(value)

        return SentimentResult(label, confidence, emotions=emotions, source=ResultSource.EXTERNAL)
