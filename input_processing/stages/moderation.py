"""Content moderation module.

Classifies a text payload as safe or unsafe. The external classification
service is asked first; when it is not configured or the call fails, a
local keyword heuristic produces the result instead. Both branches return
a ``ModerationResult`` tagged with its ``source``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from core_router.adapters import ClassificationAdapter

logger = logging.getLogger(__name__)


class ResultSource(str, Enum):
    """Which branch produced a classification result."""

    EXTERNAL = "external"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ModerationResult:
    """Result of content moderation."""

    safe: bool
    reasons: tuple[str, ...] = ()
    categories: dict[str, float] = field(default_factory=dict)
    source: ResultSource = ResultSource.FALLBACK

    def to_dict(self) -> dict[str, Any]:
        return {
            "safe": self.safe,
            "reasons": list(self.reasons),
            "categories": dict(self.categories),
            "source": self.source.value,
        }


# Harm-category terms used by the local heuristic
HARM_KEYWORDS: tuple[str, ...] = ("hate", "violence", "harassment", "abuse", "threat")

FLAGGED_SCORE = 0.8
UNFLAGGED_SCORE = 0.1


class ContentModerator:
    """Safety classifier with an external primary path and local fallback.

    Attributes:
        adapter: Optional classification adapter for the external service
    """

    def __init__(self, adapter: ClassificationAdapter | None = None):
        self.adapter = adapter

    def moderate(self, text: str) -> ModerationResult:
        """Classify ``text``. Never raises.

        Args:
            text: Text to classify

        Returns:
            ModerationResult from the external service, or from the local
            heuristic when the service is absent or fails
        """
        if self.adapter is not None:
            outcome = self.adapter.classify("moderate", {"text": text})
            if outcome.ok and outcome.data is not None:
                parsed = self._parse_external(outcome.data)
                if parsed is not None:
                    return parsed
                reason = "malformed moderation response"
            else:
                reason = outcome.error or "unknown error"
            logger.warning("Moderation service unavailable, using fallback", extra={"reason": reason})

        return self.fallback(text)

    @staticmethod
    def fallback(text: str) -> ModerationResult:
        """Local keyword-presence heuristic.

        A category scores 0.8 when its term occurs in the lower-cased text and
        0.1 otherwise. ``sexual`` has no term and always scores 0.1.
        """
        lowered = (text or "").lower()
        found = [word for word in HARM_KEYWORDS if word in lowered]

        def score(word: str) -> float:
            return FLAGGED_SCORE if word in found else UNFLAGGED_SCORE

        categories = {
            "hate": score("hate"),
            "harassment": score("harassment"),
            "violence": score("violence"),
            "sexual": UNFLAGGED_SCORE,
            "dangerous": score("threat"),
        }
        reasons = ("Contains flagged keywords",) if found else ()

        return ModerationResult(
            safe=not found,
            reasons=reasons,
            categories=categories,
            source=ResultSource.FALLBACK,
        )

    @staticmethod
    def _parse_external(data: dict[str, Any]) -> ModerationResult | None:
        safe = data.get("safe")
        if not isinstance(safe, bool):
            return None

        reasons = data.get("reasons") or []
        categories = data.get("categories") or {}
        if not isinstance(reasons, list) or not isinstance(categories, dict):
            return None

        try:
            scores = {str(k): min(1.0, max(0.0, float(v))) for k, v in categories.items()}
        except (TypeError, ValueError):
            return None

        return ModerationResult(
            safe=safe,
            reasons=tuple(str(r) for r in reasons),
            categories=scores,
            source=ResultSource.EXTERNAL,
        )
