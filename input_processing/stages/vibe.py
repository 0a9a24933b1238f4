"""Aesthetic "vibe" scoring.

Assigns free text to one category of a fixed taxonomy by weighted term
matching. Terms are matched as substrings of the lower-cased input, so a
term inside an unrelated word still counts. Everything returned besides the
score is a static lookup on the winning category.

Example:
    >>> VibeScorer().detect_vibe("a sleek, clean tech dashboard").primary_vibe
    'modern'
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VibePattern:
    """Term sets and static design tokens for one vibe category."""

    keywords: tuple[str, ...]
    mood: tuple[str, ...]
    visual: tuple[str, ...]
    colors: tuple[str, ...]
    typography: str
    animations: tuple[str, ...]
    cultural_markers: tuple[str, ...]
    emotional_indicators: tuple[str, ...]


# Declaration order breaks score ties
VIBE_PATTERNS: dict[str, VibePattern] = {
    "modern": VibePattern(
        keywords=("clean", "sleek", "contemporary", "minimalist", "fresh", "crisp", "tech", "digital"),
        mood=("professional", "confident", "efficient", "focused"),
        visual=("geometric", "spacious", "structured", "grid-based"),
        colors=("#3B82F6", "#8B5CF6", "#06B6D4", "#10B981"),
        typography="Inter, system-ui, sans-serif",
        animations=("fade", "slide", "scale", "smooth"),
        cultural_markers=("startup", "silicon valley", "innovation", "disruption"),
        emotional_indicators=("optimistic", "forward-thinking", "ambitious"),
    ),
    "retro": VibePattern(
        keywords=("vintage", "nostalgic", "classic", "old-school", "throwback", "80s", "90s", "neon"),
        mood=("warm", "nostalgic", "playful", "fun"),
        visual=("rounded", "textured", "layered", "gradient"),
        colors=("#F59E0B", "#EF4444", "#8B5CF6", "#EC4899"),
        typography="Georgia, serif",
        animations=("bounce", "pulse", "wiggle", "glow"),
        cultural_markers=("arcade", "synthwave", "vaporwave", "cassette"),
        emotional_indicators=("nostalgic", "whimsical", "carefree"),
    ),
    "minimal": VibePattern(
        keywords=("simple", "clean", "bare", "essential", "pure", "basic", "zen", "calm"),
        mood=("calm", "focused", "serene", "peaceful"),
        visual=("spacious", "uncluttered", "balanced", "white-space"),
        colors=("#6B7280", "#9CA3AF", "#D1D5DB", "#F3F4F6"),
        typography="system-ui, sans-serif",
        animations=("fade", "subtle", "gentle"),
        cultural_markers=("scandinavian", "japanese", "meditation", "mindfulness"),
        emotional_indicators=("tranquil", "centered", "mindful"),
    ),
    "vibrant": VibePattern(
        keywords=("colorful", "bright", "energetic", "bold", "lively", "dynamic", "rainbow", "pop"),
        mood=("exciting", "energetic", "joyful", "enthusiastic"),
        visual=("colorful", "contrasting", "dynamic", "explosive"),
        colors=("#10B981", "#F59E0B", "#EF4444", "#8B5CF6"),
        typography="system-ui, sans-serif",
        animations=("bounce", "shake", "rainbow", "pulse"),
        cultural_markers=("festival", "carnival", "celebration", "party"),
        emotional_indicators=("euphoric", "exuberant", "passionate"),
    ),
    "dark": VibePattern(
        keywords=("dark", "mysterious", "gothic", "noir", "shadow", "deep", "black", "night"),
        mood=("mysterious", "sophisticated", "dramatic", "intense"),
        visual=("shadowed", "contrasted", "moody", "atmospheric"),
        colors=("#1F2937", "#374151", "#4B5563", "#6B7280"),
        typography="system-ui, sans-serif",
        animations=("fade", "glow", "shadow", "emerge"),
        cultural_markers=("cyberpunk", "gothic", "noir", "underground"),
        emotional_indicators=("mysterious", "brooding", "contemplative"),
    ),
    "elegant": VibePattern(
        keywords=("sophisticated", "refined", "luxurious", "premium", "classy", "upscale", "gold", "marble"),
        mood=("sophisticated", "refined", "premium", "exclusive"),
        visual=("polished", "detailed", "refined", "ornate"),
        colors=("#8B5CF6", "#6366F1", "#EC4899", "#F59E0B"),
        typography="Georgia, serif",
        animations=("smooth", "elegant", "refined", "graceful"),
        cultural_markers=("luxury", "haute couture", "fine dining", "art gallery"),
        emotional_indicators=("refined", "distinguished", "aspirational"),
    ),
    "playful": VibePattern(
        keywords=("fun", "cute", "whimsical", "cartoon", "childlike", "bouncy", "silly", "kawaii"),
        mood=("playful", "cheerful", "innocent", "lighthearted"),
        visual=("rounded", "soft", "bubbly", "organic"),
        colors=("#EC4899", "#F59E0B", "#10B981", "#8B5CF6"),
        typography="Comic Sans MS, cursive",
        animations=("bounce", "wiggle", "spin", "float"),
        cultural_markers=("anime", "gaming", "toys", "childhood"),
        emotional_indicators=("joyful", "carefree", "innocent"),
    ),
    "professional": VibePattern(
        keywords=("business", "corporate", "formal", "serious", "executive", "suit", "office", "boardroom"),
        mood=("serious", "trustworthy", "reliable", "authoritative"),
        visual=("structured", "formal", "organized", "hierarchical"),
        colors=("#1F2937", "#3B82F6", "#6B7280", "#F3F4F6"),
        typography="Times New Roman, serif",
        animations=("fade", "slide", "professional"),
        cultural_markers=("wall street", "corporate", "banking", "consulting"),
        emotional_indicators=("confident", "authoritative", "trustworthy"),
    ),
}

DEFAULT_VIBE = "modern"

KEYWORD_WEIGHT = 5
MOOD_WEIGHT = 3
VISUAL_WEIGHT = 3
CULTURAL_MARKER_WEIGHT = 2
EMOTIONAL_WEIGHT = 2
CULTURAL_BONUS = 3

CULTURAL_MAPPINGS: dict[str, tuple[str, ...]] = {
    "minimal": ("japanese", "scandinavian", "nordic"),
    "elegant": ("french", "italian", "british"),
    "vibrant": ("latin", "african", "indian", "brazilian"),
    "modern": ("american", "german", "dutch"),
    "playful": ("japanese", "korean", "american"),
}

# vibe -> ordered (culture, description) pairs; "default" applies when none match
CULTURAL_CONTEXTS: dict[str, dict[str, str]] = {
    "minimal": {
        "japanese": "Influenced by Japanese minimalism and wabi-sabi philosophy",
        "scandinavian": "Nordic design principles with hygge aesthetics",
        "default": "Clean, uncluttered design approach",
    },
    "elegant": {
        "french": "French luxury and haute couture influence",
        "italian": "Italian craftsmanship and Renaissance aesthetics",
        "default": "Sophisticated and refined design language",
    },
    "vibrant": {
        "latin": "Latin American color traditions and festive culture",
        "indian": "Rich Indian color palettes and cultural vibrancy",
        "default": "Bold and energetic color expression",
    },
}

LAYOUT_STYLES: dict[str, str] = {
    "modern": "grid-based",
    "retro": "asymmetrical",
    "minimal": "spacious",
    "vibrant": "dynamic",
    "dark": "layered",
    "elegant": "structured",
    "playful": "organic",
    "professional": "hierarchical",
}

TONE_POSITIVE_WORDS = ("happy", "joy", "excited", "love", "amazing", "wonderful", "great")
TONE_NEGATIVE_WORDS = ("sad", "angry", "frustrated", "hate", "terrible", "awful", "bad")

VIBE_PROMPTS: dict[str, dict[str, str]] = {
    "en": {
        "modern": "Create a {vibe} design with {mood} energy. Focus on {visual} layouts with clean typography.",
        "retro": "Design with {vibe} aesthetics, embracing {mood} vibes and {visual} elements.",
        "minimal": "Craft a {vibe} interface emphasizing {mood} simplicity and {visual} composition.",
        "vibrant": "Build a {vibe} experience with {mood} energy and {visual} visual impact.",
        "dark": "Develop a {vibe} theme with {mood} atmosphere and {visual} aesthetics.",
        "elegant": "Create an {vibe} design showcasing {mood} sophistication and {visual} details.",
        "playful": "Design a {vibe} interface with {mood} character and {visual} elements.",
        "professional": "Build a {vibe} system with {mood} credibility and {visual} organization.",
    },
    "es": {
        "modern": "Crea un diseño {vibe} con energía {mood}. Enfócate en layouts {visual} con tipografía limpia.",
        "retro": "Diseña con estética {vibe}, abrazando vibes {mood} y elementos {visual}.",
        "minimal": "Crea una interfaz {vibe} enfatizando la simplicidad {mood} y composición {visual}.",
    },
    "fr": {
        "modern": (
            "Créez un design {vibe} avec une énergie {mood}. "
            "Concentrez-vous sur des layouts {visual} avec une typographie propre."
        ),
        "retro": "Concevez avec une esthétique {vibe}, embrassant des vibes {mood} et des éléments {visual}.",
    },
}


@dataclass(frozen=True)
class VibeAnalysis:
    """Scoring outcome for one input text."""

    primary_vibe: str
    mood: str
    visual_direction: str
    confidence: float
    color_palette: tuple[str, ...]
    typography: str
    animations: tuple[str, ...]
    keywords: tuple[str, ...]
    emotional_tone: str
    cultural_context: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key in ("color_palette", "animations", "keywords"):
            data[key] = list(data[key])
        return data


class VibeScorer:
    """Weighted-term classifier over ``VIBE_PATTERNS``.

    Attributes:
        confidence_cap: Score at which confidence reaches 1.0
    """

    def __init__(self, confidence_cap: int = 20):
        if confidence_cap <= 0:
            raise ValueError("confidence_cap must be positive")
        self.confidence_cap = confidence_cap

    def score(self, text: str, cultural_background: str | None = None) -> dict[str, int]:
        """Return the score of every vibe, in declaration order."""
        lowered = (text or "").lower()
        scores: dict[str, int] = {}
        for vibe, pattern in VIBE_PATTERNS.items():
            total = 0
            total += KEYWORD_WEIGHT * sum(1 for t in pattern.keywords if t in lowered)
            total += MOOD_WEIGHT * sum(1 for t in pattern.mood if t in lowered)
            total += VISUAL_WEIGHT * sum(1 for t in pattern.visual if t in lowered)
            total += CULTURAL_MARKER_WEIGHT * sum(1 for t in pattern.cultural_markers if t in lowered)
            total += EMOTIONAL_WEIGHT * sum(1 for t in pattern.emotional_indicators if t in lowered)
            if cultural_background:
                total += cultural_bonus(vibe, cultural_background)
            scores[vibe] = total
        return scores

    def detect_vibe(self, text: str, cultural_background: str | None = None) -> VibeAnalysis:
        """
        Classify ``text`` into a vibe.

        Args:
            text: Free-form description
            cultural_background: Optional hint such as "japanese"

        Returns:
            VibeAnalysis for the strictly highest scoring vibe (earliest on ties)
        """
        scores = self.score(text, cultural_background)

        primary, best = DEFAULT_VIBE, -1
        for vibe, value in scores.items():
            if value > best:
                primary, best = vibe, value

        pattern = VIBE_PATTERNS[primary]
        confidence = min(best, self.confidence_cap) / self.confidence_cap

        logger.debug("Vibe detected", extra={"vibe": primary, "score": best})

        return VibeAnalysis(
            primary_vibe=primary,
            mood=pattern.mood[0],
            visual_direction=pattern.visual[0],
            confidence=confidence,
            color_palette=pattern.colors,
            typography=pattern.typography,
            animations=pattern.animations,
            keywords=pattern.keywords,
            emotional_tone=emotional_tone(text),
            cultural_context=(
                infer_cultural_context(primary, cultural_background) if cultural_background else None
            ),
        )


def cultural_bonus(vibe: str, cultural_background: str) -> int:
    background = cultural_background.lower()
    cultures = CULTURAL_MAPPINGS.get(vibe, ())
    return CULTURAL_BONUS if any(c in background for c in cultures) else 0


def emotional_tone(text: str) -> str:
    """positive/negative/neutral by counting tone words present in ``text``."""
    lowered = (text or "").lower()
    positive = sum(1 for w in TONE_POSITIVE_WORDS if w in lowered)
    negative = sum(1 for w in TONE_NEGATIVE_WORDS if w in lowered)
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


def infer_cultural_context(vibe: str, cultural_background: str) -> str:
    contexts = CULTURAL_CONTEXTS.get(vibe)
    if not contexts:
        return f"{vibe} aesthetic approach"
    background = cultural_background.lower()
    for culture, description in contexts.items():
        if culture != "default" and culture in background:
            return description
    return contexts["default"]


def _pattern(vibe: str) -> VibePattern:
    return VIBE_PATTERNS.get(vibe, VIBE_PATTERNS[DEFAULT_VIBE])


def extract_color_palette(vibe: str) -> list[str]:
    return list(_pattern(vibe).colors)


def map_vibe_to_animations(vibe: str) -> list[str]:
    return list(_pattern(vibe).animations)


def select_typography(vibe: str) -> str:
    return _pattern(vibe).typography


def determine_layout_style(vibe: str) -> str:
    return LAYOUT_STYLES.get(vibe, "grid-based")


def generate_vibe_prompt(analysis: VibeAnalysis, language: str = "en") -> str:
    """Render a design prompt for ``analysis``.

    Unknown languages use English; a vibe without a template in the chosen
    language uses that language's ``modern`` template.
    """
    templates = VIBE_PROMPTS.get(language, VIBE_PROMPTS["en"])
    template = templates.get(analysis.primary_vibe, templates["modern"])
    return template.format(
        vibe=analysis.primary_vibe,
        mood=analysis.mood,
        visual=analysis.visual_direction,
    )
