"""Configuration structures for the request pipeline.

``PipelineConfig`` holds process-level knobs shared by every request.
``ChatSettings`` holds the per-request options a caller may supply; it is
validated once at the boundary and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

REASONING_MODEL = "gemini-2.0-flash-thinking-exp"
COMPLEX_MODEL = "gemini-1.5-pro-latest"
DEFAULT_MODEL = "gemini-1.5-flash-latest"


@dataclass(frozen=True)
class PipelineConfig:
    """Process-level configuration for ``RequestPipeline``.

    Attributes:
        rate_limit: Admissions allowed per identity per window
        window_seconds: Fixed window length in seconds
        max_content_length: Message length above which a warning is issued
        max_conversation_length: Message count above which a warning is issued
        vibe_confidence_cap: Score at which vibe confidence saturates
        complex_text_length: Text length that selects the complex model tier
        reasoning_model: Model used for why/how/compare style questions
        complex_model: Model used for long or analysis-heavy text
        default_model: Lightweight default model
    """

    rate_limit: int = 100
    window_seconds: int = 60
    max_content_length: int = 10_000
    max_conversation_length: int = 50
    vibe_confidence_cap: int = 20
    complex_text_length: int = 500
    reasoning_model: str = REASONING_MODEL
    complex_model: str = COMPLEX_MODEL
    default_model: str = DEFAULT_MODEL

    def __post_init__(self) -> None:
        for name in (
            "rate_limit",
            "window_seconds",
            "max_content_length",
            "max_conversation_length",
            "vibe_confidence_cap",
            "complex_text_length",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        for name in ("reasoning_model", "complex_model", "default_model"):
            if not str(getattr(self, name)).strip():
                raise ValueError(f"{name} must be a non-empty string")


class ChatSettings(BaseModel):
    """Per-request user settings.

    Accepts both snake_case and camelCase keys (``targetLanguage``,
    ``forceModel`` ...). Unknown keys are rejected.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_p: float = Field(default=0.9, ge=0.0, le=1.0)
    max_tokens: int = Field(default=2048, gt=0)
    target_language: str = Field(default="en", min_length=2, max_length=8)
    auto_translate: bool = False
    use_search_grounding: bool = False
    force_model: str | None = None
    cultural_background: str | None = None
