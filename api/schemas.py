from __future__ import annotations

from dataclasses import asdict
from typing import Any, Literal, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from input_processing.config import ChatSettings
from input_processing.stages.intent import EditorContext
from input_processing.stages.security_scanner import ComplianceFramework

MAX_TEXT_CHARS = 100_000


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys; snake_case is accepted on input too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------------
# Chat DTOs
# -----------------------


class ChatMessage(CamelModel):
    # Role and content are checked by the pipeline's validator, which
    # reports every problem at once instead of failing on the first
    id: str | None = None
    role: Any = None
    content: Any = None


class EditorContextModel(CamelModel):
    current_file: str = ""
    files: dict[str, str] = Field(default_factory=lambda: cast("dict[str, str]", {}))
    language: str | None = None
    selected_text: str | None = None
    cursor_position: int = Field(default=0, ge=0)

    def to_context(self) -> EditorContext:
        return EditorContext(
            current_file=self.current_file,
            files=dict(self.files),
            language=self.language,
            selected_text=self.selected_text,
            cursor_position=self.cursor_position,
        )


class ChatPrepareRequest(CamelModel):
    messages: list[ChatMessage]
    settings: ChatSettings | None = None
    context: EditorContextModel | None = None


class SentimentModel(CamelModel):
    label: Literal["positive", "negative", "neutral"]
    confidence: float
    emotions: dict[str, float] | None = None
    source: Literal["external", "fallback"]


class CodeRequestModel(CamelModel):
    type: str
    language: str
    description: str
    framework: str | None = None
    existing_code: str | None = None
    requirements: list[str] = Field(default_factory=lambda: cast("list[str]", []))
    constraints: list[str] = Field(default_factory=lambda: cast("list[str]", []))


class PreparedMessage(CamelModel):
    id: str
    role: str
    content: str


class GenerationModel(CamelModel):
    """Sampling parameters forwarded to the downstream model call."""

    temperature: float
    top_p: float
    max_tokens: int

    @classmethod
    def from_settings(cls, settings: ChatSettings) -> GenerationModel:
        return cls(temperature=settings.temperature, top_p=settings.top_p, max_tokens=settings.max_tokens)


class ChatPrepareResponse(CamelModel):
    system_prompt: str
    model_id: str
    messages: list[PreparedMessage]
    request: CodeRequestModel
    sentiment: SentimentModel
    generation: GenerationModel
    warnings: list[str] = Field(default_factory=lambda: cast("list[str]", []))


class ChatResponseRequest(CamelModel):
    content: str = Field(..., max_length=MAX_TEXT_CHARS)
    scan: bool = True


class CodeBlockModel(CamelModel):
    language: str
    code: str


class ViolationModel(CamelModel):
    type: str
    severity: str
    message: str
    line: int | None = None
    column: int | None = None


class ScanResultModel(CamelModel):
    is_valid: bool
    violations: list[ViolationModel]
    risk_level: str
    recommendations: list[str]


class ComplianceModel(CamelModel):
    controls: dict[str, bool]
    principles: dict[str, bool]
    score: int

    @classmethod
    def from_framework(cls, framework: ComplianceFramework, score: int) -> ComplianceModel:
        return cls(
            controls=framework.controls(),
            principles=asdict(framework.principles),
            score=score,
        )


class ChatResponseAnalysis(CamelModel):
    blocks: list[CodeBlockModel]
    files: dict[str, str]
    scans: dict[str, ScanResultModel] | None = None
    compliance: ComplianceModel | None = None


# -----------------------
# Analysis DTOs
# -----------------------


class VibeRequest(CamelModel):
    text: str = Field(..., min_length=1, max_length=MAX_TEXT_CHARS)
    cultural_background: str | None = None
    # Detected from the text when omitted
    language: str | None = None

    @field_validator("text")
    @classmethod
    def _trim_and_check(cls, v: str) -> str:
        if v := v.strip():
            return v
        raise ValueError("text must not be empty")


class VibeAnalysisModel(CamelModel):
    primary_vibe: str
    mood: str
    visual_direction: str
    confidence: float
    color_palette: list[str]
    typography: str
    animations: list[str]
    keywords: list[str]
    emotional_tone: str
    cultural_context: str | None = None


class VibeResponse(CamelModel):
    analysis: VibeAnalysisModel
    layout_style: str
    prompt: str
    language: str
    direction: Literal["ltr", "rtl"]
    primary_vibe_label: str


class SecurityScanRequest(CamelModel):
    code: str = Field(..., max_length=MAX_TEXT_CHARS)


class SecurityScanResponse(CamelModel):
    result: ScanResultModel
    compliance: ComplianceModel
    report: str


class HealthResponse(CamelModel):
    status: Literal["ok"]
    classifier: Literal["external", "local"]
