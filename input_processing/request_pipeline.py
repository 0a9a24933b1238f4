"""Request pipeline that runs a chat request through every classification stage.

Inbound control flow:

    RateLimiter -> InputValidator -> ContentModerator -> SentimentAnalyzer
    -> Translator (optional) -> CodeIntentParser -> PromptAssembler

Every rejection is returned as a value (``RateLimited``, ``ValidationFailed``,
``ContentBlocked``); a request that passes every stage yields ``Admitted``
carrying what the downstream model call needs. Model output is handed back
through ``process_response`` for code block extraction and scanning.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar, Protocol

from .config import ChatSettings, PipelineConfig
from .stages.code_blocks import CodeBlock, CodeBlockExtractor
from .stages.counting_store import CountingStore
from .stages.intent import CodeIntentParser, CodeRequest, EditorContext
from .stages.moderation import ContentModerator, ModerationResult
from .stages.prompt_builder import PromptAssembler
from .stages.rate_limiter import RateLimitConfig, RateLimiter, RateLimitStatus
from .stages.security_scanner import (
    ComplianceFramework,
    SecurityScanner,
    SecurityValidationResult,
    compliance_score,
)
from .stages.sentiment import SentimentAnalyzer, SentimentResult
from .stages.translation import Translator
from .stages.validation import InputValidator, Message, Role, sanitize_input
from .stages.vibe import VibeScorer

logger = logging.getLogger(__name__)


class RequestPipelineError(Exception):
    """Raised when a stage fails unexpectedly (not for rejections)."""


class FeedbackHook(Protocol):
    """Optional callback receiving short human-readable stage notes."""

    def __call__(self, message: str) -> None: ...


# === Outcomes ===


@dataclass(frozen=True)
class Admitted:
    outcome: ClassVar[str] = "admitted"

    system_prompt: str
    model_id: str
    messages: tuple[Message, ...]
    request: CodeRequest
    sentiment: SentimentResult
    moderation: ModerationResult
    rate_limit: RateLimitStatus
    warnings: tuple[str, ...] = ()
    settings: ChatSettings = field(default_factory=ChatSettings)


@dataclass(frozen=True)
class RateLimited:
    outcome: ClassVar[str] = "rate_limited"

    status: RateLimitStatus


@dataclass(frozen=True)
class ValidationFailed:
    outcome: ClassVar[str] = "validation_failed"

    errors: tuple[str, ...]
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class ContentBlocked:
    outcome: ClassVar[str] = "content_blocked"

    reasons: tuple[str, ...]
    categories: dict[str, float] = field(default_factory=dict)


PipelineOutcome = Admitted | RateLimited | ValidationFailed | ContentBlocked


@dataclass(frozen=True)
class ResponseAnalysis:
    """Post-processing of one model response."""

    blocks: tuple[CodeBlock, ...]
    files: dict[str, str]
    scans: dict[str, SecurityValidationResult] = field(default_factory=dict)
    compliance: ComplianceFramework | None = None
    compliance_score: int | None = None


class RequestPipeline:
    """Orchestrates the classification stages for chat requests.

    Attributes:
        config: Process-level configuration
        rate_limiter: Per-identity admission control
        validator: Structural message validation
        moderator: Safety classification
        sentiment_analyzer: Emotional tone classification
        translator: Optional message translation
        intent_parser: Code-intent extraction
        assembler: System prompt and model selection
        vibe_scorer: Aesthetic classification (used by analysis endpoints)
        security_scanner: Code scanning for model output
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        *,
        store: CountingStore | None = None,
        adapter: Any | None = None,
        feedback_hook: FeedbackHook | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Pipeline configuration; defaults are used when omitted
            store: Counting store for the rate limiter (in-memory by default)
            adapter: Classification adapter for moderation, sentiment and
                translation; local heuristics only when omitted
            feedback_hook: Optional callable receiving stage notes
        """
        self.config = config or PipelineConfig()
        self.feedback_hook = feedback_hook

        self.rate_limiter = RateLimiter(
            RateLimitConfig(
                max_requests=self.config.rate_limit,
                window_seconds=self.config.window_seconds,
            ),
            store=store,
        )
        self.validator = InputValidator(
            max_content_length=self.config.max_content_length,
            max_messages=self.config.max_conversation_length,
        )
        self.moderator = ContentModerator(adapter)
        self.sentiment_analyzer = SentimentAnalyzer(adapter)
        self.translator = Translator(adapter)
        self.intent_parser = CodeIntentParser()
        self.assembler = PromptAssembler(
            reasoning_model=self.config.reasoning_model,
            complex_model=self.config.complex_model,
            default_model=self.config.default_model,
            complex_text_length=self.config.complex_text_length,
        )
        self.vibe_scorer = VibeScorer(confidence_cap=self.config.vibe_confidence_cap)
        self.security_scanner = SecurityScanner()
        self.code_extractor = CodeBlockExtractor()

        self._counters_lock = threading.Lock()
        self.counters: dict[str, int] = {
            "admitted": 0,
            "rate_limited": 0,
            "validation_failed": 0,
            "content_blocked": 0,
        }

    @property
    def uses_external_classifier(self) -> bool:
        return self.moderator.adapter is not None

    def _feedback(self, message: str) -> None:
        if self.feedback_hook is not None:
            self.feedback_hook(message)

    def run(
        self,
        messages: Sequence[Any],
        identity: str,
        settings: ChatSettings | None = None,
        context: EditorContext | None = None,
    ) -> PipelineOutcome:
        """Process an inbound chat request.

        Args:
            messages: Ordered conversation (``Message`` objects or mappings)
            identity: Caller identity used for rate limiting
            settings: Per-request settings
            context: Optional editor state

        Returns:
            One of ``Admitted``, ``RateLimited``, ``ValidationFailed``,
            ``ContentBlocked``

        Raises:
            RequestPipelineError: If a stage fails unexpectedly
        """
        settings = settings or ChatSettings()
        try:
            outcome = self._run(messages, identity, settings, context)
        except RequestPipelineError:
            raise
        except Exception as e:
            logger.exception("Unexpected error in request pipeline")
            raise RequestPipelineError(f"Unexpected error in request pipeline: {e}") from e

        with self._counters_lock:
            self.counters[outcome.outcome] += 1
        return outcome

    def _run(
        self,
        messages: Sequence[Any],
        identity: str,
        settings: ChatSettings,
        context: EditorContext | None,
    ) -> PipelineOutcome:
        # Stage 0: admission
        status = self.rate_limiter.check(identity)
        if not status.allowed:
            logger.warning("Request rejected: rate limited", extra={"identity": identity})
            self._feedback(status.message)
            return RateLimited(status)

        message_count = len(messages) if isinstance(messages, list | tuple) else 0
        logger.info("Request admitted", extra={"identity": identity, "message_count": message_count})

        # Stage 1: validation
        validation = self.validator.validate(messages)
        if not validation.is_valid:
            logger.warning("Request rejected: validation failed", extra={"errors": list(validation.errors)})
            self._feedback("; ".join(validation.errors))
            return ValidationFailed(errors=validation.errors, warnings=validation.warnings)

        conversation = tuple(self._sanitized(_as_message(m)) for m in messages)
        emptied = tuple(
            f"Message {index}: Content is empty after sanitization"
            for index, m in enumerate(conversation, start=1)
            if not m.content
        )
        if emptied:
            logger.warning("Request rejected: validation failed", extra={"errors": list(emptied)})
            self._feedback("; ".join(emptied))
            return ValidationFailed(errors=emptied, warnings=validation.warnings)
        latest = conversation[-1].content

        # Stage 2: moderation of the latest message
        moderation = self.moderator.moderate(latest)
        if not moderation.safe:
            logger.warning("Request rejected: content blocked", extra={"reasons": list(moderation.reasons)})
            self._feedback("Content violates safety guidelines")
            return ContentBlocked(reasons=moderation.reasons, categories=dict(moderation.categories))

        # Stage 3: sentiment
        sentiment = self.sentiment_analyzer.analyze(latest)

        # Stage 4: translation
        if settings.auto_translate and settings.target_language != "en":
            conversation = tuple(
                Message(
                    id=m.id,
                    role=m.role,
                    content=self.translator.translate(m.content, settings.target_language).text,
                    timestamp=m.timestamp,
                )
                for m in conversation
            )

        # Stage 5: intent and prompt assembly
        request = self.intent_parser.parse(latest, context)
        prompt = self.assembler.assemble(request, moderation, sentiment, settings, context)

        self._feedback(f"Intent: {request.type.value}, model: {prompt.model_id}")
        return Admitted(
            system_prompt=prompt.system_prompt,
            model_id=prompt.model_id,
            messages=conversation,
            request=request,
            sentiment=sentiment,
            moderation=moderation,
            rate_limit=status,
            warnings=validation.warnings,
            settings=settings,
        )

    @staticmethod
    def _sanitized(message: Message) -> Message:
        if message.role is not Role.USER:
            return message
        cleaned = sanitize_input(message.content)
        if cleaned == message.content:
            return message
        return Message(id=message.id, role=message.role, content=cleaned, timestamp=message.timestamp)

    def process_response(self, text: str, scan: bool = True) -> ResponseAnalysis:
        """Extract code blocks from model output and optionally scan them.

        Args:
            text: Raw model response
            scan: Scan each synthetic file and score compliance of all code

        Returns:
            ResponseAnalysis
        """
        blocks = self.code_extractor.extract(text)
        files = self.code_extractor.generate_file_structure(blocks)
        if not scan:
            return ResponseAnalysis(blocks=tuple(blocks), files=files)

        scans = {name: self.security_scanner.scan(code) for name, code in files.items()}
        framework = self.security_scanner.compliance_check("\n".join(files.values()))
        return ResponseAnalysis(
            blocks=tuple(blocks),
            files=files,
            scans=scans,
            compliance=framework,
            compliance_score=compliance_score(framework),
        )

    def log_completion(self, usage: dict[str, Any] | None, sentiment: SentimentResult, model_id: str) -> None:
        """Record completion metrics for a finished model call."""
        logger.info(
            "Completion",
            extra={
                "tokens": dict(usage or {}),
                "sentiment": sentiment.label.value,
                "sentiment_confidence": sentiment.confidence,
                "model": model_id,
            },
        )

    def get_stats(self) -> dict[str, Any]:
        """Outcome counters plus rate limiter statistics."""
        with self._counters_lock:
            outcomes = dict(self.counters)
        return {"outcomes": outcomes, "rate_limit": self.rate_limiter.get_stats()}


def _as_message(raw: Any) -> Message:
    if isinstance(raw, Message):
        return raw
    if isinstance(raw, Mapping):
        role, content, message_id = raw["role"], raw["content"], raw.get("id")
    else:
        role, content, message_id = raw.role, raw.content, getattr(raw, "id", None)
    message = Message.create(role, content)
    if message_id:
        message = Message(
            id=str(message_id), role=message.role, content=message.content, timestamp=message.timestamp
        )
    return message
