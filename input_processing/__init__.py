"""
Input Processing Package - request classification and prompt assembly
Handles rate limiting, validation, moderation, sentiment, vibe and security
scoring, code-intent parsing and system prompt assembly
"""

from .config import ChatSettings, PipelineConfig
from .request_pipeline import (
    Admitted,
    ContentBlocked,
    PipelineOutcome,
    RateLimited,
    RequestPipeline,
    RequestPipelineError,
    ResponseAnalysis,
    ValidationFailed,
)
from .stages import (
    CodeBlockExtractor,
    CodeIntentParser,
    ContentModerator,
    InMemoryCountingStore,
    InputValidator,
    PromptAssembler,
    RateLimiter,
    RedisCountingStore,
    SecurityScanner,
    SentimentAnalyzer,
    VibeScorer,
)

__all__ = [
    "PipelineConfig",
    "ChatSettings",
    "RequestPipeline",
    "RequestPipelineError",
    "PipelineOutcome",
    "Admitted",
    "RateLimited",
    "ValidationFailed",
    "ContentBlocked",
    "ResponseAnalysis",
    "RateLimiter",
    "InMemoryCountingStore",
    "RedisCountingStore",
    "InputValidator",
    "ContentModerator",
    "SentimentAnalyzer",
    "VibeScorer",
    "SecurityScanner",
    "CodeIntentParser",
    "PromptAssembler",
    "CodeBlockExtractor",
]
