"""
Classification stages for the request pipeline.

Each module holds one component; all of them are pure functions of their
inputs except the rate limiter (shared counting store) and the moderation,
sentiment and translation stages (optional external call).
"""

from .code_blocks import CodeBlock, CodeBlockExtractor
from .counting_store import CountingStore, InMemoryCountingStore, RateLimitRecord, RedisCountingStore
from .intent import CodeIntentParser, CodeRequest, CodeRequestType, EditorContext
from .moderation import ContentModerator, ModerationResult, ResultSource
from .prompt_builder import (
    AssembledPrompt,
    PromptAssembler,
    generate_code_generation_prompt,
    generate_debugging_prompt,
    generate_optimization_prompt,
)
from .rate_limiter import RateLimitConfig, RateLimiter, RateLimitStatus
from .security_scanner import (
    ComplianceFramework,
    SecurityScanner,
    SecurityValidationResult,
    SecurityViolation,
    Severity,
    compliance_score,
    generate_security_report,
)
from .sentiment import SentimentAnalyzer, SentimentLabel, SentimentResult
from .translation import TranslationResult, Translator
from .validation import InputValidator, Message, Role, ValidationResult, sanitize_input
from .vibe import (
    VibeAnalysis,
    VibeScorer,
    determine_layout_style,
    extract_color_palette,
    generate_vibe_prompt,
    map_vibe_to_animations,
    select_typography,
)
from .xss_protection import XSSProtection

__all__ = [
    # Rate limiting
    "CountingStore",
    "InMemoryCountingStore",
    "RedisCountingStore",
    "RateLimitRecord",
    "RateLimitConfig",
    "RateLimitStatus",
    "RateLimiter",
    # Validation
    "Role",
    "Message",
    "ValidationResult",
    "InputValidator",
    "sanitize_input",
    "XSSProtection",
    # Moderation and sentiment
    "ResultSource",
    "ModerationResult",
    "ContentModerator",
    "SentimentLabel",
    "SentimentResult",
    "SentimentAnalyzer",
    "TranslationResult",
    "Translator",
    # Vibe scoring
    "VibeAnalysis",
    "VibeScorer",
    "extract_color_palette",
    "map_vibe_to_animations",
    "select_typography",
    "determine_layout_style",
    "generate_vibe_prompt",
    # Security scanning
    "Severity",
    "SecurityViolation",
    "SecurityValidationResult",
    "ComplianceFramework",
    "SecurityScanner",
    "compliance_score",
    "generate_security_report",
    # Code intent and prompts
    "CodeRequestType",
    "CodeRequest",
    "EditorContext",
    "CodeIntentParser",
    "AssembledPrompt",
    "PromptAssembler",
    "generate_code_generation_prompt",
    "generate_debugging_prompt",
    "generate_optimization_prompt",
    # Code blocks
    "CodeBlock",
    "CodeBlockExtractor",
]
