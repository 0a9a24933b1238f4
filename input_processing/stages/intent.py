"""Code-intent parsing for coding requests.

Classifies a request into one of five intents and extracts the target
language, framework, requirements and constraints from free text.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CodeRequestType(str, Enum):
    """Types of coding intents."""

    GENERATE = "generate"  # Default when no cue word matches
    MODIFY = "modify"
    EXPLAIN = "explain"
    DEBUG = "debug"
    OPTIMIZE = "optimize"


@dataclass(frozen=True)
class EditorContext:
    """Editor state supplied by the UI layer."""

    current_file: str = ""
    files: Mapping[str, str] = field(default_factory=dict)  # filename -> code
    language: str | None = None
    selected_text: str | None = None
    cursor_position: int = 0

    @property
    def current_code(self) -> str | None:
        return self.files.get(self.current_file) if self.current_file else None


@dataclass(frozen=True)
class CodeRequest:
    """Structured form of a coding request."""

    type: CodeRequestType
    language: str
    description: str
    framework: str | None = None
    existing_code: str | None = None
    requirements: tuple[str, ...] = ()
    constraints: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "language": self.language,
            "framework": self.framework,
            "description": self.description,
            "existing_code": self.existing_code,
            "requirements": list(self.requirements),
            "constraints": list(self.constraints),
        }


DEFAULT_LANGUAGE = "javascript"

# Checked in priority order; first hit wins
INTENT_CUES: tuple[tuple[CodeRequestType, tuple[str, ...]], ...] = (
    (CodeRequestType.EXPLAIN, ("explain", "what does")),
    (CodeRequestType.DEBUG, ("debug", "fix", "error")),
    (CodeRequestType.OPTIMIZE, ("optimize", "improve", "performance")),
    (CodeRequestType.MODIFY, ("modify", "change", "update")),
)


def _word_pattern(body: str) -> re.Pattern[str]:
    return re.compile(rf"\b({body})\b", re.IGNORECASE)


LANGUAGE_PATTERNS: dict[str, re.Pattern[str]] = {
    "javascript": _word_pattern(r"javascript|js|node\.?js|react|vue|angular"),
    "typescript": _word_pattern(r"typescript|ts"),
    "python": _word_pattern(r"python|py|django|flask|fastapi"),
    "java": _word_pattern(r"java|spring|maven|gradle"),
    "csharp": _word_pattern(r"c#|csharp|\.net|dotnet"),
    "cpp": _word_pattern(r"c\+\+|cpp|c plus plus"),
    "c": _word_pattern(r"c language|c programming"),
    "go": _word_pattern(r"go|golang"),
    "rust": _word_pattern(r"rust|cargo"),
    "php": _word_pattern(r"php|laravel|symfony"),
    "ruby": _word_pattern(r"ruby|rails|gem"),
    "swift": _word_pattern(r"swift|ios|xcode"),
    "kotlin": _word_pattern(r"kotlin|android"),
    "html": _word_pattern(r"html|markup"),
    "css": _word_pattern(r"css|sass|scss|less|stylus"),
    "sql": _word_pattern(r"sql|mysql|postgresql|sqlite|database"),
    "shell": _word_pattern(r"bash|shell|zsh|fish|terminal"),
}

FRAMEWORK_PATTERNS: dict[str, re.Pattern[str]] = {
    "react": _word_pattern(r"react|jsx|next\.?js"),
    "vue": _word_pattern(r"vue|nuxt"),
    "angular": _word_pattern(r"angular|ng"),
    "svelte": _word_pattern(r"svelte|sveltekit"),
    "express": _word_pattern(r"express|express\.js"),
    "fastify": _word_pattern(r"fastify"),
    "django": _word_pattern(r"django"),
    "flask": _word_pattern(r"flask"),
    "spring": _word_pattern(r"spring|spring boot"),
    "laravel": _word_pattern(r"laravel"),
    "rails": _word_pattern(r"rails|ruby on rails"),
}

# Lead-ins capture the remainder of their line
REQUIREMENT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"requirements?:?\s*(.+)", re.IGNORECASE),
    re.compile(r"needs? to:?\s*(.+)", re.IGNORECASE),
    re.compile(r"should:?\s*(.+)", re.IGNORECASE),
    re.compile(r"must:?\s*(.+)", re.IGNORECASE),
)

CONSTRAINT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"constraints?:?\s*(.+)", re.IGNORECASE),
    re.compile(r"limitations?:?\s*(.+)", re.IGNORECASE),
    re.compile(r"don't use:?\s*(.+)", re.IGNORECASE),
    re.compile(r"avoid:?\s*(.+)", re.IGNORECASE),
    re.compile(r"without:?\s*(.+)", re.IGNORECASE),
)

# Case-sensitive cue word -> canned requirement
IMPLICIT_REQUIREMENTS: tuple[tuple[str, str], ...] = (
    ("responsive", "Make it responsive"),
    ("accessible", "Ensure accessibility"),
    ("performance", "Optimize for performance"),
    ("mobile", "Mobile-friendly"),
)


class CodeIntentParser:
    """Turns a free-text coding request into a ``CodeRequest``.

    Example:
        >>> CodeIntentParser().parse("Fix this error in my code").type
        <CodeRequestType.DEBUG: 'debug'>
    """

    def parse(self, text: str, context: EditorContext | None = None) -> CodeRequest:
        """
        Parse ``text`` into a structured request.

        Args:
            text: The user's request
            context: Optional editor state; its language wins over detection

        Returns:
            CodeRequest with intent, language, framework and extracted lists
        """
        return CodeRequest(
            type=self.classify_type(text),
            language=self.extract_language(text, context),
            framework=self.extract_framework(text),
            description=text,
            existing_code=context.current_code if context else None,
            requirements=self.extract_requirements(text),
            constraints=self.extract_constraints(text),
        )

    @staticmethod
    def classify_type(text: str) -> CodeRequestType:
        lowered = text.lower()
        for request_type, cues in INTENT_CUES:
            if any(cue in lowered for cue in cues):
                return request_type
        return CodeRequestType.GENERATE

    @staticmethod
    def extract_language(text: str, context: EditorContext | None = None) -> str:
        if context is not None and context.language:
            return context.language
        for language, pattern in LANGUAGE_PATTERNS.items():
            if pattern.search(text):
                return language
        return DEFAULT_LANGUAGE

    @staticmethod
    def extract_framework(text: str) -> str | None:
        for framework, pattern in FRAMEWORK_PATTERNS.items():
            if pattern.search(text):
                return framework
        return None

    @staticmethod
    def extract_requirements(text: str) -> tuple[str, ...]:
        found = [m.group(1).strip() for p in REQUIREMENT_PATTERNS if (m := p.search(text))]
        found.extend(requirement for cue, requirement in IMPLICIT_REQUIREMENTS if cue in text)
        return tuple(found)

    @staticmethod
    def extract_constraints(text: str) -> tuple[str, ...]:
        return tuple(m.group(1).strip() for p in CONSTRAINT_PATTERNS if (m := p.search(text)))
