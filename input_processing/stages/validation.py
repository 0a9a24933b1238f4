"""
Input validation module for chat message lists.

This module is the structural gate in front of the pipeline. It checks that
a conversation is a non-empty list of well-formed messages and flags
content that looks like script injection. Validity is decided by errors
alone; warnings never block a request.

Classes:
    Role: Closed set of message roles
    Message: Immutable chat message
    ValidationResult: Dataclass containing validation results
    InputValidator: Main validation class

Example:
    >>> validator = InputValidator()
    >>> result = validator.validate([Message(id="1", role=Role.USER, content="Hi")])
    >>> print(f"Valid: {result.is_valid}, Warnings: {list(result.warnings)}")
    Valid: True, Warnings: []
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from re import Pattern
from typing import Any

from .xss_protection import XSSProtection

VALID_REQUEST_TYPES = ("generate", "modify", "explain", "debug", "optimize")


class Role(str, Enum):
    """Roles a message may carry."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class Message:
    """A single chat message."""

    id: str
    role: Role
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(cls, role: Role | str, content: str) -> Message:
        """Build a message with a generated id and the current timestamp."""
        return cls(id=str(uuid.uuid4()), role=Role(role), content=content)

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True)
class ValidationResult:
    """
    Result of validation.

    Attributes:
        is_valid: True when no errors were found
        errors: Rule violations that block the request
        warnings: Advisory findings that do not block the request
    """

    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


class InputValidator:
    """
    Validates chat message lists.

    Attributes:
        max_content_length: Content length above which a warning is issued
        max_messages: Conversation length above which a warning is issued
        suspicious_patterns: Patterns that mark content as suspicious
    """

    def __init__(self, max_content_length: int = 10_000, max_messages: int = 50):
        self.max_content_length = max_content_length
        self.max_messages = max_messages
        self.suspicious_patterns: list[Pattern[str]] = [
            re.compile(r"eval\s*\(", re.IGNORECASE),
            re.compile(r"document\.write", re.IGNORECASE),
            re.compile(r"innerHTML\s*=", re.IGNORECASE),
            re.compile(r"script\s*>", re.IGNORECASE),
            re.compile(r"\bon\w+\s*=\s*[\"']", re.IGNORECASE),
            re.compile(r"javascript:", re.IGNORECASE),
            re.compile(r"data:text/html", re.IGNORECASE),
            re.compile(r"vbscript:", re.IGNORECASE),
        ]

    def validate(self, messages: Any) -> ValidationResult:
        """
        Validate a conversation.

        Args:
            messages: Ordered list of ``Message`` objects or mappings with
                ``role`` and ``content`` keys

        Returns:
            ValidationResult with the errors and warnings found
        """
        errors: list[str] = []
        warnings: list[str] = []

        if not isinstance(messages, list | tuple):
            return ValidationResult(is_valid=False, errors=("Messages must be a list",))

        if len(messages) == 0:
            return ValidationResult(is_valid=False, errors=("At least one message is required",))

        for index, message in enumerate(messages, start=1):
            role, content = _role_and_content(message)

            if not isinstance(content, str) or not content:
                errors.append(f"Message {index}: Content is required and must be a string")

            if not isinstance(role, str) or role not in {r.value for r in Role}:
                errors.append(f"Message {index}: Role must be 'user', 'assistant', or 'system'")

            if isinstance(content, str) and content:
                if len(content) > self.max_content_length:
                    warnings.append(
                        f"Message {index}: Content is very long ({len(content)} characters)"
                    )
                if self.contains_suspicious_content(content):
                    warnings.append(f"Message {index}: Contains potentially suspicious content")

        if len(messages) > self.max_messages:
            warnings.append(
                "Conversation is very long. Consider starting a new conversation "
                "for better performance."
            )

        return ValidationResult(
            is_valid=not errors,
            errors=tuple(errors),
            warnings=tuple(warnings),
        )

    def contains_suspicious_content(self, content: str) -> bool:
        """Return True if any suspicious pattern occurs in ``content``."""
        return any(pattern.search(content) for pattern in self.suspicious_patterns)

    def validate_code_request(self, request: Mapping[str, Any]) -> ValidationResult:
        """
        Validate a code-request shaped mapping.

        Args:
            request: Mapping with ``type``, ``description`` and optional
                ``language`` keys

        Returns:
            ValidationResult
        """
        errors: list[str] = []
        warnings: list[str] = []

        request_type = request.get("type")
        if hasattr(request_type, "value"):
            request_type = request_type.value
        if request_type not in VALID_REQUEST_TYPES:
            errors.append("Invalid request type")

        description = request.get("description")
        if not description or not isinstance(description, str):
            errors.append("Description is required")
        elif len(description) < 10:
            warnings.append(
                "Description is very short. More details would help generate better code."
            )

        language = request.get("language")
        if language is not None and not isinstance(language, str):
            errors.append("Language must be a string")

        return ValidationResult(
            is_valid=not errors,
            errors=tuple(errors),
            warnings=tuple(warnings),
        )


def _role_and_content(message: Any) -> tuple[Any, Any]:
    if isinstance(message, Message):
        return message.role.value, message.content
    if isinstance(message, Mapping):
        role = message.get("role")
        if isinstance(role, Role):
            role = role.value
        return role, message.get("content")
    return getattr(message, "role", None), getattr(message, "content", None)


def sanitize_input(text: str) -> str:
    """Strip script blocks, dangerous URI schemes and inline event handlers.

    Other markup is left untouched. Idempotent.
    """
    return XSSProtection.sanitize(text)
