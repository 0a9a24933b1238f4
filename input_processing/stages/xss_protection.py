"""
XSS (Cross-Site Scripting) Protection Module.

Strips executable content from free text while leaving ordinary markup
alone, so formatting such as ``<em>`` survives sanitization.
"""

import re

# Complete script blocks, then any unterminated opening tag left over
_SCRIPT_BLOCK = re.compile(r"<script\b[^>]*>[\s\S]*?</script\s*>", re.IGNORECASE)
_SCRIPT_OPEN = re.compile(r"<script\b[^>]*>", re.IGNORECASE)

# Inline event handlers with double-quoted, single-quoted or bare values
_EVENT_HANDLER = re.compile(
    r"""\s*\bon\w+\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]*)""",
    re.IGNORECASE,
)


class XSSProtection:
    """Executable-content stripping used by input sanitization."""

    # Dangerous URI schemes
    DANGEROUS_PROTOCOLS: tuple[str, ...] = (
        "javascript:",
        "vbscript:",
        "data:text/html",
    )

    _PROTOCOL_PATTERN = re.compile(
        "|".join(r"\s*".join(re.escape(ch) for ch in p) for p in DANGEROUS_PROTOCOLS),
        re.IGNORECASE,
    )

    @staticmethod
    def strip_script_blocks(text: str) -> str:
        """Remove script elements together with their content."""
        text = _SCRIPT_BLOCK.sub("", text)
        return _SCRIPT_OPEN.sub("", text)

    @staticmethod
    def strip_dangerous_protocols(text: str) -> str:
        """Remove dangerous URI-scheme prefixes, tolerating inner whitespace."""
        return XSSProtection._PROTOCOL_PATTERN.sub("", text)

    @staticmethod
    def strip_event_handlers(text: str) -> str:
        """Remove inline ``on*=`` attributes and their values."""
        return _EVENT_HANDLER.sub("", text)

    @staticmethod
    def sanitize(text: str) -> str:
        """Main sanitization method.

        Passes repeat until nothing changes, so the output is a fixed point:
        ``sanitize(sanitize(x)) == sanitize(x)``.
        """
        if not text:
            return ""

        current = text.strip()
        while True:
            cleaned = XSSProtection.strip_script_blocks(current)
            cleaned = XSSProtection.strip_dangerous_protocols(cleaned)
            cleaned = XSSProtection.strip_event_handlers(cleaned)
            cleaned = cleaned.strip()
            if cleaned == current:
                return cleaned
            current = cleaned

    @staticmethod
    def detect_xss_attempt(text: str) -> bool:
        """Detect executable content that ``sanitize`` would remove."""
        if not text:
            return False
        return XSSProtection.sanitize(text) != text.strip()
