"""Fenced code block extraction from model output."""

from __future__ import annotations

import re
from dataclasses import dataclass

# Opening fence, optional language tag, newline, body, closing fence
_FENCE = re.compile(r"```(\w+)?\n([\s\S]*?)```")

TEXT_LANGUAGE = "text"
DEFAULT_EXTENSION = "txt"

FILE_EXTENSIONS: dict[str, str] = {
    "javascript": "js",
    "typescript": "ts",
    "python": "py",
    "java": "java",
    "csharp": "cs",
    "cpp": "cpp",
    "c": "c",
    "go": "go",
    "rust": "rs",
    "php": "php",
    "ruby": "rb",
    "swift": "swift",
    "kotlin": "kt",
    "html": "html",
    "css": "css",
    "scss": "scss",
    "sass": "sass",
    "sql": "sql",
    "shell": "sh",
    "bash": "sh",
    "json": "json",
    "yaml": "yml",
    "xml": "xml",
    "markdown": "md",
}


@dataclass(frozen=True)
class CodeBlock:
    language: str
    code: str


class CodeBlockExtractor:
    """Extracts fenced segments and maps them to synthetic filenames."""

    @staticmethod
    def extract(text: str) -> list[CodeBlock]:
        """Return code blocks in order of appearance.

        The body is kept verbatim except for the line break that precedes
        the closing fence.
        """
        blocks = []
        for match in _FENCE.finditer(text or ""):
            body = match.group(2)
            if body.endswith("\r\n"):
                body = body[:-2]
            elif body.endswith("\n"):
                body = body[:-1]
            blocks.append(CodeBlock(language=match.group(1) or TEXT_LANGUAGE, code=body))
        return blocks

    @staticmethod
    def file_extension(language: str) -> str:
        return FILE_EXTENSIONS.get(language.lower(), DEFAULT_EXTENSION)

    @classmethod
    def generate_file_structure(cls, blocks: list[CodeBlock]) -> dict[str, str]:
        """Map ``file1.<ext>``, ``file2.<ext>`` ... to block bodies."""
        return {
            f"file{index}.{cls.file_extension(block.language)}": block.code
            for index, block in enumerate(blocks, start=1)
        }
