from __future__ import annotations

import pytest

from input_processing.stages.validation import (
    InputValidator,
    Message,
    Role,
    sanitize_input,
)
from input_processing.stages.xss_protection import XSSProtection


def _msg(role: str = "user", content: str = "hello") -> dict[str, str]:
    return {"role": role, "content": content}


def test_valid_conversation_has_no_errors():
    result = InputValidator().validate([_msg(), _msg("assistant", "hi"), _msg("system", "be nice")])
    assert result.is_valid
    assert result.errors == ()
    assert result.warnings == ()


def test_non_list_is_rejected():
    result = InputValidator().validate("hello")
    assert not result.is_valid
    assert result.errors == ("Messages must be a list",)


def test_empty_list_is_rejected():
    result = InputValidator().validate([])
    assert result.errors == ("At least one message is required",)


def test_every_bad_message_is_reported_with_its_position():
    result = InputValidator().validate([_msg(), {"role": "robot", "content": ""}])
    assert not result.is_valid
    assert result.errors == (
        "Message 2: Content is required and must be a string",
        "Message 2: Role must be 'user', 'assistant', or 'system'",
    )


@pytest.mark.parametrize("role", [None, 3, ["user"], "USER"])
def test_invalid_roles(role):
    result = InputValidator().validate([{"role": role, "content": "x"}])
    assert result.errors == ("Message 1: Role must be 'user', 'assistant', or 'system'",)


def test_message_objects_are_accepted():
    result = InputValidator().validate([Message.create(Role.USER, "hello")])
    assert result.is_valid


def test_long_content_warns_but_passes():
    validator = InputValidator(max_content_length=10)
    result = validator.validate([_msg(content="x" * 11)])
    assert result.is_valid
    assert result.warnings == ("Message 1: Content is very long (11 characters)",)


def test_long_conversation_warns():
    validator = InputValidator(max_messages=2)
    result = validator.validate([_msg()] * 3)
    assert result.is_valid
    assert any("Conversation is very long" in w for w in result.warnings)


@pytest.mark.parametrize(
    "content",
    [
        "eval(x)",
        "document.write('a')",
        "el.innerHTML = y",
        "<script>alert(1)</script>",
        '<img onerror="x">',
        "javascript:void(0)",
        "data:text/html,hi",
        "vbscript:msgbox",
    ],
)
def test_suspicious_content_warns(content):
    result = InputValidator().validate([_msg(content=content)])
    assert result.is_valid
    assert result.warnings == ("Message 1: Contains potentially suspicious content",)


def test_plain_content_is_not_suspicious():
    assert not InputValidator().contains_suspicious_content("please write a sorting function")


def test_validate_code_request():
    validator = InputValidator()
    ok = validator.validate_code_request(
        {"type": "generate", "description": "Build a todo list app", "language": "python"}
    )
    assert ok.is_valid
    assert ok.warnings == ()

    short = validator.validate_code_request({"type": "debug", "description": "fix it"})
    assert short.is_valid
    assert len(short.warnings) == 1

    bad = validator.validate_code_request({"type": "refactor", "description": "", "language": 3})
    assert bad.errors == ("Invalid request type", "Description is required", "Language must be a string")


def test_sanitize_removes_script_blocks():
    assert sanitize_input("<script>alert(1)</script>hello") == "hello"


def test_sanitize_removes_event_handlers_and_protocols():
    assert sanitize_input('<img src="x" onerror="alert(1)">') == '<img src="x">'
    assert sanitize_input("<a href='javascript:alert(1)'>x</a>") == "<a href='alert(1)'>x</a>"


def test_sanitize_keeps_ordinary_markup():
    assert sanitize_input("  <em>hi</em> there ") == "<em>hi</em> there"


@pytest.mark.parametrize(
    "text",
    [
        "<scr<script>x</script>ipt>alert(1)</script>",
        "java\nscript:alert(1)",
        "<div onclick=go() onmouseover='x'>t</div>",
        "",
        "plain text",
    ],
)
def test_sanitize_is_idempotent(text):
    once = sanitize_input(text)
    assert sanitize_input(once) == once


def test_detect_xss_attempt():
    assert XSSProtection.detect_xss_attempt("<script>x</script>")
    assert not XSSProtection.detect_xss_attempt("just words")
