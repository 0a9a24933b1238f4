from __future__ import annotations

import pytest

from input_processing.localization import (
    SUPPORTED_LANGUAGES,
    detect_language,
    get_language_direction,
    translate,
)


def test_translate_lookup_with_fallbacks():
    assert translate("primaryVibe", "fr") == "Ambiance Principale"
    # Unsupported language falls back to English
    assert translate("primaryVibe", "sv") == "Primary Vibe"
    # Unknown key falls back to the key itself
    assert translate("missingKey", "fr") == "missingKey"


@pytest.mark.parametrize(
    "text,code",
    [
        ("مرحبا بالعالم", "ar"),
        ("שלום עולם", "he"),
        ("Привет мир", "ru"),
        ("こんにちは", "ja"),
        ("안녕하세요", "ko"),
        ("hello world", "en"),
        ("", "en"),
    ],
)
def test_detect_language_by_script(text, code):
    assert detect_language(text) == code


@pytest.mark.parametrize("code,direction", [("ar", "rtl"), ("he", "rtl"), ("fa", "rtl"), ("ur", "rtl"), ("en", "ltr")])
def test_language_direction(code, direction):
    assert get_language_direction(code) == direction


def test_supported_languages_table():
    codes = [lang.code for lang in SUPPORTED_LANGUAGES]
    assert len(codes) == 12
    assert "ko" in codes
    assert "fa" not in codes
    assert [lang.code for lang in SUPPORTED_LANGUAGES if lang.rtl] == ["ar", "he"]
