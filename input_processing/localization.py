"""Localization lookup used by the vibe analysis endpoint.

A small string table keyed by message id and language code, plus script
based language detection and text direction.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class Language:
    code: str
    name: str
    native_name: str
    rtl: bool = False


SUPPORTED_LANGUAGES: tuple[Language, ...] = (
    Language("en", "English", "English"),
    Language("es", "Spanish", "Español"),
    Language("fr", "French", "Français"),
    Language("de", "German", "Deutsch"),
    Language("it", "Italian", "Italiano"),
    Language("pt", "Portuguese", "Português"),
    Language("ru", "Russian", "Русский"),
    Language("ja", "Japanese", "日本語"),
    Language("ko", "Korean", "한국어"),
    Language("zh", "Chinese", "中文"),
    Language("ar", "Arabic", "العربية", rtl=True),
    Language("he", "Hebrew", "עברית", rtl=True),
)

RTL_LANGUAGES = frozenset({"ar", "he", "fa", "ur"})

VIBE_TRANSLATIONS: dict[str, dict[str, str]] = {
    "vibeQuestion": {
        "en": "What vibe do you want for your project?",
        "es": "¿Qué vibe quieres para tu proyecto?",
        "fr": "Quelle ambiance souhaitez-vous pour votre code?",
        "de": "Welche Stimmung soll Ihr Code vermitteln?",
        "it": "Che atmosfera vuoi per il tuo progetto?",
        "pt": "Que vibe você quer para seu projeto?",
        "ru": "Какую атмосферу вы хотите для вашего проекта?",
        "ja": "プロジェクトにどんな雰囲気を求めますか？",
        "ko": "프로젝트에 어떤 분위기를 원하시나요?",
        "zh": "您希望项目具有什么样的氛围？",
        "ar": "ما هو الطابع الذي تريده لمشروعك؟",
        "he": "איזה ווייב אתה רוצה לפרויקט שלך?",
    },
    "visionAnalysis": {
        "en": "Vision Analysis",
        "es": "Análisis de Visión",
        "fr": "Analyse de Vision",
        "de": "Vision Analyse",
        "it": "Analisi della Visione",
        "pt": "Análise de Visão",
        "ru": "Анализ Видения",
        "ja": "ビジョン分析",
        "ko": "비전 분석",
        "zh": "愿景分析",
        "ar": "تحليل الرؤية",
        "he": "ניתוח חזון",
    },
    "primaryVibe": {
        "en": "Primary Vibe",
        "es": "Vibe Principal",
        "fr": "Ambiance Principale",
        "de": "Hauptstimmung",
        "it": "Atmosfera Principale",
        "pt": "Vibe Principal",
        "ru": "Основная Атмосфера",
        "ja": "主要な雰囲気",
        "ko": "주요 분위기",
        "zh": "主要氛围",
        "ar": "الطابع الأساسي",
        "he": "ווייב עיקרי",
    },
}

# Checked in order; kana/kanji are tested before the wider CJK block
_SCRIPT_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("ar", re.compile(r"[\u0600-\u06FF]")),
    ("he", re.compile(r"[\u0590-\u05FF]")),
    ("ru", re.compile(r"[\u0400-\u04FF]")),
    ("ja", re.compile(r"[\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAF]")),
    ("ko", re.compile(r"[\uAC00-\uD7AF]")),
    ("zh", re.compile(r"[\u4E00-\u9FFF]")),
)


def translate(key: str, language: str = "en") -> str:
    """Look up ``key`` in ``language``, then English, then return the key."""
    entry = VIBE_TRANSLATIONS.get(key, {})
    return entry.get(language) or entry.get("en") or key


def detect_language(text: str) -> str:
    """Guess a language code from the script of ``text``; defaults to ``en``."""
    for code, pattern in _SCRIPT_PATTERNS:
        if pattern.search(text or ""):
            return code
    return "en"


def get_language_direction(code: str) -> str:
    return "rtl" if code in RTL_LANGUAGES else "ltr"


