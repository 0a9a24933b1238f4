from __future__ import annotations

import logging

import pytest

from core_router.errors import AdapterResult
from input_processing.stages.moderation import ContentModerator, ResultSource
from input_processing.stages.sentiment import SentimentAnalyzer, SentimentLabel
from input_processing.stages.translation import Translator

# -----------------------
# Moderation
# -----------------------


def test_fallback_flags_harm_keywords():
    result = ContentModerator().moderate("I will make a THREAT against you")
    assert result.safe is False
    assert result.reasons == ("Contains flagged keywords",)
    assert result.categories == {
        "hate": 0.1,
        "harassment": 0.1,
        "violence": 0.1,
        "sexual": 0.1,
        "dangerous": 0.8,
    }
    assert result.source is ResultSource.FALLBACK


def test_fallback_passes_clean_text():
    result = ContentModerator().moderate("Please write a sorting function")
    assert result.safe is True
    assert result.reasons == ()
    assert set(result.categories.values()) == {0.1}


def test_fallback_matches_inside_words():
    # "abuse" inside "disabused" still counts
    assert ContentModerator().moderate("he was disabused of the notion").safe is False


def test_external_verdict_is_used(fake_adapter):
    fake_adapter.responses["moderate"] = AdapterResult.success(
        {"safe": False, "reasons": ["spam"], "categories": {"hate": 1.7, "violence": -2}}
    )
    result = ContentModerator(fake_adapter).moderate("buy now")
    assert result.safe is False
    assert result.reasons == ("spam",)
    assert result.categories == {"hate": 1.0, "violence": 0.0}
    assert result.source is ResultSource.EXTERNAL
    assert fake_adapter.calls == [("moderate", {"text": "buy now"})]


def test_adapter_failure_falls_back_with_warning(fake_adapter, caplog):
    fake_adapter.responses["moderate"] = AdapterResult.failure("http_classifier: timeout")
    with caplog.at_level(logging.WARNING):
        result = ContentModerator(fake_adapter).moderate("a calm message")
    assert result.safe is True
    assert result.source is ResultSource.FALLBACK
    assert any("Moderation service unavailable" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize(
    "data",
    [
        {"safe": "yes"},
        {"safe": True, "reasons": "nope"},
        {"safe": True, "categories": {"hate": "high"}},
    ],
)
def test_malformed_external_response_falls_back(fake_adapter, data):
    fake_adapter.responses["moderate"] = AdapterResult.success(data)
    result = ContentModerator(fake_adapter).moderate("I hate mondays")
    assert result.source is ResultSource.FALLBACK
    assert result.safe is False


def test_moderation_to_dict():
    data = ContentModerator().moderate("hello").to_dict()
    assert data["safe"] is True
    assert data["source"] == "fallback"
    assert data["reasons"] == []


# -----------------------
# Sentiment
# -----------------------


@pytest.mark.parametrize(
    "text,label,confidence",
    [
        ("I love this, it is great", SentimentLabel.POSITIVE, 0.7),
        ("this is terrible and bad", SentimentLabel.NEGATIVE, 0.7),
        ("good but bad", SentimentLabel.NEUTRAL, 0.6),
        ("", SentimentLabel.NEUTRAL, 0.6),
    ],
)
def test_sentiment_fallback(text, label, confidence):
    result = SentimentAnalyzer().analyze(text)
    assert result.label is label
    assert result.confidence == confidence
    assert result.source is ResultSource.FALLBACK


def test_sentiment_fallback_counts_whole_words_only():
    # Punctuation keeps "great!" from matching "great"
    assert SentimentAnalyzer().analyze("great!").label is SentimentLabel.NEUTRAL


def test_sentiment_external_with_emotions(fake_adapter):
    fake_adapter.responses["sentiment"] = AdapterResult.success(
        {"label": "negative", "confidence": 0.91, "emotions": {"anger": 0.8, "boredom": 0.5, "fear": True}}
    )
    result = SentimentAnalyzer(fake_adapter).analyze("ugh")
    assert result.label is SentimentLabel.NEGATIVE
    assert result.confidence == 0.91
    assert result.emotions == {"anger": 0.8}
    assert result.source is ResultSource.EXTERNAL
    assert result.to_dict()["emotions"] == {"anger": 0.8}


@pytest.mark.parametrize(
    "data",
    [
        {"label": "ecstatic", "confidence": 0.5},
        {"label": "positive"},
        {"label": "positive", "confidence": 1.5},
    ],
)
def test_sentiment_malformed_external_falls_back(fake_adapter, data):
    fake_adapter.responses["sentiment"] = AdapterResult.success(data)
    result = SentimentAnalyzer(fake_adapter).analyze("I love it")
    assert result.source is ResultSource.FALLBACK
    assert result.label is SentimentLabel.POSITIVE


# -----------------------
# Translation
# -----------------------


def test_translation_without_adapter_keeps_text():
    result = Translator().translate("hello", "es")
    assert result.text == "hello"
    assert result.source is ResultSource.FALLBACK


def test_translation_to_english_skips_the_service(fake_adapter):
    result = Translator(fake_adapter).translate("hola", "en")
    assert result.text == "hola"
    assert fake_adapter.calls == []


def test_translation_uses_service(fake_adapter):
    fake_adapter.responses["translate"] = AdapterResult.success({"translatedText": "hola"})
    result = Translator(fake_adapter).translate("hello", "es")
    assert result.text == "hola"
    assert result.source is ResultSource.EXTERNAL
    assert fake_adapter.calls == [
        ("translate", {"text": "hello", "targetLanguage": "es", "sourceLanguage": "auto"})
    ]


def test_translation_failure_keeps_original(fake_adapter):
    fake_adapter.responses["translate"] = AdapterResult.success({"translation": "hola"})
    result = Translator(fake_adapter).translate("hello", "es")
    assert result.text == "hello"
    assert result.source is ResultSource.FALLBACK
