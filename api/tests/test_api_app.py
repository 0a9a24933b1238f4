from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from api.services.pipeline_factory import get_pipeline
from core_router.errors import AdapterResult, ProviderError
from input_processing.request_pipeline import RequestPipeline


def _prepare(client: TestClient, content: str, **headers: str):
    return client.post(
        "/chat/prepare",
        json={"messages": [{"role": "user", "content": content}]},
        headers=headers,
    )


# -------------------------
# Health
# -------------------------


def test_health_ok(client: TestClient):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "classifier": "local"}
    assert r.headers.get("x-trace-id")


def test_health_reports_external_classifier(app, client: TestClient):
    class Adapter:
        def classify(self, task: str, payload: dict[str, Any]) -> AdapterResult:
            return AdapterResult.failure("offline")

        def ping(self) -> bool:
            return False

    external = RequestPipeline(adapter=Adapter())
    app.dependency_overrides[get_pipeline] = lambda: external
    assert client.get("/health").json()["classifier"] == "external"


# -------------------------
# POST /chat/prepare
# -------------------------


def test_prepare_admits_clean_request(client: TestClient, pipeline):
    limit = pipeline.config.rate_limit
    r = _prepare(client, "Write a python function that sorts a list")
    assert r.status_code == 200
    body = r.json()

    assert "Current task: Generate new code" in body["systemPrompt"]
    assert body["modelId"] == "gemini-1.5-flash-latest"
    assert body["request"]["type"] == "generate"
    assert body["request"]["language"] == "python"
    assert "existingCode" in body["request"]
    assert body["sentiment"] == {
        "label": "neutral",
        "confidence": 0.6,
        "emotions": None,
        "source": "fallback",
    }
    assert body["messages"][0]["role"] == "user"
    assert body["messages"][0]["id"]
    assert body["warnings"] == []
    assert body["generation"] == {"temperature": 0.7, "topP": 0.9, "maxTokens": 2048}

    assert r.headers["X-RateLimit-Limit"] == str(limit)
    assert r.headers["X-RateLimit-Remaining"] == str(limit - 1)
    assert int(r.headers["X-RateLimit-Reset"]) > 0


def test_prepare_accepts_settings_and_context(client: TestClient):
    r = client.post(
        "/chat/prepare",
        json={
            "messages": [{"id": "m1", "role": "user", "content": "optimize this"}],
            "settings": {
                "targetLanguage": "fr",
                "forceModel": "custom-model",
                "temperature": 0.1,
                "maxTokens": 512,
                "culturalBackground": "Nordic",
            },
            "context": {"currentFile": "main.go", "files": {"main.go": "package main"}, "language": "go"},
        },
    )
    assert r.status_code == 200
    body = r.json()
    assert body["modelId"] == "custom-model"
    assert body["request"]["language"] == "go"
    assert "- Language preference: fr" in body["systemPrompt"]
    assert "- Active file: main.go" in body["systemPrompt"]
    assert body["messages"][0]["id"] == "m1"
    assert body["generation"] == {"temperature": 0.1, "topP": 0.9, "maxTokens": 512}
    assert "- Cultural background: Nordic" in body["systemPrompt"]


def test_prepare_rejects_unknown_settings(client: TestClient):
    r = client.post(
        "/chat/prepare",
        json={"messages": [{"role": "user", "content": "hi"}], "settings": {"verbose": True}},
    )
    assert r.status_code == 422
    assert r.json()["code"] == "ERR_VALIDATION"


def test_prepare_sanitizes_and_warns(client: TestClient):
    r = _prepare(client, "<script>alert(1)</script>write a parser")
    assert r.status_code == 200
    body = r.json()
    assert body["messages"][0]["content"] == "write a parser"
    assert body["warnings"] == ["Message 1: Contains potentially suspicious content"]


def test_prepare_rate_limited(client: TestClient, pipeline):
    limit = pipeline.config.rate_limit
    for _ in range(limit):
        assert _prepare(client, "hello").status_code == 200

    r = _prepare(client, "hello")
    assert r.status_code == 429
    body = r.json()
    assert body["code"] == "ERR_RATE_LIMITED"
    assert body["error"] == "Too Many Requests"
    assert body["message"].startswith("Rate limit exceeded. Reset at ")
    assert body["endpoint"] == "POST /chat/prepare"
    assert int(r.headers["Retry-After"]) >= 0
    assert r.headers["X-RateLimit-Remaining"] == "0"
    assert r.headers["X-RateLimit-Limit"] == str(limit)


def test_rate_limit_is_per_forwarded_identity(client: TestClient, pipeline):
    for _ in range(pipeline.config.rate_limit):
        _prepare(client, "hello", **{"X-Forwarded-For": "10.0.0.1, 172.16.0.1"})
    assert _prepare(client, "hello", **{"X-Forwarded-For": "10.0.0.1"}).status_code == 429
    assert _prepare(client, "hello", **{"X-Forwarded-For": "10.0.0.2"}).status_code == 200


def test_prepare_validation_failure(client: TestClient):
    r = client.post("/chat/prepare", json={"messages": []})
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "ERR_VALIDATION"
    assert body["message"] == "Invalid input"
    assert body["details"] == ["At least one message is required"]


def test_prepare_reports_every_invalid_message(client: TestClient):
    r = client.post(
        "/chat/prepare",
        json={"messages": [{"role": "robot", "content": "x"}, {"role": "user"}]},
    )
    assert r.status_code == 400
    assert r.json()["details"] == [
        "Message 1: Role must be 'user', 'assistant', or 'system'",
        "Message 2: Content is required and must be a string",
    ]


def test_prepare_content_blocked(client: TestClient):
    r = _prepare(client, "I hate you")
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "ERR_CONTENT_BLOCKED"
    assert body["error"] == "Content Blocked"
    assert body["message"] == "Content violates safety guidelines"
    assert body["details"] == ["Contains flagged keywords"]


def test_malformed_body_is_422(client: TestClient):
    r = client.post("/chat/prepare", json={"messages": "nope"})
    assert r.status_code == 422
    body = r.json()
    assert body["code"] == "ERR_VALIDATION"
    assert body["error"] == "Validation Error"
    assert body["details"][0]["loc"] == ["body", "messages"]


def test_inbound_request_id_is_reused(client: TestClient):
    r = client.post("/chat/prepare", json={"messages": []}, headers={"X-Request-ID": "abc-123"})
    assert r.headers["x-trace-id"] == "abc-123"
    assert r.json()["requestId"] == "abc-123"


def test_malformed_request_id_is_replaced(client: TestClient):
    r = client.get("/health", headers={"X-Request-ID": "bad id!"})
    assert r.headers["x-trace-id"] != "bad id!"


# -------------------------
# POST /chat/response
# -------------------------


def test_chat_response_scans_code(client: TestClient):
    r = client.post("/chat/response", json={"content": "Done:\n```python\nx = eval(data)\n```"})
    assert r.status_code == 200
    body = r.json()
    assert body["blocks"] == [{"language": "python", "code": "x = eval(data)"}]
    assert body["files"] == {"file1.py": "x = eval(data)"}
    scan = body["scans"]["file1.py"]
    assert scan["isValid"] is False
    assert scan["riskLevel"] == "high"
    assert {v["type"] for v in scan["violations"]} == {"xss", "unsafeEval"}
    assert 0 <= body["compliance"]["score"] <= 100
    assert set(body["compliance"]["principles"]) >= {"defense_in_depth", "open_design"}


def test_chat_response_without_scan(client: TestClient):
    r = client.post("/chat/response", json={"content": "```\nhello\n```", "scan": False})
    assert r.status_code == 200
    assert r.json() == {
        "blocks": [{"language": "text", "code": "hello"}],
        "files": {"file1.txt": "hello"},
    }


# -------------------------
# Analysis endpoints
# -------------------------


def test_vibe(client: TestClient):
    r = client.post("/vibe", json={"text": "a sleek, clean tech dashboard"})
    assert r.status_code == 200
    body = r.json()
    assert body["analysis"]["primaryVibe"] == "modern"
    assert body["analysis"]["confidence"] == 0.75
    assert body["layoutStyle"] == "grid-based"
    assert body["prompt"]
    assert body["language"] == "en"
    assert body["direction"] == "ltr"
    assert body["primaryVibeLabel"] == "Primary Vibe"


def test_vibe_with_culture_and_language(client: TestClient):
    r = client.post("/vibe", json={"text": "simple zen", "culturalBackground": "Japanese", "language": "es"})
    assert r.status_code == 200
    body = r.json()
    assert body["analysis"]["culturalContext"] == (
        "Influenced by Japanese minimalism and wabi-sabi philosophy"
    )
    assert body["language"] == "es"
    assert body["primaryVibeLabel"] == "Vibe Principal"


def test_vibe_detects_language_from_script(client: TestClient):
    r = client.post("/vibe", json={"text": "تصميم بسيط"})
    assert r.status_code == 200
    body = r.json()
    assert body["language"] == "ar"
    assert body["direction"] == "rtl"
    assert body["primaryVibeLabel"] == "الطابع الأساسي"


@pytest.mark.parametrize("text", ["", "   "])
def test_vibe_rejects_blank_text(client: TestClient, text: str):
    assert client.post("/vibe", json={"text": text}).status_code == 422


def test_security_scan(client: TestClient):
    r = client.post("/security/scan", json={"code": 'const apiKey = "abc123";'})
    assert r.status_code == 200
    body = r.json()
    assert body["result"]["isValid"] is False
    assert body["result"]["riskLevel"] == "critical"
    assert body["result"]["violations"][0]["line"] == 1
    assert body["report"].startswith("# Security Validation Report")
    assert body["compliance"]["score"] == int(body["report"].rstrip().rsplit(" ", 1)[-1].rstrip("%"))


# -------------------------
# Error mapping
# -------------------------


def test_unknown_route_is_404(client: TestClient):
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.json()["code"] == "ERR_NOT_FOUND"


def test_wrong_method_is_405(client: TestClient):
    r = client.get("/chat/prepare")
    assert r.status_code == 405
    assert r.json()["code"] == "ERR_METHOD_NOT_ALLOWED"


@pytest.mark.parametrize(
    "message,status,code",
    [
        ("Invalid API key", 500, "ERR_PROVIDER_CONFIG"),
        ("Resource has been exhausted (e.g. check quota).", 429, "ERR_QUOTA_EXCEEDED"),
        ("connection reset", 500, "ERR_INTERNAL"),
    ],
)
def test_provider_errors_are_classified(app, message: str, status: int, code: str):
    def completion() -> dict[str, str]:
        raise ProviderError(message)

    app.add_api_route("/test/completion", completion, methods=["POST"])
    with TestClient(app) as c:
        r = c.post("/test/completion")
    assert r.status_code == status
    assert r.json()["code"] == code


def test_pipeline_failure_is_500(app, client: TestClient):
    class Exploding:
        def classify(self, task: str, payload: dict[str, Any]) -> AdapterResult:
            raise RuntimeError("adapter bug")

        def ping(self) -> bool:
            return False

    broken = RequestPipeline(adapter=Exploding())
    app.dependency_overrides[get_pipeline] = lambda: broken

    r = _prepare(client, "hello")
    assert r.status_code == 500
    body = r.json()
    assert body["code"] == "ERR_PIPELINE"
    assert body["message"] == "Request processing failed."


def test_unhandled_exception_is_500(app):
    def crash() -> None:
        raise KeyError("unexpected")

    app.add_api_route("/test/crash", crash)
    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.get("/test/crash")
    assert r.status_code == 500
    assert r.json()["code"] == "ERR_INTERNAL"
