"""
Integration tests for the HTTP endpoints.

Uses mocks for retrieval/generation so tests do not require Google credentials
or network access. Settings are injected through the get_settings dependency.
"""

import logging
from dataclasses import replace
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings, get_settings
from app.core.errors import ConfigurationError, GenerationError, RetrievalError
from app.main import app, create_app
from app.schemas.retrieval import RetrievalOutcome, SearchResultItem
from app.services.retrieval_service import parse_search_response


@pytest.fixture
def client(settings: Settings):
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


def _use_settings(s: Settings) -> None:
    app.dependency_overrides[get_settings] = lambda: s


# --- System ---

def test_root_returns_static_text(client: TestClient) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == "Backend is running!"


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"ok": True}


# --- Chat ---

def test_chat_empty_query_makes_no_outbound_calls(client: TestClient) -> None:
    """POST /chat with a blank query returns the prompt-for-input answer and no sources."""
    with patch("app.services.answer_service.retrieve_top_docs", new=AsyncMock()) as mock_retrieve:
        response = client.post("/chat", json={"query": "   "})
    assert response.status_code == 200
    data = response.json()
    assert data["answer"] == "Ask me something."
    assert data["sources"] == []
    assert "debug" not in data
    mock_retrieve.assert_not_called()


def test_chat_missing_query_field_is_treated_as_empty(client: TestClient) -> None:
    response = client.post("/chat", json={})
    assert response.status_code == 200
    assert response.json()["answer"] == "Ask me something."


def test_chat_greeting_makes_no_outbound_calls(client: TestClient) -> None:
    with patch("app.services.answer_service.retrieve_top_docs", new=AsyncMock()) as mock_retrieve, patch(
        "app.services.answer_service.generate_text", new=AsyncMock()
    ) as mock_generate:
        response = client.post("/chat", json={"query": "Hello!"})
    assert response.status_code == 200
    data = response.json()
    assert data["answer"].startswith("Hello!")
    assert data["sources"] == [] and data["links"] == []
    mock_retrieve.assert_not_called()
    mock_generate.assert_not_called()


def test_chat_contact_change_log(client: TestClient, settings: Settings, contact_change_log_payload: dict) -> None:
    """One hit without snippet or summary: answer names the document, link is public HTTPS."""
    outcome = parse_search_response(contact_change_log_payload, "projects/p/servingConfigs/default_search", settings)
    with patch("app.services.answer_service.retrieve_top_docs", new=AsyncMock(return_value=outcome)):
        response = client.post("/chat", json={"query": "Contact Change Log"})
    assert response.status_code == 200
    data = response.json()
    assert "Contact Change Log.docx" in data["answer"]
    expected = [{"title": "Contact Change Log.docx", "url": "https://storage.googleapis.com/bucket1/ccl.docx"}]
    assert data["links"] == expected
    assert data["sources"] == expected
    assert data["debug"]["serving_config_used"] == "projects/p/servingConfigs/default_search"
    assert data["debug"]["retrieved_count"] == 1


def test_chat_summary_is_returned_verbatim(client: TestClient) -> None:
    outcome = RetrievalOutcome(
        resource_path_used="p",
        items=[SearchResultItem(title="A", url="https://example.com/a", snippet="snippet")],
        summary_text="Summary from the search service.",
    )
    with patch("app.services.answer_service.retrieve_top_docs", new=AsyncMock(return_value=outcome)):
        response = client.post("/chat", json={"query": "what is a"})
    assert response.json()["answer"] == "Summary from the search service."


def test_chat_no_results(client: TestClient) -> None:
    outcome = RetrievalOutcome(resource_path_used="p", items=[])
    with patch("app.services.answer_service.retrieve_top_docs", new=AsyncMock(return_value=outcome)):
        response = client.post("/chat", json={"query": "unknown thing"})
    data = response.json()
    assert data["answer"] == "I couldn't find any documents matching your question."
    assert data["sources"] == []


def test_chat_uses_model_when_configured(settings: Settings) -> None:
    _use_settings(replace(settings, generation_provider="vertex", vertex_project_id="proj"))
    outcome = RetrievalOutcome(
        resource_path_used="p", items=[SearchResultItem(title="A", url="https://example.com/a", snippet="alpha")]
    )
    try:
        with patch("app.services.answer_service.retrieve_top_docs", new=AsyncMock(return_value=outcome)), patch(
            "app.services.answer_service.generate_text", new=AsyncMock(return_value="Alpha it is [1].")
        ):
            response = TestClient(app).post("/chat", json={"query": "which one"})
    finally:
        app.dependency_overrides.clear()
    data = response.json()
    assert data["answer"] == "Alpha it is [1]."
    assert data["debug"]["answer_source"] == "model"


def test_chat_retrieval_failure_returns_500_with_details(client: TestClient) -> None:
    error = RetrievalError("ServingConfig not found", code=404, details="NOT_FOUND")
    with patch("app.services.answer_service.retrieve_top_docs", new=AsyncMock(side_effect=error)):
        response = client.post("/chat", json={"query": "anything"})
    assert response.status_code == 500
    assert response.json() == {
        "answer": "Backend error",
        "code": 404,
        "details": "NOT_FOUND",
        "message": "ServingConfig not found",
    }


def test_chat_configuration_error_returns_500(client: TestClient) -> None:
    with patch(
        "app.services.answer_service.retrieve_top_docs",
        new=AsyncMock(side_effect=ConfigurationError("Missing GOOGLE_JSON_KEY")),
    ):
        response = client.post("/chat", json={"query": "anything"})
    assert response.status_code == 500
    assert response.json()["message"] == "Missing GOOGLE_JSON_KEY"
    assert response.json()["answer"] == "Backend error"


def test_chat_generation_failure_returns_500(settings: Settings) -> None:
    _use_settings(replace(settings, generation_provider="openai", openai_api_key="sk-test"))
    outcome = RetrievalOutcome(resource_path_used="p", items=[])
    try:
        with patch("app.services.answer_service.retrieve_top_docs", new=AsyncMock(return_value=outcome)), patch(
            "app.services.answer_service.generate_text",
            new=AsyncMock(side_effect=GenerationError("quota", code=429, details="RateLimitError")),
        ):
            response = TestClient(app).post("/chat", json={"query": "anything"})
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 500
    assert response.json()["code"] == 429


def test_chat_unexpected_error_returns_500(client: TestClient) -> None:
    with patch("app.services.answer_service.retrieve_top_docs", new=AsyncMock(side_effect=RuntimeError("boom"))):
        response = client.post("/chat", json={"query": "anything"})
    assert response.status_code == 500
    assert response.json()["message"] == "boom"


# --- Debug ---

def test_debug_retrieve(client: TestClient, settings: Settings, contact_change_log_payload: dict) -> None:
    outcome = parse_search_response(contact_change_log_payload, "projects/p/servingConfigs/default_search", settings)
    with patch("app.api.handlers.retrieve_top_docs", new=AsyncMock(return_value=outcome)) as mock_retrieve:
        response = client.get("/debug-retrieve", params={"q": "Contact Change Log"})
    assert response.status_code == 200
    data = response.json()
    assert data["serving_config_used"] == "projects/p/servingConfigs/default_search"
    assert data["count"] == 1
    assert data["results"][0]["url"] == "https://storage.googleapis.com/bucket1/ccl.docx"
    assert mock_retrieve.await_args.args[0] == "Contact Change Log"


def test_debug_retrieve_defaults_query(client: TestClient) -> None:
    outcome = RetrievalOutcome(resource_path_used="p", items=[])
    with patch("app.api.handlers.retrieve_top_docs", new=AsyncMock(return_value=outcome)) as mock_retrieve:
        client.get("/debug-retrieve")
    assert mock_retrieve.await_args.args[0] == "contact"


def test_debug_retrieve_failure(client: TestClient) -> None:
    error = RetrievalError("denied", code=403, details="PERMISSION_DENIED")
    with patch("app.api.handlers.retrieve_top_docs", new=AsyncMock(side_effect=error)):
        response = client.get("/debug-retrieve", params={"q": "x"})
    assert response.status_code == 500
    assert response.json() == {"code": 403, "details": "PERMISSION_DENIED", "message": "denied"}


def test_configs_lists_candidates_without_secrets(client: TestClient) -> None:
    response = client.get("/configs")
    assert response.status_code == 200
    data = response.json()
    assert data["addressing_mode"] == "data_store"
    assert [c.rsplit("/", 1)[-1] for c in data["candidates"]] == ["default_search", "default_serving_config"]
    assert "google_json_key" not in data


def test_configs_reports_configuration_error(settings: Settings) -> None:
    _use_settings(replace(settings, serving=replace(settings.serving, project="")))
    try:
        response = TestClient(app).get("/configs")
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 500
    assert "DE_PROJECT_NUMBER" in response.json()["message"]


def test_debug_endpoints_can_be_disabled(settings: Settings) -> None:
    _use_settings(replace(settings, debug_endpoints_enabled=False))
    try:
        c = TestClient(app)
        assert c.get("/configs").status_code == 404
        assert c.get("/debug-retrieve").status_code == 404
    finally:
        app.dependency_overrides.clear()


# --- Logging and startup ---

def test_chat_failure_is_logged_with_traceback(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    error = RetrievalError("ServingConfig not found", code=404, details="NOT_FOUND")
    with caplog.at_level(logging.ERROR, logger="app.api.handlers"):
        with patch("app.services.answer_service.retrieve_top_docs", new=AsyncMock(side_effect=error)):
            response = client.post("/chat", json={"query": "anything"})
    assert response.status_code == 500
    records = [r for r in caplog.records if r.name == "app.api.handlers"]
    assert records and records[-1].exc_info is not None
    assert records[-1].exc_info[1] is error


def test_debug_retrieve_failure_is_logged_with_traceback(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    error = RetrievalError("denied", code=403, details="PERMISSION_DENIED")
    with caplog.at_level(logging.ERROR, logger="app.api.handlers"):
        with patch("app.api.handlers.retrieve_top_docs", new=AsyncMock(side_effect=error)):
            client.get("/debug-retrieve", params={"q": "x"})
    records = [r for r in caplog.records if r.name == "app.api.handlers"]
    assert records and records[-1].exc_info is not None


def test_invalid_env_does_not_break_startup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DE_PAGE_SIZE", "five")
    get_settings.cache_clear()
    try:
        broken_app = create_app()
        response = TestClient(broken_app).post("/chat", json={"query": "anything"})
        assert TestClient(broken_app).get("/").status_code == 200
    finally:
        get_settings.cache_clear()
    assert response.status_code == 500
    data = response.json()
    assert data["answer"] == "Backend error"
    assert "DE_PAGE_SIZE" in data["message"]
