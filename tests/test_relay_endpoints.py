"""Integration tests for the relay HTTP endpoints."""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock
import sys
import os

# Add source directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'novelist'))


@pytest.fixture
def llm_client():
    """Provider client stub returning 25 words."""
    from services.llm_client import LLMResponse

    mock_llm = Mock()
    mock_llm.generate.return_value = LLMResponse(
        text=" ".join(f"w{i}" for i in range(1, 26)),
        tokens_input=200,
        tokens_output=50,
        latency_ms=300,
        model_used="test-model"
    )
    return mock_llm


@pytest.fixture
def client(llm_client):
    """Create a test client with a relay wired to the stub provider."""
    # Import after path is set
    import main
    from services.completion_relay import CompletionRelay

    # Startup does not run without the lifespan context; wire the relay by hand
    main.completion_relay = CompletionRelay(llm_client=llm_client, access_code="letmein")
    yield TestClient(app=main.app)
    main.completion_relay = None


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_verify_access_code_success(client):
    response = client.post("/api/verify-access-code", json={"accessCode": "letmein"})

    assert response.status_code == 200
    assert response.json() == {"success": True}


@pytest.mark.parametrize("body", [
    {"accessCode": "nope"},
    {"accessCode": ""},
    {"accessCode": None},
    {},
])
def test_verify_access_code_failure(client, body):
    response = client.post("/api/verify-access-code", json=body)

    assert response.status_code == 200
    assert response.json() == {"success": False}


@pytest.mark.parametrize("code", [1234, 12.5, True, ["1234"], {"code": "1234"}])
def test_verify_access_code_non_string_fails(code):
    """Non-string codes are a failed verification, not a validation error."""
    import main
    from services.completion_relay import CompletionRelay

    main.completion_relay = CompletionRelay(llm_client=None, access_code="1234")
    try:
        response = TestClient(app=main.app).post("/api/verify-access-code", json={"accessCode": code})
    finally:
        main.completion_relay = None

    assert response.status_code == 200
    assert response.json() == {"success": False}


def test_generate_trims_to_requested_word_count(client, llm_client):
    """wordCount=10 and a 25-word reply returns the first 10 words."""
    response = client.post("/api/generate", json={
        "protagonist": "Sir Cedric",
        "outline": "The Grail quest",
        "author": "Herman Hesse",
        "storyContext": "The knight looked toward the",
        "wordCount": 10
    })

    assert response.status_code == 200
    assert response.json() == {"generatedText": " ".join(f"w{i}" for i in range(1, 11))}
    assert llm_client.generate.call_args.kwargs["max_tokens"] == 20


def test_generate_defaults_to_fifteen_words(client, llm_client):
    response = client.post("/api/generate", json={
        "protagonist": "Sir Cedric",
        "outline": "The Grail quest",
        "author": "Herman Hesse",
        "storyContext": "He slept."
    })

    assert response.status_code == 200
    assert len(response.json()["generatedText"].split()) == 15
    assert llm_client.generate.call_args.kwargs["max_tokens"] == 30


def test_generate_provider_failure_returns_500(client, llm_client):
    from services.llm_client import LLMClientError, LLMError

    llm_client.generate.side_effect = LLMClientError(
        LLMError(code="API_ERROR", message="Groq API error: down", details={})
    )

    response = client.post("/api/generate", json={
        "protagonist": "p", "outline": "o", "author": "a", "storyContext": "ctx"
    })

    assert response.status_code == 500
    assert response.json() == {"error": "Error generating completion"}


def test_generate_unexpected_failure_returns_500(client, llm_client):
    llm_client.generate.side_effect = RuntimeError("socket closed")

    response = client.post("/api/generate", json={
        "protagonist": "p", "outline": "o", "author": "a", "storyContext": "ctx"
    })

    assert response.status_code == 500
    assert response.json() == {"error": "Error generating completion"}


def test_generate_without_provider_returns_500():
    import main
    from services.completion_relay import CompletionRelay

    main.completion_relay = CompletionRelay(llm_client=None, access_code="letmein")
    try:
        response = TestClient(app=main.app).post("/api/generate", json={"storyContext": "ctx"})
    finally:
        main.completion_relay = None

    assert response.status_code == 500
    assert response.json() == {"error": "Error generating completion"}


def test_generate_rejects_negative_word_count(client):
    response = client.post("/api/generate", json={"storyContext": "ctx", "wordCount": -3})

    # Pydantic validation returns 422 for validation errors
    assert response.status_code == 422


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
