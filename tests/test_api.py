"""
Tests for the HTTP API.

Verifies:
- POST /persona/generate success and wire format
- Request validation (422)
- Error status mapping for failed pipeline runs
- GET /health
"""

import pytest
from fastapi.testclient import TestClient

from conftest import FakeSpeechProvider, FakeTextProvider, InstantSleep, RecordingObserver, analysis_json, persona_json, words
from personabrief.api import main
from personabrief.api.main import AppState, app, status_for_error
from personabrief.errors import (
    OperationFailedError,
    PipelineError,
    ResponseParseError,
    UpstreamAuthError,
    UpstreamRateLimitError,
    UpstreamTimeoutError,
)
from personabrief.services import PersonaPipeline

ARTICLE = " ".join(["Clear interfaces earn trust through restraint and honest numbers."] * 15)
BRIEF = "Redesign onboarding for a budgeting app."
SCRIPT = words(120)


def install_pipeline(responses, speech=None) -> FakeTextProvider:
    text = FakeTextProvider(responses)
    pipeline = PersonaPipeline(
        text,
        speech or FakeSpeechProvider(),
        observer=RecordingObserver(),
        sleep=InstantSleep(),
    )
    main.state = AppState(pipeline=pipeline)
    return text


@pytest.fixture
def client():
    """FastAPI test client; lifespan is not run so state stays injected."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_state():
    yield
    main.state = None


def post(client, article=ARTICLE, brief=BRIEF):
    return client.post("/persona/generate", json={"articleText": article, "designBrief": brief})


def test_generate_success(client):
    install_pipeline([analysis_json(), persona_json(), SCRIPT])

    response = post(client)

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"persona", "audioUrl", "audioScript", "processingTime"}
    assert body["persona"]["personaName"] == "The Pragmatic Fintech Lead"
    assert body["persona"]["designGuidance"]["avoid"] == ["Decorative illustration", "Jargon"]
    assert body["audioUrl"].startswith("data:audio/mpeg;base64,")
    assert body["audioScript"] == SCRIPT
    assert body["processingTime"] >= 0


def test_generate_without_audio_is_still_200(client):
    install_pipeline(
        [analysis_json(), persona_json(), SCRIPT],
        speech=FakeSpeechProvider(error=UpstreamAuthError("ElevenLabs")),
    )

    response = post(client)

    assert response.status_code == 200
    assert response.json()["audioUrl"] == ""


@pytest.mark.parametrize(
    "payload",
    [
        {"articleText": "too short", "designBrief": BRIEF},
        {"articleText": "x" * 600, "designBrief": BRIEF},
        {"articleText": ARTICLE, "designBrief": "short"},
        {"articleText": ARTICLE},
        {"designBrief": BRIEF},
        {"articleText": ARTICLE, "designBrief": BRIEF, "extra": True},
    ],
)
def test_generate_rejects_invalid_input(client, payload):
    text = install_pipeline([])

    response = client.post("/persona/generate", json=payload)

    assert response.status_code == 422
    assert text.prompts == []


@pytest.mark.parametrize(
    "responses, status",
    [
        ([UpstreamAuthError("OpenAI")], 502),
        ([UpstreamRateLimitError("OpenAI")], 429),
        ([UpstreamTimeoutError("OpenAI", 30)] * 3, 503),
        ([analysis_json(), "not json"], 502),
    ],
)
def test_generate_error_status(client, responses, status):
    install_pipeline(responses)

    response = post(client)

    assert response.status_code == status
    assert response.json()["detail"]


def test_generate_without_state(client):
    response = post(client)

    assert response.status_code == 500


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def wrap(cause):
    return PipelineError("analyzing", 10.0, OperationFailedError("Article text analysis", 1, cause))


@pytest.mark.parametrize(
    "cause, status",
    [
        (UpstreamTimeoutError("OpenAI"), 503),
        (UpstreamAuthError("OpenAI"), 502),
        (UpstreamRateLimitError("OpenAI"), 429),
        (RuntimeError("quota exceeded for project"), 429),
        (ResponseParseError("Failed to parse model response: empty response"), 502),
        (RuntimeError("boom"), 500),
    ],
)
def test_status_for_error(cause, status):
    assert status_for_error(wrap(cause)) == status


def test_quota_failure_without_retry_wrapper_is_429():
    error = PipelineError("analyzing", 1.0, Exception("quota exceeded for project"))

    assert status_for_error(error) == 429
