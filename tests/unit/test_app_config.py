"""Tests for settings, route loading and the HTTP transcriber."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from config import AppConfig, LlmRoute, Settings, TRANSCRIBE_KEY, load_routes, resolve_route
from interview_session import HttpTranscriber, transcriber_for
from llm_gateway import LlmGatewayError

EXAMPLE = Path(__file__).resolve().parents[2] / "app_config.example.json"

SPEECH = LlmRoute(
    name="speech",
    base_url="http://stt.local/v1/",
    endpoint="/audio/transcriptions",
    model="whisper-1",
    api_key_env="STT_KEY",
)


class _Response:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


class _Client:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        return self.response


def test_settings_defaults():
    settings = Settings(_env_file=None)
    assert settings.DB_PATH.endswith(".db")
    assert settings.QUESTION_COUNT == 10
    assert settings.MAX_RESUME_BYTES == 10 * 1024 * 1024
    assert settings.TRANSCRIPT_PLACEHOLDER == "Transcript not available"


def test_example_config_routes_every_task():
    cfg = load_routes(EXAMPLE)
    assert resolve_route(cfg, "questions.generate").temperature == 0.7
    assert resolve_route(cfg, TRANSCRIBE_KEY).endpoint == "/audio/transcriptions"


def test_missing_or_invalid_config_means_no_models(tmp_path):
    assert load_routes(tmp_path / "absent.json") == AppConfig()
    broken = tmp_path / "broken.json"
    broken.write_text(json.dumps({"llm_routes": {"x": {"name": "x"}}}), encoding="utf-8")
    assert load_routes(broken) == AppConfig()


def test_registry_pointing_at_unknown_route():
    cfg = AppConfig(registry={"reports.narrative": "ghost"})
    assert resolve_route(cfg, "reports.narrative") is None
    assert resolve_route(cfg, "questions.generate") is None


def test_transcriber_posts_multipart(monkeypatch):
    monkeypatch.setenv("STT_KEY", "sk-test")
    client = _Client(_Response(payload={"text": "  I used Python.  "}))
    assert HttpTranscriber(SPEECH, client=client).transcribe(b"audio", "audio/mpeg") == "I used Python."
    url, kwargs = client.calls[0]
    assert url == "http://stt.local/v1/audio/transcriptions"
    assert kwargs["files"]["file"] == ("answer.mp3", b"audio", "audio/mpeg")
    assert kwargs["data"]["model"] == "whisper-1"
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"


@pytest.mark.parametrize("response", [_Response(status_code=503), _Response(payload={"error": "bad"})])
def test_transcriber_failures_raise(response):
    with pytest.raises(LlmGatewayError):
        HttpTranscriber(SPEECH, client=_Client(response)).transcribe(b"audio", "audio/webm")


def test_transcriber_for_requires_route():
    assert transcriber_for(AppConfig()) is None
    cfg = AppConfig(llm_routes={"speech": SPEECH}, registry={TRANSCRIBE_KEY: "speech"})
    assert isinstance(transcriber_for(cfg), HttpTranscriber)
