from __future__ import annotations  # Speech-to-text for captured answer media

import logging
import os
from typing import Dict, Optional, Protocol

import httpx

from config import AppConfig, LlmRoute, TRANSCRIBE_KEY, resolve_route
from llm_gateway import HttpClient, LlmGatewayError

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "audio/webm": "webm",
    "audio/mp4": "m4a",
    "audio/wav": "wav",
    "audio/mpeg": "mp3",
    "video/webm": "webm",
    "video/mp4": "mp4",
}


class Transcriber(Protocol):  # Anything that turns recorded speech into text
    def transcribe(self, audio: bytes, media_type: str) -> str: ...


class HttpTranscriber:  # OpenAI-compatible /audio/transcriptions client
    def __init__(self, route: LlmRoute, client: Optional[HttpClient] = None) -> None:
        self.route = route
        self._client = client

    def transcribe(self, audio: bytes, media_type: str) -> str:  # Single attempt; failures raise LlmGatewayError
        if not audio:
            return ""
        url = f"{self.route.base_url.rstrip('/')}{self.route.endpoint}"
        name = f"answer.{_EXTENSIONS.get(media_type, 'bin')}"
        files = {"file": (name, audio, media_type)}
        data = {"model": self.route.model, "response_format": "json"}
        headers = _headers(self.route)
        try:
            if self._client is not None:
                response = self._client.post(
                    url, files=files, data=data, headers=headers, timeout=self.route.timeout_s
                )
            else:
                with httpx.Client(timeout=self.route.timeout_s) as http_client:
                    response = http_client.post(url, files=files, data=data, headers=headers)
        except httpx.TimeoutException as exc:
            raise LlmGatewayError(f"Transcription timed out after {self.route.timeout_s}s") from exc
        except Exception as exc:  # noqa: BLE001
            raise LlmGatewayError(f"Transcription request failed: {exc}") from exc
        if response.status_code >= 400:
            raise LlmGatewayError(f"Transcription failed with status {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise LlmGatewayError("Transcription response was not JSON") from exc
        text = payload.get("text") if isinstance(payload, dict) else None
        if not isinstance(text, str):
            raise LlmGatewayError("Transcription response missing text")
        return text.strip()


def transcriber_for(cfg: AppConfig, client: Optional[HttpClient] = None) -> Optional[HttpTranscriber]:  # None when no route is registered
    route = resolve_route(cfg, TRANSCRIBE_KEY)
    if route is None:
        return None
    return HttpTranscriber(route, client=client)


def _headers(cfg: LlmRoute) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    if cfg.api_key_env:
        api_key = os.getenv(cfg.api_key_env)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    return headers


__all__ = ["HttpTranscriber", "Transcriber", "transcriber_for"]
