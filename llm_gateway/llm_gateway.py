from __future__ import annotations  # LLM request gateway module

import logging
import os
import threading
from typing import Any, Callable, Dict, Optional, Protocol, Tuple, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from config import AppConfig, LlmRoute, resolve_route

from .json_extract import UNPARSEABLE, extract_json


logger = logging.getLogger(__name__)  # Module logger setup


_MODEL_LOCKS: Dict[str, threading.Lock] = {}
_MODEL_LOCKS_GUARD = threading.Lock()


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, **kwargs: Any) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class ModelClient(Protocol):  # Anything that turns a prompt into reply text
    def complete(self, prompt: str) -> str: ...


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


T = TypeVar("T", bound=BaseModel)


def _lock_for(cfg: LlmRoute) -> threading.Lock:
    key = cfg.name or f"{cfg.base_url}{cfg.endpoint}"
    with _MODEL_LOCKS_GUARD:
        lock = _MODEL_LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _MODEL_LOCKS[key] = lock
    return lock


class LlmGateway:  # Single-attempt chat completion against one configured route
    def __init__(self, route: LlmRoute, client: Optional[HttpClient] = None) -> None:
        self.route = route
        self._client = client

    def complete(self, prompt: str) -> str:  # Send prompt and return the reply text
        if self.route.sequential:
            with _lock_for(self.route):
                return self._execute(prompt)
        return self._execute(prompt)

    def _execute(self, prompt: str) -> str:
        cfg = self.route
        payload: Dict[str, Any] = {
            "model": cfg.model,
            "messages": [{"role": "user", "content": prompt}],
        }
        if cfg.temperature is not None:
            payload["temperature"] = cfg.temperature
        if cfg.max_tokens is not None:
            payload["max_tokens"] = cfg.max_tokens
        if cfg.response_format:
            payload["response_format"] = {"type": cfg.response_format}
        logger.info(
            "LLM request send route=%s model=%s preview=%s",
            cfg.name,
            cfg.model,
            _preview(prompt),
        )
        try:
            response, close_cb = _post(
                f"{cfg.base_url}{cfg.endpoint}",
                payload,
                _auth_headers(cfg),
                cfg.timeout_s,
                self._client,
            )
        except httpx.TimeoutException as exc:
            logger.error("LLM request timed out after %.1fs", cfg.timeout_s)
            raise LlmGatewayError("LLM request timed out") from exc
        except Exception as exc:  # noqa: BLE001
            logger.error("LLM transport failure: %s", exc)
            raise LlmGatewayError("LLM transport failed") from exc
        try:
            if response.status_code >= 400:
                logger.error("LLM error status: %s", response.status_code)
                raise LlmGatewayError(f"LLM returned status {response.status_code}")
            try:
                data = response.json()
            except Exception as exc:  # noqa: BLE001
                logger.error("Invalid JSON payload from LLM: %s", exc)
                raise LlmGatewayError("LLM payload was not JSON") from exc
            content = _extract_content(data)
        finally:
            _close_safely(close_cb)
        logger.info("LLM request done route=%s model=%s", cfg.name, cfg.model)
        return content


def call_json(task: str, *, model: Optional[ModelClient]) -> Any:  # Prompt the model and recover its JSON reply
    if model is None:
        raise LlmGatewayError("No model configured for this task")
    try:
        reply = model.complete(task)
    except LlmGatewayError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise LlmGatewayError(f"Model client failed: {exc}") from exc
    value = extract_json(reply)
    if value is UNPARSEABLE:
        logger.warning("LLM reply had no usable JSON: %s", _preview(reply or ""))
        raise LlmGatewayError("LLM reply was not parseable JSON")
    return value


def call(task: str, schema: Type[T], *, model: Optional[ModelClient]) -> T:  # Prompt the model and validate its reply
    value = call_json(task, model=model)
    try:
        return schema.model_validate(value)
    except ValidationError as exc:
        logger.warning("LLM output validation failed: %s", exc)
        raise LlmGatewayError("LLM output validation failed") from exc


def gateway_for(key: str, cfg: AppConfig, client: Optional[HttpClient] = None) -> Optional[LlmGateway]:  # Build gateway for a registry key
    route = resolve_route(cfg, key)
    if route is None:
        return None
    return LlmGateway(route, client=client)


def _auth_headers(cfg: LlmRoute) -> Dict[str, str]:  # Compose request headers for a route
    headers = {"Content-Type": "application/json"}
    if cfg.api_key_env:
        api_key = os.getenv(cfg.api_key_env)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)
    return headers


def _post(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float, client: Optional[HttpClient]) -> Tuple[HttpResponse, Optional[Callable[[], None]]]:  # Dispatch HTTP request
    if client is not None:
        return client.post(url, json=payload, headers=headers, timeout=timeout), None
    http_client = httpx.Client(timeout=timeout)
    try:
        response = http_client.post(url, json=payload, headers=headers)
    except Exception:
        http_client.close()
        raise
    return response, http_client.close


def _close_safely(close_cb: Optional[Callable[[], None]]) -> None:  # Close HTTP client callback when provided
    if close_cb is not None:
        close_cb()


def _preview(text: str) -> str:  # Build preview string for logging
    for line in text.strip().splitlines():
        if line.strip():
            line = line.strip()
            return line if len(line) <= 120 else line[:117] + "..."
    return ""


def _extract_content(data: Any) -> str:  # Extract message content from LLM response
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmGatewayError("LLM response missing content")
