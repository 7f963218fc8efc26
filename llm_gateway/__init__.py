from __future__ import annotations  # Re-export llm_gateway public API

from .json_extract import UNPARSEABLE, extract_json, strip_code_fences
from .llm_gateway import (
    HttpClient,
    HttpResponse,
    LlmGateway,
    LlmGatewayError,
    ModelClient,
    call,
    call_json,
    gateway_for,
)

__all__ = [
    "HttpClient",
    "HttpResponse",
    "LlmGateway",
    "LlmGatewayError",
    "ModelClient",
    "UNPARSEABLE",
    "call",
    "call_json",
    "extract_json",
    "gateway_for",
    "strip_code_fences",
]
