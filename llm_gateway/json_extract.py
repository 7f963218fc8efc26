"""Best-effort JSON recovery from free-form model replies."""
from __future__ import annotations

import json
import re
from typing import Any, Optional

_FENCE_RE = re.compile(r"```[A-Za-z0-9_+-]*[ \t]*\r?\n?(.*?)```", re.DOTALL)
_CLOSERS = {"{": "}", "[": "]"}


class _Unparseable:
    """Sentinel returned when no JSON object or array can be recovered."""

    _instance: Optional["_Unparseable"] = None

    def __new__(cls) -> "_Unparseable":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNPARSEABLE"


UNPARSEABLE = _Unparseable()


def extract_json(text: Any) -> Any:
    """Return the first JSON object/array found in ``text`` or ``UNPARSEABLE``.

    Precedence: direct parse, then code fences stripped, then the first
    balanced ``{...}`` or ``[...]`` span that parses. Never raises.
    """

    if not isinstance(text, str):
        return UNPARSEABLE
    stripped = text.strip()
    if not stripped:
        return UNPARSEABLE
    value = _loads_container(stripped)
    if value is not UNPARSEABLE:
        return value
    unfenced = strip_code_fences(stripped)
    if unfenced != stripped:
        value = _loads_container(unfenced)
        if value is not UNPARSEABLE:
            return value
    return _first_balanced(unfenced)


def strip_code_fences(content: str) -> str:  # Remove common markdown fences from LLM output
    text = content.strip()
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    if text.startswith("```"):
        lines = text.splitlines()[1:]
        while lines and lines[-1].strip() in ("", "```"):
            lines = lines[:-1]
        text = "\n".join(lines).strip()
    return text


def _loads_container(text: str) -> Any:
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, ValueError, RecursionError):
        return UNPARSEABLE
    if isinstance(value, (dict, list)):
        return value
    return UNPARSEABLE


def _first_balanced(text: str) -> Any:
    for start, char in enumerate(text):
        if char not in _CLOSERS:
            continue
        end = _balanced_end(text, start)
        if end is None:
            continue
        value = _loads_container(text[start : end + 1])
        if value is not UNPARSEABLE:
            return value
    return UNPARSEABLE


def _balanced_end(text: str, start: int) -> Optional[int]:  # Index of the bracket closing text[start]
    stack = [_CLOSERS[text[start]]]
    in_string = False
    escaped = False
    for index in range(start + 1, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(_CLOSERS[char])
        elif char in "}]":
            if char != stack[-1]:
                return None
            stack.pop()
            if not stack:
                return index
    return None


__all__ = ["UNPARSEABLE", "extract_json", "strip_code_fences"]
