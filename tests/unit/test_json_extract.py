"""Tests for best-effort JSON recovery from model replies."""
from __future__ import annotations

import pytest

from llm_gateway import UNPARSEABLE, extract_json, strip_code_fences


def test_direct_object_and_array():
    assert extract_json('{"a": 1}') == {"a": 1}
    assert extract_json("[1, 2]") == [1, 2]


def test_code_fence_is_stripped():
    reply = '```json\n{"skills": ["Python"]}\n```'
    assert extract_json(reply) == {"skills": ["Python"]}
    assert strip_code_fences(reply) == '{"skills": ["Python"]}'


def test_first_balanced_object_inside_prose():
    reply = 'Sure! Here you go: {"score": 4, "note": "uses } and { in text"} Hope it helps {"x": 2}'
    assert extract_json(reply) == {"score": 4, "note": "uses } and { in text"}


def test_array_inside_prose():
    reply = 'Questions follow.\n[{"category": "technical", "question": "Why?"}]\nDone.'
    assert extract_json(reply) == [{"category": "technical", "question": "Why?"}]


def test_escaped_quotes_do_not_break_scanning():
    reply = 'prefix {"text": "she said \\"hi\\" }"} suffix'
    assert extract_json(reply) == {"text": 'she said "hi" }'}


@pytest.mark.parametrize(
    "reply",
    ["", "   ", "no json here", "{not: valid}", '{"open": [1, 2', "42", '"just a string"', None],
)
def test_unparseable_inputs(reply):
    assert extract_json(reply) is UNPARSEABLE


def test_unparseable_is_falsy():
    assert not UNPARSEABLE
    assert repr(UNPARSEABLE) == "UNPARSEABLE"
