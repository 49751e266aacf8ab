"""Unit tests for `chatbridge.base.utils.messages`.

Covers role coercion, multi-part flattening, JSON fallback for opaque
values, dropping of empty messages and idempotence on canonical records.
"""
from __future__ import annotations

import json

import pytest

from chatbridge.base.errors import ErrorCode, InputError
from chatbridge.base.models import ChatMessage
from chatbridge.base.utils.messages import (
    OpaqueContent,
    PartsContent,
    TextContent,
    classify_content,
    normalize_message,
    normalize_messages,
)


def test_string_element_becomes_user_message():
    assert normalize_message("  hello  ") == ChatMessage(role="user", content="hello")


def test_roles_other_than_assistant_and_system_collapse_to_user():
    out = normalize_messages(
        [
            {"role": "assistant", "content": "a"},
            {"role": "system", "content": "s"},
            {"role": "data", "content": "d"},
            {"role": "tool", "content": "t"},
            {"content": "no role"},
            {"role": 7, "content": "numeric role"},
        ]
    )
    assert [m.role for m in out] == ["assistant", "system", "user", "user", "user", "user"]


def test_parts_are_flattened_with_newlines():
    msg = normalize_message(
        {
            "role": "user",
            "content": [
                {"type": "text", "text": "Part A"},
                "Part B",
                {"type": "image", "url": "http://x/img.png"},
                {"text": 42},
                {"type": "text", "text": ""},
            ],
        }
    )
    assert msg == ChatMessage(role="user", content="Part A\nPart B\n42")


def test_none_and_empty_content_is_dropped():
    out = normalize_messages(
        [
            {"role": "user", "content": None},
            {"role": "user", "content": "   "},
            {"role": "user", "content": []},
            {"role": "user", "content": [{"type": "image"}]},
            "",
        ]
    )
    assert out == []


def test_opaque_content_is_json_serialized():
    assert normalize_message({"role": "user", "content": 12}).content == "12"
    assert normalize_message({"role": "user", "content": True}).content == "true"
    msg = normalize_message({"role": "assistant", "content": {"k": "v"}})
    assert msg.role == "assistant"
    assert json.loads(msg.content) == {"k": "v"}


def test_mapping_without_content_and_foreign_elements_are_serialized_whole():
    msg = normalize_message({"role": "user", "text": "hi"})
    assert json.loads(msg.content) == {"role": "user", "text": "hi"}
    assert normalize_message(3.5) == ChatMessage(role="user", content="3.5")
    assert json.loads(normalize_message(["x", 1]).content) == ["x", 1]


def test_every_normalized_message_has_non_empty_trimmed_content():
    raw = ["a", {"content": [" b ", None]}, {"x": 1}, None, {"role": "user", "content": "\n c \n"}]
    for m in normalize_messages(raw):
        assert m.content
        assert m.content == m.content.strip()
        assert m.role in ("user", "assistant", "system")


def test_normalization_is_idempotent_on_canonical_records():
    first = normalize_messages(
        [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": [{"type": "text", "text": "hello"}, "world"]},
            {"role": "assistant", "content": " hi "},
        ]
    )
    as_records = [m.to_dict() for m in first]
    assert normalize_messages(as_records) == first
    assert normalize_messages(first) == first


def test_classify_content_variants():
    assert classify_content("x") == TextContent("x")
    assert classify_content(None) == TextContent("")
    assert classify_content(["a"]) == PartsContent(("a",))
    assert classify_content(1) == OpaqueContent(1)


@pytest.mark.parametrize("value", [None, "hello", {"role": "user"}, 5])
def test_normalize_messages_rejects_non_sequences(value):
    with pytest.raises(InputError) as ei:
        normalize_messages(value)
    assert ei.value.code is ErrorCode.INPUT


def test_normalize_messages_accepts_empty_list():
    assert normalize_messages([]) == []
