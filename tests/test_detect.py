import json

import pytest

from mempal.ingest.detect import (
    Format,
    detect_format,
    extract_content_text,
    extract_message_text,
)


def _jsonl(*entries):
    return "\n".join(json.dumps(entry) for entry in entries)


def test_detects_claude_jsonl():
    content = _jsonl(
        {"type": "user", "message": "hi"},
        {"type": "assistant", "content": ["yo"]},
    )
    assert detect_format(content) is Format.CLAUDE_JSONL


def test_claude_requires_type_on_every_line():
    content = _jsonl({"type": "user", "message": "hi"}, {"message": "no type"})
    assert detect_format(content) is not Format.CLAUDE_JSONL
    assert detect_format(content) is Format.PLAIN_TEXT


def test_detects_codex_jsonl():
    content = _jsonl(
        {"type": "session_meta", "payload": {"cwd": "/tmp/p"}},
        {"type": "event_msg", "payload": {"type": "user_message", "message": "a"}},
        {"type": "response_item", "payload": {}},
        {"type": "event_msg", "payload": {"type": "agent_message", "message": "b"}},
    )
    assert detect_format(content) is Format.CODEX_JSONL


def test_codex_needs_two_event_messages():
    content = _jsonl(
        {"type": "session_meta", "payload": {}},
        {"type": "event_msg", "payload": {}},
    )
    assert detect_format(content) is Format.PLAIN_TEXT


def test_codex_rejects_unknown_entry_type():
    content = _jsonl(
        {"type": "session_meta", "payload": {}},
        {"type": "event_msg", "payload": {}},
        {"type": "event_msg", "payload": {}},
        {"type": "other", "payload": {}},
    )
    assert detect_format(content) is Format.PLAIN_TEXT


def test_detects_slack_json():
    content = json.dumps([{"type": "message", "user": "U1", "text": "hello"}])
    assert detect_format(content) is Format.SLACK_JSON


def test_slack_only_inspects_first_five_messages():
    filler = [{"type": "channel_join"}] * 5
    content = json.dumps(filler + [{"type": "message", "user": "U1", "text": "hi"}])
    assert detect_format(content) is Format.CHATGPT_JSON


@pytest.mark.parametrize(
    "payload",
    [
        [{"role": "user", "content": "hi"}],
        {"messages": []},
        {"mapping": {}},
    ],
)
def test_detects_chatgpt_shapes(payload):
    assert detect_format(json.dumps(payload)) is Format.CHATGPT_JSON


@pytest.mark.parametrize("content", ["hello world", "", "{\"other\": 1}", "[NaN]"])
def test_falls_back_to_plain_text(content):
    assert detect_format(content) is Format.PLAIN_TEXT


def test_extract_message_text_prefers_message_string():
    assert extract_message_text({"message": "m", "content": "c"}) == "m"
    assert extract_message_text({"message": 5, "content": "c"}) == "c"
    assert extract_message_text({}) is None
    assert extract_message_text([1, 2]) is None


def test_extract_content_text_shapes():
    assert extract_content_text("plain") == "plain"
    assert extract_content_text(["a", 1, "b"]) == "a\nb"
    assert extract_content_text([]) == ""
    assert extract_content_text({"parts": ["x", "y"]}) == "x\ny"


def test_extract_content_text_rejects_empty_or_unknown():
    assert extract_content_text({"parts": []}) is None
    assert extract_content_text({"parts": [1]}) is None
    assert extract_content_text({"text": "nope"}) is None
    assert extract_content_text(42) is None
    assert extract_content_text(None) is None