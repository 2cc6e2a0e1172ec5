"""Detection of conversation export formats and message text extraction."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any


class Format(Enum):
    """Recognised input formats."""

    CLAUDE_JSONL = "claude_jsonl"
    CHATGPT_JSON = "chatgpt_json"
    CODEX_JSONL = "codex_jsonl"
    SLACK_JSON = "slack_json"
    PLAIN_TEXT = "plain_text"


class _InvalidJson(ValueError):
    pass


def _reject_constant(name: str) -> Any:
    raise _InvalidJson(name)


def _loads(text: str) -> Any:
    """Strict JSON parse; raises ``ValueError`` on invalid input, NaN included."""
    return json.loads(text, parse_constant=_reject_constant)


def _nonblank_lines(content: str):
    for line in content.split("\n"):
        stripped = line.strip()
        if stripped:
            yield stripped


def _field(value: Any, key: str) -> Any:
    return value.get(key) if isinstance(value, dict) else None


def _str_field(value: Any, key: str) -> str | None:
    item = _field(value, key)
    return item if isinstance(item, str) else None


def detect_format(content: str) -> Format:
    """Guess the format of an export from its text."""
    if _is_claude_jsonl(content):
        return Format.CLAUDE_JSONL
    if _is_codex_jsonl(content):
        return Format.CODEX_JSONL
    if _is_slack_json(content):
        return Format.SLACK_JSON
    if _is_chatgpt_json(content):
        return Format.CHATGPT_JSON
    return Format.PLAIN_TEXT


def _is_codex_jsonl(content: str) -> bool:
    has_session_meta = False
    event_msg_count = 0
    for line in _nonblank_lines(content):
        try:
            value = _loads(line)
        except ValueError:
            return False
        kind = _str_field(value, "type")
        if kind == "session_meta":
            has_session_meta = True
        elif kind == "event_msg":
            event_msg_count += 1
        elif kind != "response_item":
            return False
    return has_session_meta and event_msg_count >= 2


def _is_slack_json(content: str) -> bool:
    try:
        value = _loads(content)
    except ValueError:
        return False
    if not isinstance(value, list):
        return False
    return any(
        isinstance(msg, dict)
        and msg.get("type") == "message"
        and ("user" in msg or "username" in msg)
        and "text" in msg
        for msg in value[:5]
    )


def _is_claude_jsonl(content: str) -> bool:
    saw_line = False
    for line in _nonblank_lines(content):
        try:
            value = _loads(line)
        except ValueError:
            return False
        if _str_field(value, "type") is None:
            return False
        if extract_message_text(value) is None:
            return False
        saw_line = True
    return saw_line


def _is_chatgpt_json(content: str) -> bool:
    try:
        value = _loads(content)
    except ValueError:
        return False
    if isinstance(value, list):
        return True
    return isinstance(value, dict) and ("messages" in value or "mapping" in value)


def extract_message_text(value: Any) -> str | None:
    """Text of an entry's ``message`` string, else of its ``content``."""
    message = _str_field(value, "message")
    if message is not None:
        return message
    content = _field(value, "content")
    if content is None:
        return None
    return extract_content_text(content)


def extract_content_text(value: Any) -> str | None:
    """Flatten a content value (string, list of strings, or ``{"parts": [...]}``)."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "\n".join(item for item in value if isinstance(item, str))
    if isinstance(value, dict):
        parts = value.get("parts")
        if not isinstance(parts, list):
            return None
        text = "\n".join(item for item in parts if isinstance(item, str))
        return text or None
    return None