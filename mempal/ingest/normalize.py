"""Conversion of detected export formats into a plain transcript.

User turns are prefixed with ``"> "``; other turns are written as they are.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from mempal.ingest.detect import Format, extract_content_text, extract_message_text

_USER_ROLES = ("user", "human")


class NormalizeError(Exception):
    """Content could not be normalized."""


class UnsupportedChatGptShapeError(NormalizeError):
    def __init__(self) -> None:
        super().__init__("unsupported ChatGPT JSON shape")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def _loads(text: str) -> Any:
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise NormalizeError(str(exc)) from exc


def _get(value: Any, key: str) -> Any:
    return value.get(key) if isinstance(value, dict) else None


def _get_str(value: Any, key: str) -> str | None:
    item = _get(value, key)
    return item if isinstance(item, str) else None


def _nonblank_lines(content: str):
    for line in content.split("\n"):
        stripped = line.strip()
        if stripped:
            yield stripped


def normalize_content(content: str, fmt: Format) -> str:
    """Turn ``content`` of format ``fmt`` into a transcript."""
    if fmt is Format.PLAIN_TEXT:
        return content.strip()
    if fmt is Format.CLAUDE_JSONL:
        return _normalize_claude_jsonl(content)
    if fmt is Format.CHATGPT_JSON:
        return _normalize_chatgpt_json(content)
    if fmt is Format.CODEX_JSONL:
        return _normalize_codex_jsonl(content)
    return _normalize_slack_json(content)


def _normalize_claude_jsonl(content: str) -> str:
    lines = []
    for raw in _nonblank_lines(content):
        value = _loads(raw)
        role = _get_str(value, "type") or "assistant"
        message = (extract_message_text(value) or "").strip()
        if not message:
            continue
        lines.append(f"> {message}" if role in _USER_ROLES else message)
    return "\n".join(lines)


def _normalize_chatgpt_json(content: str) -> str:
    value = _loads(content)
    if isinstance(value, list):
        return _normalize_chatgpt_messages(value)
    messages = _get(value, "messages")
    if isinstance(messages, list):
        return _normalize_chatgpt_messages(messages)
    mapping = _get(value, "mapping")
    if isinstance(mapping, dict):
        root = _find_root_node(mapping)
        pairs = _collect_messages(mapping, root) if root is not None else []
        return _render_transcript(pairs)
    raise UnsupportedChatGptShapeError()


def _normalize_chatgpt_messages(messages: list[Any]) -> str:
    def pairs():
        for message in messages:
            role = _get_str(message, "role")
            if role is None:
                continue
            content = extract_content_text(_get(message, "content"))
            if content is None:
                continue
            yield role, content

    return _render_transcript(pairs())


def _find_root_node(mapping: dict[str, Any]) -> str | None:
    for node_id in sorted(mapping):
        parent = _get(mapping[node_id], "parent")
        if parent is None or parent == "":
            return node_id
    return None


def _collect_messages(mapping: dict[str, Any], root_id: str) -> list[tuple[str, str]]:
    """Depth-first walk from ``root_id``; cycles back to an ancestor are not followed."""
    result: list[tuple[str, str]] = []
    on_path: set[str] = set()
    stack: list[tuple[bool, str]] = [(True, root_id)]

    while stack:
        entering, node_id = stack.pop()
        if not entering:
            on_path.discard(node_id)
            continue
        if node_id in on_path or node_id not in mapping:
            continue
        node = mapping[node_id]

        message = _get(node, "message")
        role = _get_str(_get(message, "author"), "role")
        content = extract_content_text(_get(message, "content"))
        if role is not None and content is not None:
            result.append((role, content))

        on_path.add(node_id)
        stack.append((False, node_id))
        children = _get(node, "children")
        if isinstance(children, list):
            stack.extend((True, child) for child in reversed(children) if isinstance(child, str))

    return result


def _normalize_codex_jsonl(content: str) -> str:
    pairs = []
    for line in _nonblank_lines(content):
        value = _loads(line)
        if _get_str(value, "type") != "event_msg":
            continue
        payload = _get(value, "payload")
        if payload is None:
            continue
        kind = _get_str(payload, "type") or ""
        message = (_get_str(payload, "message") or "").strip()
        if not message:
            continue
        if kind == "user_message":
            pairs.append(("user", message))
        elif kind == "agent_message":
            pairs.append(("assistant", message))
    return _render_transcript(pairs)


def _normalize_slack_json(content: str) -> str:
    value = _loads(content)
    if not isinstance(value, list):
        raise UnsupportedChatGptShapeError()

    first_speaker: str | None = None
    pairs = []
    for msg in value:
        if _get_str(msg, "type") != "message":
            continue
        speaker_value = msg["user"] if "user" in msg else msg.get("username")
        speaker = speaker_value if isinstance(speaker_value, str) else "unknown"
        text = (_get_str(msg, "text") or "").strip()
        if not text:
            continue
        if first_speaker is None:
            first_speaker = speaker
        pairs.append(("user" if speaker == first_speaker else "assistant", text))
    return _render_transcript(pairs)


def _render_transcript(items: Iterable[tuple[str, str]]) -> str:
    lines = []
    for role, content in items:
        text = content.strip()
        if not text:
            continue
        lines.append(f"> {text}" if role in _USER_ROLES else text)
    return "\n".join(lines)