"""File-based message inbox shared by partner agents working in one project.

A push appends one JSON line to the target agent's inbox file; a drain
atomically renames the file, reads every message and deletes it.
"""

from __future__ import annotations

import json
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from mempal.cowork.inbox_paths import (
    MAX_MESSAGE_SIZE,
    MAX_PENDING_MESSAGES,
    MAX_TOTAL_INBOX_BYTES,
    InboxFullError,
    MessageTooLargeError,
    SelfPushError,
    inbox_path,
)
from mempal.cowork.models import Tool


def _dumps(value: object) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


@dataclass
class InboxMessage:
    """One message waiting in an inbox."""

    pushed_at: str
    sender: str
    content: str

    def to_json(self) -> str:
        """Compact single-line JSON form as stored in the inbox file."""
        return _dumps(
            {"pushed_at": self.pushed_at, "from": self.sender, "content": self.content}
        )

    @classmethod
    def from_json(cls, line: str) -> InboxMessage:
        """Parse one inbox line; raises ``ValueError`` if it is malformed."""
        value = json.loads(line)
        if not isinstance(value, dict):
            raise ValueError("inbox entry is not a JSON object")
        fields = []
        for key in ("pushed_at", "from", "content"):
            item = value.get(key)
            if not isinstance(item, str):
                raise ValueError(f"inbox entry field {key!r} missing or not a string")
            fields.append(item)
        return cls(*fields)


def _existing_state(path: Path) -> tuple[int, int]:
    try:
        text = path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError):
        text = ""
    count = sum(1 for line in text.split("\n") if line.strip())
    return count, len(text.encode("utf-8"))


def push(
    home: str | os.PathLike[str],
    caller: Tool,
    target: Tool,
    cwd: str | os.PathLike[str],
    content: str,
    pushed_at: str,
) -> tuple[Path, int]:
    """Append a message to ``target``'s inbox for the project containing ``cwd``.

    The limits are checked against the state after the append, so the byte
    limit is a real upper bound. Returns the inbox path and its new size.
    """
    if caller is target:
        raise SelfPushError(caller)
    size = len(content.encode("utf-8"))
    if size > MAX_MESSAGE_SIZE:
        raise MessageTooLargeError(size)

    path = inbox_path(home, target, cwd)
    path.parent.mkdir(parents=True, exist_ok=True)

    existing_count, existing_bytes = _existing_state(path) if path.exists() else (0, 0)

    line = InboxMessage(pushed_at, caller.dir_name(), content).to_json().encode("utf-8")
    prospective_count = existing_count + 1
    prospective_bytes = existing_bytes + len(line) + 1
    if prospective_count > MAX_PENDING_MESSAGES or prospective_bytes > MAX_TOTAL_INBOX_BYTES:
        raise InboxFullError(existing_count, existing_bytes)

    with open(path, "ab") as handle:
        handle.write(line + b"\n")
        handle.flush()

    return path, path.stat().st_size


def drain(
    home: str | os.PathLike[str],
    target: Tool,
    cwd: str | os.PathLike[str],
) -> list[InboxMessage]:
    """Take every message out of ``target``'s inbox, at most once.

    Concurrent drains race on an atomic rename; the loser gets an empty list.
    Malformed lines are skipped.
    """
    path = inbox_path(home, target, cwd)
    draining = path.with_suffix(".draining")
    try:
        os.rename(path, draining)
    except FileNotFoundError:
        return []

    text = draining.read_bytes().decode("utf-8")
    messages = []
    for line in text.split("\n"):
        stripped = line.strip()
        if not stripped:
            continue
        try:
            messages.append(InboxMessage.from_json(stripped))
        except ValueError:
            continue

    try:
        draining.unlink()
    except OSError:
        pass
    return messages


def format_plain(sender: Tool, messages: Sequence[InboxMessage]) -> str:
    """Render drained messages as text to prepend to a prompt."""
    if not messages:
        return ""
    plural = "" if len(messages) == 1 else "s"
    lines = [
        f"[Partner inbox from {sender.dir_name()} "
        f"({len(messages)} message{plural} since last check):]\n"
    ]
    lines.extend(f"- {msg.pushed_at}: {msg.content}\n" for msg in messages)
    lines.append("[End partner inbox]\n")
    return "".join(lines)


def format_codex_hook_json(sender: Tool, messages: Sequence[InboxMessage]) -> str:
    """Wrap the plain rendering in a prompt-submit hook JSON envelope."""
    if not messages:
        return ""
    envelope = {
        "hookSpecificOutput": {
            "additionalContext": format_plain(sender, messages),
            "hookEventName": "UserPromptSubmit",
        }
    }
    return _dumps(envelope)