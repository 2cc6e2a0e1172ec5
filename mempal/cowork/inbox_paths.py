"""Cowork inbox locations, project identity and inbox errors."""

from __future__ import annotations

import os
from pathlib import Path

from mempal.cowork.models import Tool

MAX_MESSAGE_SIZE = 8 * 1024
MAX_PENDING_MESSAGES = 16
MAX_TOTAL_INBOX_BYTES = 32 * 1024


class InboxError(Exception):
    """Base class for cowork inbox failures."""


class MessageTooLargeError(InboxError):
    def __init__(self, size: int) -> None:
        super().__init__(
            f"message content exceeds {MAX_MESSAGE_SIZE} bytes: got {size} bytes"
        )
        self.size = size


class InvalidCwdError(InboxError):
    def __init__(self, path: str) -> None:
        super().__init__(f"invalid cwd path (contains `..` or is not absolute): {path}")
        self.path = path


class SelfPushError(InboxError):
    def __init__(self, tool: Tool) -> None:
        super().__init__(
            f"cannot push to self (both caller and target resolve to {tool.value})"
        )
        self.tool = tool


class InboxFullError(InboxError):
    def __init__(self, current_count: int, current_bytes: int) -> None:
        super().__init__(
            f"inbox full: {current_count} messages / {current_bytes} bytes pending "
            f"(limits: {MAX_PENDING_MESSAGES} messages, {MAX_TOTAL_INBOX_BYTES} bytes) "
            "— partner must drain first"
        )
        self.current_count = current_count
        self.current_bytes = current_bytes


def mempal_home() -> Path:
    """``$HOME/.mempal``, or ``.mempal`` when HOME is unset."""
    home = os.environ.get("HOME")
    return Path(home) / ".mempal" if home is not None else Path(".mempal")


def project_identity(cwd: str | os.PathLike[str]) -> Path:
    """The nearest ancestor of ``cwd`` holding ``.git``, else ``cwd`` itself."""
    start = Path(cwd)
    for candidate in (start, *start.parents):
        if (candidate / ".git").exists():
            return candidate
    return start


def encode_project_identity(identity: str | os.PathLike[str]) -> str:
    """Encode an absolute project path as a file name, ``/`` becoming ``-``."""
    text = os.fspath(identity)
    if not text.startswith("/") or ".." in text:
        raise InvalidCwdError(text)
    return text.replace("/", "-")


def inbox_path(home: str | os.PathLike[str], target: Tool, cwd: str | os.PathLike[str]) -> Path:
    """``<home>/cowork-inbox/<target>/<encoded project identity>.jsonl``."""
    encoded = encode_project_identity(project_identity(cwd))
    return Path(home) / "cowork-inbox" / target.dir_name() / f"{encoded}.jsonl"