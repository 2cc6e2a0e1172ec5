"""Peek request and response types, agent tool identities and peek errors."""

from __future__ import annotations

import json
import string
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


class Tool(str, Enum):
    """An agent tool whose session can be peeked or pushed to."""

    CLAUDE = "claude"
    CODEX = "codex"
    AUTO = "auto"

    @classmethod
    def parse(cls, text: str) -> Tool | None:
        """Case-insensitive parse of a tool or client name; accepts ``auto``."""
        return _ALIASES.get(text.translate(_ASCII_LOWER))

    @classmethod
    def parse_target(cls, text: str) -> Tool | None:
        """Strict parse for an explicit push/drain target; rejects ``auto``."""
        tool = cls.parse(text)
        return None if tool is cls.AUTO else tool

    def dir_name(self) -> str:
        """Directory name used under the cowork inbox root."""
        return self.value

    def partner(self) -> Tool | None:
        """The other concrete agent, or ``None`` for ``AUTO``."""
        return _PARTNERS.get(self)


_ALIASES = {
    "claude": Tool.CLAUDE,
    "claude-code": Tool.CLAUDE,
    "claude_code": Tool.CLAUDE,
    "codex": Tool.CODEX,
    "codex-cli": Tool.CODEX,
    "codex_cli": Tool.CODEX,
    "codex-tui": Tool.CODEX,
    "codex-mcp-client": Tool.CODEX,
    "auto": Tool.AUTO,
}

_PARTNERS = {Tool.CLAUDE: Tool.CODEX, Tool.CODEX: Tool.CLAUDE}


@dataclass
class PeekRequest:
    """Parameters for peeking at a partner agent's session."""

    tool: Tool
    cwd: Path
    limit: int = 30
    since: str | None = None
    caller_tool: Tool | None = None
    home_override: Path | None = None


@dataclass
class PeekMessage:
    """One user or assistant text message from a session log."""

    role: str
    at: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "at": self.at, "text": self.text}


@dataclass
class PeekResponse:
    """Result of a peek: the partner session found and its tail messages."""

    partner_tool: Tool
    session_path: str | None = None
    session_mtime: str | None = None
    partner_active: bool = False
    messages: list[PeekMessage] = field(default_factory=list)
    truncated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "partner_tool": self.partner_tool.value,
            "session_path": self.session_path,
            "session_mtime": self.session_mtime,
            "partner_active": self.partner_active,
            "messages": [message.to_dict() for message in self.messages],
            "truncated": self.truncated,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)


class PeekError(Exception):
    """Base class for peek failures."""


class CannotInferPartnerError(PeekError):
    def __init__(self) -> None:
        super().__init__(
            "cannot infer partner; pass `tool` explicitly "
            "(client_info.name was missing or unrecognized)"
        )


class SelfPeekError(PeekError):
    def __init__(self) -> None:
        super().__init__("cannot peek your own session")


class PeekParseError(PeekError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"failed to parse session file: {detail}")
        self.detail = detail