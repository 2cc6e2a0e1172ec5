"""Peek at the live session of a partner agent working in the same directory."""

from __future__ import annotations

import os
import time
from pathlib import Path

from mempal.cowork.claude import (
    claude_project_dir,
    latest_session_file,
    parse_jsonl_messages,
)
from mempal.cowork.codex import find_latest_session_for_cwd, parse_codex_jsonl
from mempal.cowork.models import (
    CannotInferPartnerError,
    PeekParseError,
    PeekRequest,
    PeekResponse,
    SelfPeekError,
    Tool,
)
from mempal.cowork.timefmt import format_rfc3339

ACTIVE_WINDOW_SECONDS = 30 * 60


def is_active(mtime: float) -> bool:
    """Whether a session modified at ``mtime`` counts as active.

    Active means modified within the last 30 minutes; future mtimes
    (clock skew) count as active.
    """
    age = time.time() - mtime
    return age <= ACTIVE_WINDOW_SECONDS


def infer_partner(requested: Tool, caller_tool: Tool | None) -> Tool:
    """Resolve ``Tool.AUTO`` into the concrete partner of the caller."""
    if requested is not Tool.AUTO:
        return requested
    partner = caller_tool.partner() if caller_tool is not None else None
    if partner is None:
        raise CannotInferPartnerError()
    return partner


def _resolve_home(request: PeekRequest) -> Path:
    if request.home_override is not None:
        return Path(request.home_override)
    home = os.environ.get("HOME")
    if home is None:
        raise PeekParseError("HOME environment variable not set")
    return Path(home)


def _found(target: Tool, path: Path, mtime: float, messages, truncated: bool) -> PeekResponse:
    return PeekResponse(
        partner_tool=target,
        session_path=str(path),
        session_mtime=format_rfc3339(mtime),
        partner_active=is_active(mtime),
        messages=messages,
        truncated=truncated,
    )


def _peek_claude(request: PeekRequest, target: Tool) -> PeekResponse:
    home = _resolve_home(request)
    found = latest_session_file(claude_project_dir(home, request.cwd))
    if found is None:
        return PeekResponse(partner_tool=target)
    path, mtime = found
    messages, truncated = parse_jsonl_messages(path, request.since, request.limit)
    return _found(target, path, mtime, messages, truncated)


def _peek_codex(request: PeekRequest, target: Tool) -> PeekResponse:
    home = _resolve_home(request)
    base = home / ".codex" / "sessions"
    found = find_latest_session_for_cwd(base, os.fspath(request.cwd))
    if found is None:
        return PeekResponse(partner_tool=target)
    path, mtime = found
    messages, truncated = parse_codex_jsonl(path, request.since, request.limit)
    return _found(target, path, mtime, messages, truncated)


def peek_partner(request: PeekRequest) -> PeekResponse:
    """Read the tail of the partner agent's latest session for ``request.cwd``."""
    target = infer_partner(request.tool, request.caller_tool)
    if request.caller_tool is not None and request.caller_tool is target:
        raise SelfPeekError()
    if target is Tool.CLAUDE:
        return _peek_claude(request, target)
    return _peek_codex(request, target)