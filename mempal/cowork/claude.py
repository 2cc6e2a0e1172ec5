"""Reader for Claude Code session logs."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from mempal.cowork.models import PeekMessage, PeekParseError
from mempal.cowork.timefmt import parse_rfc3339

_ROLES = ("user", "assistant")


def encode_cwd(cwd: str | os.PathLike[str]) -> str:
    """Encode a working directory the way Claude Code names project folders."""
    return os.fspath(cwd).replace("/", "-")


def claude_project_dir(home: str | os.PathLike[str], cwd: str | os.PathLike[str]) -> Path:
    """Directory holding the Claude Code sessions for ``cwd``."""
    return Path(home) / ".claude" / "projects" / encode_cwd(cwd)


def latest_session_file(project_dir: str | os.PathLike[str]) -> tuple[Path, float] | None:
    """Newest ``.jsonl`` file in ``project_dir`` with its mtime, or ``None``."""
    try:
        entries = list(os.scandir(project_dir))
    except OSError:
        return None

    latest: tuple[Path, float] | None = None
    for entry in entries:
        path = Path(entry.path)
        if path.suffix != ".jsonl":
            continue
        try:
            mtime = entry.stat(follow_symlinks=False).st_mtime
        except OSError:
            continue
        if latest is None or mtime >= latest[1]:
            latest = (path, mtime)
    return latest


def _since_cutoff(since: str | None) -> int | None:
    if since is None:
        return None
    cutoff = parse_rfc3339(since)
    if cutoff is None:
        raise PeekParseError(f"invalid `since` RFC3339 timestamp: {since}")
    return cutoff


def _is_older(at: str, cutoff: int | None) -> bool:
    # Messages whose timestamp cannot be parsed are kept.
    if cutoff is None:
        return False
    stamp = parse_rfc3339(at)
    return stamp is not None and stamp <= cutoff


def _read_lines(path: str | os.PathLike[str]):
    with open(path, encoding="utf-8", newline="\n") as handle:
        for raw in handle:
            line = raw.rstrip("\n")
            if line.endswith("\r"):
                line = line[:-1]
            yield line


def _tail(messages: list[PeekMessage], limit: int) -> tuple[list[PeekMessage], bool]:
    total = len(messages)
    return messages[max(0, total - limit):], total > limit


def _extract_message(entry: Any) -> PeekMessage | None:
    if not isinstance(entry, dict):
        return None
    if entry.get("type") not in _ROLES:
        return None
    if entry.get("isMeta") is True:
        return None

    message = entry.get("message")
    if not isinstance(message, dict):
        return None
    role = message.get("role")
    if role not in _ROLES:
        return None

    content = message.get("content")
    if isinstance(content, str):
        text = content.strip()
    elif isinstance(content, list):
        text = "\n".join(
            block["text"]
            for block in content
            if isinstance(block, dict)
            and block.get("type") == "text"
            and isinstance(block.get("text"), str)
        )
    else:
        return None

    if not text:
        return None

    timestamp = entry.get("timestamp")
    at = timestamp if isinstance(timestamp, str) else ""
    return PeekMessage(role=role, at=at, text=text)


def parse_jsonl_messages(
    path: str | os.PathLike[str],
    since: str | None = None,
    limit: int = 30,
) -> tuple[list[PeekMessage], bool]:
    """Read the last ``limit`` user/assistant text messages of a session.

    Returns the messages in file order and whether older ones were dropped.
    Only messages strictly newer than ``since`` are kept when it is given.
    """
    cutoff = _since_cutoff(since)
    collected: list[PeekMessage] = []

    for line in _read_lines(path):
        if not line.strip():
            continue
        try:
            entry = json.loads(line)
        except ValueError:
            continue
        message = _extract_message(entry)
        if message is None or _is_older(message.at, cutoff):
            continue
        collected.append(message)

    return _tail(collected, limit)