"""Reader for Codex rollout session logs."""

from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Any

from mempal.cowork.models import PeekMessage, PeekParseError
from mempal.cowork.timefmt import SECONDS_PER_DAY, days_to_ymd, parse_rfc3339

_ROLES = ("user", "assistant")


def read_session_cwd(path: str | os.PathLike[str]) -> str | None:
    """``payload.cwd`` from the ``session_meta`` first line of a rollout file."""
    try:
        with open(path, encoding="utf-8") as handle:
            first = handle.readline()
        value = json.loads(first.strip())
    except (OSError, ValueError):
        return None
    if not isinstance(value, dict) or value.get("type") != "session_meta":
        return None
    payload = value.get("payload")
    if not isinstance(payload, dict):
        return None
    cwd = payload.get("cwd")
    return cwd if isinstance(cwd, str) else None


def find_latest_session_for_cwd(
    base: str | os.PathLike[str],
    target_cwd: str,
    now: float | None = None,
) -> tuple[Path, float] | None:
    """Newest rollout file for ``target_cwd`` within the recent date directories.

    Scans ``base/YYYY/MM/DD`` for the UTC days from seven days before ``now``
    to one day after it, so the last seven local days are covered whatever
    the local offset. Returns the path and mtime, or ``None``.
    """
    if now is None:
        now = time.time()
    today = int(now) // SECONDS_PER_DAY
    base_path = Path(base)
    latest: tuple[Path, float] | None = None

    for offset in range(-1, 8):
        year, month, day = days_to_ymd(today - offset)
        day_dir = base_path / f"{year:04}" / f"{month:02}" / f"{day:02}"
        try:
            entries = list(os.scandir(day_dir))
        except OSError:
            continue
        for entry in entries:
            path = Path(entry.path)
            if not path.is_file() or path.suffix != ".jsonl":
                continue
            if not path.name.startswith("rollout-"):
                continue
            if read_session_cwd(path) != target_cwd:
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


def _read_lines(path: str | os.PathLike[str]):
    with open(path, encoding="utf-8", newline="\n") as handle:
        for raw in handle:
            line = raw.rstrip("\n")
            if line.endswith("\r"):
                line = line[:-1]
            yield line


def _extract_message(entry: Any) -> PeekMessage | None:
    if not isinstance(entry, dict) or entry.get("type") != "response_item":
        return None
    payload = entry.get("payload")
    if not isinstance(payload, dict) or payload.get("type") != "message":
        return None
    role = payload.get("role")
    if role not in _ROLES:
        return None

    content = payload.get("content")
    if isinstance(content, list):
        text = "\n".join(
            block["text"]
            for block in content
            if isinstance(block, dict) and isinstance(block.get("text"), str)
        )
    elif isinstance(content, str):
        text = content
    else:
        return None
    if not text:
        return None

    timestamp = entry.get("timestamp")
    at = timestamp if isinstance(timestamp, str) else ""
    return PeekMessage(role=role, at=at, text=text)


def parse_codex_jsonl(
    path: str | os.PathLike[str],
    since: str | None = None,
    limit: int = 30,
) -> tuple[list[PeekMessage], bool]:
    """Read the last ``limit`` user/assistant messages of a Codex rollout.

    Event and reasoning entries are skipped. Returns the messages in file
    order and whether older ones were dropped.
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
        if message is None:
            continue
        if cutoff is not None:
            stamp = parse_rfc3339(message.at)
            if stamp is not None and stamp <= cutoff:
                continue
        collected.append(message)

    total = len(collected)
    return collected[max(0, total - limit):], total > limit