"""Splitting of plain text and conversation transcripts into chunks."""

from __future__ import annotations

_BREAK_CHARS = ("\n", " ", "\t")


def _lines(text: str) -> list[str]:
    """Split on ``\\n`` with a trailing ``\\r`` removed, without a final empty line."""
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def chunk_text(text: str, window: int, overlap: int) -> list[str]:
    """Split ``text`` into chunks of at most ``window`` characters.

    A chunk ends after the last whitespace in its window when that lies past
    the window's midpoint. Consecutive chunks share up to ``overlap``
    characters; an overlap not smaller than the window is reduced to
    ``window - 1``.
    """
    if window < 0 or overlap < 0:
        raise ValueError("window and overlap must not be negative")
    trimmed = text.strip()
    if not trimmed or window == 0:
        return []

    overlap = min(overlap, window - 1)
    length = len(trimmed)
    chunks: list[str] = []
    start = 0

    while start < length:
        end = min(start + window, length)
        if end < length:
            piece = trimmed[start:end]
            split = max(piece.rfind(ch) for ch in _BREAK_CHARS)
            if split > window // 2:
                end = start + split + 1

        chunk = trimmed[start:end].strip()
        if chunk:
            chunks.append(chunk)

        if end == length:
            break

        next_start = max(end - overlap, 0)
        start = end if next_start <= start else next_start

    return chunks


def chunk_conversation(transcript: str) -> list[str]:
    """Split a transcript into chunks that each begin at a ``"> "`` user turn.

    Blank lines before the first content line are dropped.
    """
    chunks: list[str] = []
    current: list[str] = []

    for line in _lines(transcript):
        if line.startswith("> ") and current:
            chunks.append("\n".join(current))
            current = []
        if line.strip() or current:
            current.append(line)

    if current:
        chunks.append("\n".join(current))
    return chunks