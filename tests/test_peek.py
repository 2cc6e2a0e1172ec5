import json
import time
from pathlib import Path

import pytest

from mempal.cowork.claude import claude_project_dir
from mempal.cowork.models import (
    CannotInferPartnerError,
    PeekParseError,
    PeekRequest,
    SelfPeekError,
    Tool,
)
from mempal.cowork.peek import infer_partner, is_active, peek_partner
from mempal.cowork.timefmt import days_to_ymd, parse_rfc3339

CWD = Path("/work/fake-project")


def _claude_line(kind, role, text, ts):
    return json.dumps(
        {"type": kind, "timestamp": ts, "message": {"role": role, "content": text}}
    )


def _write_claude_session(home: Path) -> Path:
    project = claude_project_dir(home, CWD)
    project.mkdir(parents=True)
    path = project / "session.jsonl"
    lines = [
        _claude_line("user", "user", "first question", "2026-04-13T01:00:00Z"),
        _claude_line("assistant", "assistant", "first answer", "2026-04-13T01:01:00Z"),
        _claude_line("user", "user", "second question", "2026-04-13T03:00:00Z"),
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def _write_codex_session(home: Path, cwd: str) -> Path:
    year, month, day = days_to_ymd(int(time.time()) // 86400)
    day_dir = home / ".codex" / "sessions" / f"{year:04}" / f"{month:02}" / f"{day:02}"
    day_dir.mkdir(parents=True)
    path = day_dir / "rollout-test.jsonl"
    lines = [
        json.dumps({"type": "session_meta", "payload": {"cwd": cwd}}),
        json.dumps(
            {
                "type": "response_item",
                "timestamp": "2026-04-13T12:00:01Z",
                "payload": {
                    "type": "message",
                    "role": "user",
                    "content": [{"type": "input_text", "text": "codex: hello"}],
                },
            }
        ),
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_rejects_self_peek_when_caller_is_same_tool():
    request = PeekRequest(tool=Tool.CODEX, cwd=Path("/tmp"), caller_tool=Tool.CODEX)
    with pytest.raises(SelfPeekError):
        peek_partner(request)


def test_auto_mode_errors_without_caller_tool():
    request = PeekRequest(tool=Tool.AUTO, cwd=Path("/tmp"))
    with pytest.raises(CannotInferPartnerError):
        peek_partner(request)


def test_infer_partner_maps_claude_to_codex_and_vice_versa():
    assert infer_partner(Tool.AUTO, Tool.CLAUDE) is Tool.CODEX
    assert infer_partner(Tool.AUTO, Tool.CODEX) is Tool.CLAUDE
    assert infer_partner(Tool.CLAUDE, Tool.CODEX) is Tool.CLAUDE


def test_infer_partner_auto_with_auto_caller_fails():
    with pytest.raises(CannotInferPartnerError):
        infer_partner(Tool.AUTO, Tool.AUTO)


def test_is_active_true_when_mtime_within_30_minutes():
    now = time.time()
    assert is_active(now - 10 * 60) is True
    assert is_active(now - 45 * 60) is False


def test_is_active_treats_future_mtime_as_active():
    assert is_active(time.time() + 3600) is True


def test_peek_claude_reads_latest_session(tmp_path):
    path = _write_claude_session(tmp_path)
    request = PeekRequest(
        tool=Tool.CLAUDE, cwd=CWD, caller_tool=Tool.CODEX, home_override=tmp_path
    )
    response = peek_partner(request)
    assert response.partner_tool is Tool.CLAUDE
    assert response.session_path == str(path)
    assert response.partner_active is True
    assert parse_rfc3339(response.session_mtime) is not None
    assert [m.text for m in response.messages] == [
        "first question",
        "first answer",
        "second question",
    ]
    assert response.truncated is False


def test_peek_claude_honors_limit_and_since(tmp_path):
    _write_claude_session(tmp_path)
    limited = peek_partner(
        PeekRequest(tool=Tool.CLAUDE, cwd=CWD, limit=1, home_override=tmp_path)
    )
    assert [m.text for m in limited.messages] == ["second question"]
    assert limited.truncated is True

    newer = peek_partner(
        PeekRequest(
            tool=Tool.CLAUDE,
            cwd=CWD,
            since="2026-04-13T10:00:00+08:00",
            home_override=tmp_path,
        )
    )
    assert [m.text for m in newer.messages] == ["second question"]


def test_peek_invalid_since_raises_parse_error(tmp_path):
    _write_claude_session(tmp_path)
    request = PeekRequest(
        tool=Tool.CLAUDE, cwd=CWD, since="yesterday", home_override=tmp_path
    )
    with pytest.raises(PeekParseError):
        peek_partner(request)


def test_peek_without_session_returns_empty_response(tmp_path):
    response = peek_partner(
        PeekRequest(tool=Tool.AUTO, cwd=CWD, caller_tool=Tool.CLAUDE, home_override=tmp_path)
    )
    assert response.partner_tool is Tool.CODEX
    assert response.session_path is None
    assert response.session_mtime is None
    assert response.partner_active is False
    assert response.messages == []
    assert response.truncated is False


def test_peek_codex_finds_session_for_cwd(tmp_path):
    path = _write_codex_session(tmp_path, str(CWD))
    response = peek_partner(
        PeekRequest(tool=Tool.AUTO, cwd=CWD, caller_tool=Tool.CLAUDE, home_override=tmp_path)
    )
    assert response.partner_tool is Tool.CODEX
    assert response.session_path == str(path)
    assert [m.text for m in response.messages] == ["codex: hello"]


def test_peek_without_home_raises_parse_error(monkeypatch):
    monkeypatch.delenv("HOME", raising=False)
    with pytest.raises(PeekParseError):
        peek_partner(PeekRequest(tool=Tool.CLAUDE, cwd=CWD))