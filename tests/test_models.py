import json
from pathlib import Path

import pytest

from mempal.cowork.models import (
    CannotInferPartnerError,
    PeekError,
    PeekMessage,
    PeekParseError,
    PeekRequest,
    PeekResponse,
    SelfPeekError,
    Tool,
)


def test_tool_parses_from_str():
    assert Tool.parse("claude") is Tool.CLAUDE
    assert Tool.parse("Codex") is Tool.CODEX
    assert Tool.parse("AUTO") is Tool.AUTO
    assert Tool.parse("other") is None


def test_tool_parses_compound_names():
    assert Tool.parse("claude-code") is Tool.CLAUDE
    assert Tool.parse("codex-cli") is Tool.CODEX
    assert Tool.parse("codex-tui") is Tool.CODEX


def test_tool_recognizes_codex_mcp_client_identity():
    assert Tool.parse("codex-mcp-client") is Tool.CODEX
    assert Tool.parse("Codex-MCP-Client") is Tool.CODEX
    assert Tool.parse("CODEX-MCP-CLIENT") is Tool.CODEX


def test_parse_target_accepts_concrete_tools():
    assert Tool.parse_target("claude") is Tool.CLAUDE
    assert Tool.parse_target("CODEX") is Tool.CODEX
    assert Tool.parse_target("claude-code") is Tool.CLAUDE
    assert Tool.parse_target("codex-tui") is Tool.CODEX


@pytest.mark.parametrize("text", ["auto", "AUTO", "Auto", "bogus", ""])
def test_parse_target_rejects_auto_and_unknown(text):
    assert Tool.parse_target(text) is None


def test_dir_name_and_partner():
    assert Tool.CLAUDE.dir_name() == "claude"
    assert Tool.CODEX.dir_name() == "codex"
    assert Tool.AUTO.dir_name() == "auto"
    assert Tool.CLAUDE.partner() is Tool.CODEX
    assert Tool.CODEX.partner() is Tool.CLAUDE
    assert Tool.AUTO.partner() is None


def test_peek_response_serializes_with_snake_case_fields():
    resp = PeekResponse(
        partner_tool=Tool.CODEX,
        session_path="/tmp/x.jsonl",
        session_mtime="2026-04-13T12:00:00Z",
        partner_active=True,
        messages=[],
        truncated=False,
    )
    text = resp.to_json()
    assert "partner_tool" in text
    assert "session_path" in text
    assert "partner_active" in text
    assert '"partner_tool":"codex"' in text


def test_peek_response_json_round_trips_messages():
    message = PeekMessage(role="user", at="2026-04-13T02:00:00Z", text="hello")
    resp = PeekResponse(partner_tool=Tool.CLAUDE, messages=[message], truncated=True)
    decoded = json.loads(resp.to_json())
    assert decoded["messages"] == [message.to_dict()]
    assert decoded["truncated"] is True
    assert decoded["session_path"] is None
    assert decoded == resp.to_dict()


def test_peek_message_to_dict():
    message = PeekMessage(role="assistant", at="2026-04-13T05:00:00Z", text="reply")
    assert message.to_dict() == {
        "role": "assistant",
        "at": "2026-04-13T05:00:00Z",
        "text": "reply",
    }


def test_peek_request_keeps_given_fields():
    req = PeekRequest(tool=Tool.CODEX, cwd=Path("/tmp"), caller_tool=Tool.CLAUDE)
    assert req.cwd == Path("/tmp")
    assert req.caller_tool is Tool.CLAUDE
    assert req.since is None


def test_error_messages_and_hierarchy():
    assert str(SelfPeekError()) == "cannot peek your own session"
    assert "cannot infer partner" in str(CannotInferPartnerError())
    parse_error = PeekParseError("bad line")
    assert str(parse_error) == "failed to parse session file: bad line"
    assert parse_error.detail == "bad line"
    for error in (SelfPeekError(), CannotInferPartnerError(), parse_error):
        assert isinstance(error, PeekError)