# mempal

Project memory helpers for coding agents that work side by side in the same
repository.

## What it provides

### `mempal.cowork`: partner session peek and a shared inbox

- `peek.peek_partner(request)` reads the newest user and assistant text
  messages from the partner agent's latest session for a working directory.
  The request is a `models.PeekRequest` with the fields `tool`, `cwd`,
  `limit` (default 30), `since`, `caller_tool` and `home_override`. The
  partner is one of the following:
  - Claude Code. Its sessions are read from `~/.claude/projects/<cwd with / replaced by ->/`.
  - Codex. Its rollout files are read from `~/.codex/sessions/YYYY/MM/DD/`.
    Only the UTC days from seven days back to one day ahead are scanned.

  `Tool.AUTO` picks the other agent from `caller_tool`. The call raises
  `CannotInferPartnerError` when the partner cannot be worked out, and
  `SelfPeekError` when the caller asks for its own session. The result is a
  `models.PeekResponse` with these fields:
  - the session path and its mtime as RFC 3339 text;
  - `partner_active`, which is true when the session changed in the last
    30 minutes;
  - the messages;
  - `truncated`.

  `PeekResponse.to_json()` serialises the response.
- `models.Tool.parse` reads tool and client names, ignoring case. It accepts
  `claude-code` and `codex-mcp-client`, for example. `Tool.parse_target` does
  the same but rejects `auto`.
- `claude.parse_jsonl_messages(path, since, limit)` and
  `codex.parse_codex_jsonl(path, since, limit)` each read one session file and
  skip tool calls, meta entries, events and reasoning entries. They return
  `(messages, truncated)`, which holds the last `limit` messages in file order.
  An RFC 3339 `since` keeps only strictly newer messages, compared as
  instants. A `since` that cannot be parsed raises `PeekParseError`.
- `inbox.push` and `inbox.drain` form a file-based queue at
  `<home>/cowork-inbox/<target>/<encoded project>.jsonl`. The project is the
  nearest ancestor directory that holds `.git`; without one it is the
  directory itself. The limits live in `inbox_paths`:
  - A message may be at most 8 KiB of UTF-8 (`MAX_MESSAGE_SIZE`).
  - The inbox holds at most 16 messages (`MAX_PENDING_MESSAGES`).
  - The inbox holds at most 32 KiB (`MAX_TOTAL_INBOX_BYTES`).

  Limits are checked against the inbox as it would be after the append.
  `push` raises the following errors, and otherwise returns the inbox path
  and its new size:
  - `MessageTooLargeError`;
  - `InboxFullError`;
  - `SelfPushError`;
  - `InvalidCwdError`, for a relative path or one containing `..`.

  `drain` renames the file atomically, reads it and deletes it. Each message
  is therefore delivered at most once, and malformed lines are skipped.
  `inbox.format_plain` renders drained messages as text to put before a
  prompt. `inbox.format_codex_hook_json` wraps that text in a
  `UserPromptSubmit` hook JSON envelope.
- `inbox_paths.mempal_home()` returns `$HOME/.mempal`.
- `timefmt.parse_rfc3339` turns
  `YYYY-MM-DDTHH:MM:SS[.frac](Z|±HH:MM)` into UTC epoch seconds. It rejects
  impossible dates such as February 31. `timefmt.format_rfc3339` formats
  epoch seconds as a UTC string.

### `mempal.ingest`: conversation exports to transcripts

- `detect.detect_format(content)` returns a `detect.Format`. The possible
  values are `CLAUDE_JSONL`, `CODEX_JSONL`, `SLACK_JSON`, `CHATGPT_JSON`
  and `PLAIN_TEXT`.
- `normalize.normalize_content(content, fmt)` renders the content as a
  transcript in which user turns start with `> `. ChatGPT exports may be any
  of these:
  - a message list;
  - an object with `messages`;
  - an object with a `mapping` tree.

  Invalid JSON raises `NormalizeError`. An unknown shape raises
  `UnsupportedChatGptShapeError`.
- `chunk.chunk_text(text, window, overlap)` splits text into chunks of at
  most `window` characters that overlap. A chunk ends at whitespace when that
  whitespace lies past the middle of the window.
- `chunk.chunk_conversation(transcript)` starts a new chunk at every `> `
  user turn.

### `mempal.embed`: embeddings over HTTP

- `base.Embedder` is the abstract async interface. It has `embed(texts)` and
  the properties `dimensions` and `name`. Errors derive from `EmbedError`.
- `api.ApiEmbedder(endpoint, model=None, dimensions=384, client=None)` works
  with two kinds of endpoint:
  - An OpenAI-compatible embeddings endpoint. The default model is
    `text-embedding-3-small`.
  - An Ollama `/api/embeddings` endpoint. Texts are sent one at a time and
    the default model is `nomic-embed-text`.

  Every vector is checked against `dimensions`. You may pass an
  `httpx.AsyncClient`; otherwise a client is created for each call.

## Examples

```python
from pathlib import Path

from mempal.cowork.inbox import drain, format_plain, push
from mempal.cowork.inbox_paths import mempal_home
from mempal.cowork.models import Tool

project = Path.cwd()
push(mempal_home(), Tool.CLAUDE, Tool.CODEX, project,
     "switched auth to Clerk", "2026-04-15T00:00:00Z")

messages = drain(mempal_home(), Tool.CODEX, project)
print(format_plain(Tool.CLAUDE, messages))
```

```python
from pathlib import Path

from mempal.ingest.chunk import chunk_conversation
from mempal.ingest.detect import detect_format
from mempal.ingest.normalize import normalize_content

raw = Path("export.json").read_text()
transcript = normalize_content(raw, detect_format(raw))
chunks = chunk_conversation(transcript)
```

```python
import asyncio

from mempal.embed.api import ApiEmbedder

embedder = ApiEmbedder("http://localhost:11434/api/embeddings", dimensions=768)
vectors = asyncio.run(embedder.embed(["hello", "world"]))
```

## What it does not do

This package is a library only. It has no command-line program and no
server. It has no database, so ingested chunks and vectors are not stored,
and nothing is indexed or searched. The only embedder is the HTTP
`ApiEmbedder`; no local embedding model is bundled.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```