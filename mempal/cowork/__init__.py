"""Cross-agent cowork: partner session peek, RFC 3339 helpers and a file-based inbox."""