"""Project memory helpers for coding agents: cowork peek and inbox, ingest and embeddings."""

__version__ = "0.3.1"