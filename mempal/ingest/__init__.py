"""Conversation format detection, normalisation to transcripts, and chunking."""