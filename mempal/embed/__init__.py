"""Embedder interface, embedding errors and an HTTP endpoint embedder."""