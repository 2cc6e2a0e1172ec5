"""Embedder backed by an OpenAI-compatible or Ollama-compatible HTTP endpoint."""

from __future__ import annotations

from array import array
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any

import httpx

from mempal.embed.base import (
    DecodeResponseError,
    Embedder,
    EmptyVectorsError,
    HttpRequestError,
    HttpStatusError,
    InvalidDimensionsError,
    InvalidResponseError,
)

DEFAULT_OPENAI_MODEL = "text-embedding-3-small"
DEFAULT_OLLAMA_MODEL = "nomic-embed-text"


def is_ollama_embeddings_endpoint(endpoint: str) -> bool:
    """Whether ``endpoint`` is an Ollama ``/api/embeddings`` URL."""
    return endpoint.rstrip("/").endswith("/api/embeddings")


def validate_vectors(vectors: Sequence[Sequence[float]], expected_dimensions: int) -> None:
    """Raise unless there is at least one vector and all have the expected length."""
    if not vectors:
        raise EmptyVectorsError()
    for vector in vectors:
        if len(vector) != expected_dimensions:
            raise InvalidDimensionsError(expected_dimensions, len(vector))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_f32(values: Sequence[float]) -> list[float]:
    return array("f", values).tolist()


class ApiEmbedder(Embedder):
    """Embeds texts by calling a remote embeddings endpoint."""

    def __init__(
        self,
        endpoint: str,
        model: str | None = None,
        dimensions: int = 384,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._model = model
        self._dimensions = dimensions
        self._client = client

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def model(self) -> str | None:
        return self._model

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def name(self) -> str:
        return "api"

    async def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed ``texts``; an empty input makes no request."""
        texts = list(texts)
        if not texts:
            return []

        async with self._session() as client:
            if is_ollama_embeddings_endpoint(self._endpoint):
                vectors = [await self._embed_ollama_one(client, text) for text in texts]
            else:
                vectors = await self._embed_openai(client, texts)

        validate_vectors(vectors, self._dimensions)
        return vectors

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
        else:
            async with httpx.AsyncClient(timeout=None) as client:
                yield client

    async def _post(self, client: httpx.AsyncClient, payload: dict[str, Any]) -> Any:
        try:
            response = await client.post(self._endpoint, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise HttpRequestError(self._endpoint) from exc
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise HttpStatusError(self._endpoint) from exc
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeResponseError(self._endpoint) from exc

    async def _embed_openai(
        self, client: httpx.AsyncClient, texts: list[str]
    ) -> list[list[float]]:
        body = await self._post(
            client, {"model": self._model or DEFAULT_OPENAI_MODEL, "input": texts}
        )
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, list):
            raise DecodeResponseError(self._endpoint)

        vectors = []
        for item in data:
            embedding = item.get("embedding") if isinstance(item, dict) else None
            if not isinstance(embedding, list) or not all(map(_is_number, embedding)):
                raise DecodeResponseError(self._endpoint)
            vectors.append(_to_f32(embedding))
        return vectors

    async def _embed_ollama_one(self, client: httpx.AsyncClient, text: str) -> list[float]:
        body = await self._post(
            client, {"model": self._model or DEFAULT_OLLAMA_MODEL, "prompt": text}
        )
        embedding = body.get("embedding") if isinstance(body, dict) else None
        if not isinstance(embedding, list):
            raise InvalidResponseError("embedding response missing embedding array")
        if not all(map(_is_number, embedding)):
            raise InvalidResponseError("embedding element was not numeric")
        return _to_f32(embedding)