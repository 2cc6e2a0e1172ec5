"""The embedder interface and the errors embedders raise."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence


class EmbedError(Exception):
    """Base class for embedding failures."""


class HttpRequestError(EmbedError):
    def __init__(self, endpoint: str) -> None:
        super().__init__(f"failed to call embedding endpoint {endpoint}")
        self.endpoint = endpoint


class HttpStatusError(EmbedError):
    def __init__(self, endpoint: str) -> None:
        super().__init__(f"embedding endpoint returned error status {endpoint}")
        self.endpoint = endpoint


class DecodeResponseError(EmbedError):
    def __init__(self, endpoint: str) -> None:
        super().__init__(f"failed to decode embedding response from {endpoint}")
        self.endpoint = endpoint


class InvalidResponseError(EmbedError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"invalid embedding response: {detail}")
        self.detail = detail


class EmptyVectorsError(EmbedError):
    def __init__(self) -> None:
        super().__init__("embedding endpoint returned no vectors")


class InvalidDimensionsError(EmbedError):
    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            "embedding endpoint returned vectors with unexpected dimensions; "
            f"expected {expected}, got {actual}"
        )
        self.expected = expected
        self.actual = actual


class UnsupportedBackendError(EmbedError):
    def __init__(self, backend: str) -> None:
        super().__init__(f"unsupported embed backend: {backend}")
        self.backend = backend


class Embedder(ABC):
    """Turns texts into fixed-size vectors."""

    @abstractmethod
    async def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed every text, returning one vector per text in order."""

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Length of every vector this embedder produces."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short name of the embedding backend."""