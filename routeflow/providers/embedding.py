"""
Embedding Provider Protocol for Routeflow.

Converts text into fixed-length vectors for the semantic router.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from routeflow.errors import InvalidVectorError

if TYPE_CHECKING:
    from routeflow.integrations.mistral import MistralClient

logger = logging.getLogger(__name__)


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Protocol for embedding providers.

    Implementations must provide:
    - name: Provider identifier
    - dimension: Length of every vector returned
    - embed(): One text to one vector
    - embed_batch(): Many texts to many vectors (used at router build time)
    """

    @property
    def name(self) -> str:
        ...

    @property
    def dimension(self) -> int:
        ...

    async def embed(self, text: str) -> list[float]:
        ...

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        ...


class MistralEmbeddingProvider:
    """
    Embeddings via Mistral's ``mistral-embed`` model (1024 dimensions).

    Transient failures are retried by the underlying MistralClient and
    surface as GatewayTimeoutError / GatewayUnavailableError.
    """

    def __init__(
        self,
        client: MistralClient,
        *,
        model: str = "mistral-embed",
        dimension: int = 1024,
        batch_size: int = 32,
    ):
        self._client = client
        self._model = model
        self._dimension = dimension
        self._batch_size = batch_size

    @property
    def name(self) -> str:
        return "mistral"

    @property
    def dimension(self) -> int:
        return self._dimension

    async def embed(self, text: str) -> list[float]:
        vectors = await self.embed_batch([text])
        return vectors[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        vectors: list[list[float]] = []
        for start in range(0, len(texts), self._batch_size):
            chunk = texts[start : start + self._batch_size]
            vectors.extend(await self._client.embed(chunk, model=self._model))

        for vector in vectors:
            if len(vector) != self._dimension:
                raise InvalidVectorError(
                    f"Provider '{self.name}' returned a {len(vector)}-d vector, "
                    f"expected {self._dimension}",
                    expected_dimension=self._dimension,
                    actual_dimension=len(vector),
                )

        logger.debug(f"[embedding] Embedded {len(texts)} text(s) with {self._model}")
        return vectors

    def __repr__(self) -> str:
        return f"MistralEmbeddingProvider(model='{self._model}', dimension={self._dimension})"


__all__ = ["EmbeddingProvider", "MistralEmbeddingProvider"]
