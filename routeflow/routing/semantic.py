"""
Semantic Router for Routeflow.

Classifies an input embedding into one RouteLabel by comparing it against
reference utterance embeddings held per route.

Scoring:
    score(route) = max cosine similarity between the input vector and any
    of the route's utterance vectors

The highest score wins. Ties go to the route declared first in the routing
table. A best score below ``threshold`` yields the default route.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

import numpy as np

from routeflow.errors import ConfigurationError, InvalidVectorError
from routeflow.models import RouteLabel

if TYPE_CHECKING:
    from routeflow.config.routing import RoutingTable
    from routeflow.providers.embedding import EmbeddingProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteMatch:
    """Outcome of a routing decision, kept for logging."""

    route: RouteLabel
    score: float
    matched: RouteLabel | None
    fell_back: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "route": self.route.value,
            "score": round(self.score, 4),
            "matched": self.matched.value if self.matched else None,
            "fell_back": self.fell_back,
        }


def _as_unit_matrix(vectors: Sequence[Sequence[float]], dimension: int, what: str) -> np.ndarray:
    matrix = np.asarray(vectors, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[0] == 0:
        raise InvalidVectorError(f"{what}: expected a non-empty list of vectors")
    if matrix.shape[1] != dimension:
        raise InvalidVectorError(
            f"{what}: expected {dimension}-d vectors, got {matrix.shape[1]}-d",
            expected_dimension=dimension,
            actual_dimension=int(matrix.shape[1]),
        )
    if not np.all(np.isfinite(matrix)):
        raise InvalidVectorError(f"{what}: vectors contain non-finite values")

    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    if np.any(norms == 0):
        raise InvalidVectorError(f"{what}: zero-length vector has no direction")
    return matrix / norms


class SemanticRouter:
    """
    Pure classifier from embedding vectors to route labels.

    Example:
        router = await SemanticRouter.build(table, embedder)
        label = router.route(await embedder.embed("What's BTC at?"))
    """

    def __init__(
        self,
        references: dict[RouteLabel, Sequence[Sequence[float]]],
        *,
        dimension: int,
        default_route: RouteLabel = RouteLabel.BITCOIN,
        threshold: float = 0.0,
    ):
        """
        Args:
            references: Utterance vectors per route, in tie-break order
            dimension: Length every vector must have
            default_route: Returned when nothing scores above threshold
            threshold: Minimum cosine similarity for a match
        """
        if dimension <= 0:
            raise ConfigurationError(f"Router dimension must be positive, got {dimension}")

        self._dimension = dimension
        self._default_route = default_route
        self._threshold = threshold
        self._order: list[RouteLabel] = []
        self._matrices: dict[RouteLabel, np.ndarray] = {}

        for label, vectors in references.items():
            self._matrices[label] = _as_unit_matrix(
                vectors, dimension, f"Reference utterances for '{label.value}'"
            )
            self._order.append(label)

    @classmethod
    async def build(cls, table: RoutingTable, embedder: EmbeddingProvider) -> SemanticRouter:
        """Embed every utterance in ``table`` once and build a router."""
        utterances = table.utterances()
        texts = [text for label in table.labels for text in utterances.get(label, [])]
        vectors = await embedder.embed_batch(texts) if texts else []

        if len(vectors) != len(texts):
            raise InvalidVectorError(
                f"Embedder returned {len(vectors)} vectors for {len(texts)} utterances"
            )

        references: dict[RouteLabel, list[list[float]]] = {}
        offset = 0
        for label in table.labels:
            count = len(utterances.get(label, []))
            if count:
                references[label] = vectors[offset : offset + count]
                offset += count

        router = cls(
            references,
            dimension=embedder.dimension,
            default_route=table.default_route,
            threshold=table.similarity_threshold,
        )
        logger.info(
            f"[router] Built semantic router over {len(texts)} utterances "
            f"for {len(references)} routes (dim={embedder.dimension})"
        )
        return router

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def labels(self) -> list[RouteLabel]:
        return list(self._order)

    def scores(self, vector: Sequence[float]) -> dict[RouteLabel, float]:
        """Best cosine similarity per route, in tie-break order."""
        query = self._validate(vector)
        return {label: float(np.max(self._matrices[label] @ query)) for label in self._order}

    def match(self, vector: Sequence[float]) -> RouteMatch:
        """Classify ``vector`` and report how the decision was reached."""
        best_label: RouteLabel | None = None
        best_score = float("-inf")

        for label, score in self.scores(vector).items():
            if score > best_score:
                best_label, best_score = label, score

        if best_label is None or best_score < self._threshold:
            return RouteMatch(
                route=self._default_route,
                score=best_score,
                matched=best_label,
                fell_back=True,
            )
        return RouteMatch(route=best_label, score=best_score, matched=best_label, fell_back=False)

    def route(self, vector: Sequence[float]) -> RouteLabel:
        """
        Classify ``vector`` into a RouteLabel.

        Raises:
            InvalidVectorError: If the vector is empty, non-finite or has
                the wrong dimension
        """
        return self.match(vector).route

    def _validate(self, vector: Sequence[float]) -> np.ndarray:
        query = np.asarray(vector, dtype=np.float64)
        if query.ndim != 1 or query.size == 0:
            raise InvalidVectorError("Input vector must be a non-empty 1-d sequence")
        if query.size != self._dimension:
            raise InvalidVectorError(
                f"Input vector has {query.size} dimensions, expected {self._dimension}",
                expected_dimension=self._dimension,
                actual_dimension=int(query.size),
            )
        if not np.all(np.isfinite(query)):
            raise InvalidVectorError("Input vector contains non-finite values")

        norm = np.linalg.norm(query)
        if norm == 0:
            raise InvalidVectorError("Input vector has zero length")
        return query / norm

    def __repr__(self) -> str:
        return (
            f"SemanticRouter(routes={[label.value for label in self._order]}, "
            f"dimension={self._dimension}, threshold={self._threshold})"
        )


__all__ = ["RouteMatch", "SemanticRouter"]
