"""Placeholder hash embedding and per-process embedding memoisation.

HashEmbeddingProvider is a bag-of-characters hash, not a semantic model.
It is deterministic and dependency-free, which makes it the default for
tests and local runs; production setups inject a real EmbeddingProvider.
"""

from __future__ import annotations

import math
import threading
from typing import Optional, Sequence

from .base import EmbeddingProvider
from .models import ToolSpec

DEFAULT_DIMENSION = 128


class HashEmbeddingProvider(EmbeddingProvider):
    """Hashes each character by (code point x position) into a fixed vector."""

    def __init__(self, dimension: int = DEFAULT_DIMENSION) -> None:
        self.dimension = dimension

    async def embed(self, text: str) -> Optional[Sequence[float]]:
        return self.embed_sync(text)

    def embed_sync(self, text: str) -> list[float]:
        words = text.lower().split()
        vector = [0.0] * self.dimension
        if not words:
            return vector

        weight = 1.0 / len(words)
        for word in words:
            for i, ch in enumerate(word):
                vector[(ord(ch) * (i + 1)) % self.dimension] += weight

        magnitude = math.sqrt(sum(v * v for v in vector))
        if magnitude > 0:
            vector = [v / magnitude for v in vector]
        return vector


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between a and b. 0.0 for mismatched or zero vectors."""
    if len(a) != len(b):
        return 0.0

    dot = norm_a = norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    denominator = math.sqrt(norm_a) * math.sqrt(norm_b)
    return dot / denominator if denominator > 0 else 0.0


def tool_to_text(tool: ToolSpec) -> str:
    """Text representation of a tool used for embedding."""
    return " ".join([
        tool.name,
        tool.description,
        " ".join(tool.capabilities),
        " ".join(tool.keywords),
        tool.category.value,
    ])


class EmbeddingCache:
    """Memoises provider output for tools and queries for the process lifetime.

    Tool vectors are keyed by id and ``updated_at`` so an edited tool is
    re-embedded. Lookups and stores take a lock; the provider call itself runs
    outside it, so two concurrent misses may both embed (last write wins).
    """

    def __init__(self, provider: EmbeddingProvider) -> None:
        self.provider = provider
        self._vectors: dict[str, Optional[Sequence[float]]] = {}
        self._lock = threading.Lock()

    async def tool_embedding(self, tool: ToolSpec) -> Optional[Sequence[float]]:
        key = f"tool:{tool.id}:{tool.updated_at.isoformat()}"
        return await self._get_or_embed(key, lambda: tool_to_text(tool))

    async def query_embedding(self, query: str) -> Optional[Sequence[float]]:
        return await self._get_or_embed(f"query:{query}", lambda: query)

    async def _get_or_embed(self, key, text_fn) -> Optional[Sequence[float]]:
        with self._lock:
            if key in self._vectors:
                return self._vectors[key]

        vector = await self.provider.embed(text_fn())
        # A None result is not memoised; the provider may recover later
        if vector is not None:
            with self._lock:
                self._vectors[key] = vector
        return vector

    def clear(self) -> None:
        with self._lock:
            self._vectors.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._vectors)
