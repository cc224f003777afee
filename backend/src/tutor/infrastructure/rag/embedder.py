#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Embedder - text vectors through a remote embedding API.

Providers implement ``embed(texts, input_type) -> list[vector]``. The
``Embedder`` wraps a provider with batching and degrades to zero vectors of
the configured dimension when the provider is missing or fails, so callers
fall back to keyword retrieval instead of erroring out.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import httpx
import numpy as np

from ...core.settings import EmbeddingSettings
from ...domain.knowledge.errors import ProviderError

logger = logging.getLogger(__name__)

INPUT_DOCUMENT = "search_document"
INPUT_QUERY = "search_query"


class EmbeddingProvider(ABC):
    """Remote embedding endpoint."""

    name = "embedding"

    def __init__(self, api_key: str, model: str, base_url: str, timeout: float = 30.0,
                 transport: Optional[httpx.BaseTransport] = None):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @abstractmethod
    def embed(self, texts: List[str], input_type: str = INPUT_DOCUMENT) -> List[List[float]]:
        """Return one vector per text, in order.

        Raises:
            ProviderError: transport failure, non-2xx status or malformed body
        """

    def _post(self, path: str, payload: dict) -> dict:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            with httpx.Client(timeout=httpx.Timeout(self.timeout), transport=self.transport) as client:
                response = client.post(f"{self.base_url}{path}", json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise ProviderError(f"Embedding request failed: {e}", self.name, e)

        if response.status_code != 200:
            raise ProviderError(
                f"Embedding API error ({response.status_code}): {response.text[:200]}", self.name
            )
        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise ProviderError(f"Invalid embedding response: {e}", self.name, e)
        if not isinstance(data, dict):
            raise ProviderError("Embedding response is not a JSON object", self.name)
        return data

    def _vectors(self, raw: Any, count: int) -> List[List[float]]:
        """Check that ``raw`` holds ``count`` lists of numbers."""
        if not isinstance(raw, list) or len(raw) != count:
            raise ProviderError(f"Expected {count} embeddings from the provider", self.name)
        for vector in raw:
            if not isinstance(vector, list) or not vector or not all(
                isinstance(x, (int, float)) and not isinstance(x, bool) for x in vector
            ):
                raise ProviderError("Embedding response holds a malformed vector", self.name)
        return raw


class CohereEmbeddingProvider(EmbeddingProvider):
    """Cohere ``/v1/embed``."""

    name = "cohere"

    def embed(self, texts: List[str], input_type: str = INPUT_DOCUMENT) -> List[List[float]]:
        data = self._post("/embed", {
            "texts": texts,
            "model": self.model,
            "input_type": input_type,
        })
        return self._vectors(data.get("embeddings"), len(texts))


class OpenAICompatibleEmbeddingProvider(EmbeddingProvider):
    """OpenAI-style ``/embeddings``; ``input_type`` is not part of this API."""

    name = "openai"

    def embed(self, texts: List[str], input_type: str = INPUT_DOCUMENT) -> List[List[float]]:
        data = self._post("/embeddings", {"input": texts, "model": self.model})
        items = data.get("data")
        if not isinstance(items, list) or not all(
            isinstance(item, dict) and "embedding" in item for item in items
        ):
            raise ProviderError("Embedding response has no usable 'data'", self.name)
        items = sorted(items, key=lambda item: item["index"] if isinstance(item.get("index"), int) else 0)
        return self._vectors([item["embedding"] for item in items], len(texts))


class Embedder:
    """Batching, fault-tolerant front of an ``EmbeddingProvider``."""

    def __init__(self, provider: Optional[EmbeddingProvider] = None, dimension: int = 1024,
                 batch_size: int = 32):
        self.provider = provider
        self.batch_size = batch_size
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def enabled(self) -> bool:
        return self.provider is not None

    def zero_vector(self) -> np.ndarray:
        return np.zeros(self._dimension, dtype=np.float32)

    def embed_single(self, text: str, input_type: str = INPUT_QUERY) -> np.ndarray:
        return self.embed_batch([text], input_type)[0]

    def embed_batch(self, texts: List[str], input_type: str = INPUT_DOCUMENT) -> List[np.ndarray]:
        if not texts:
            return []
        if self.provider is None:
            return [self.zero_vector() for _ in texts]

        vectors: List[np.ndarray] = []
        for i in range(0, len(texts), self.batch_size):
            batch = texts[i:i + self.batch_size]
            try:
                vectors.extend(self._to_arrays(self.provider.embed(batch, input_type), len(batch)))
            except ProviderError as e:
                logger.warning(f"Embedding batch {i // self.batch_size + 1} failed, using zero vectors: {e}")
                vectors.extend(self.zero_vector() for _ in batch)
        return vectors

    def _to_arrays(self, raw: Any, count: int) -> List[np.ndarray]:
        """Raises ProviderError unless ``raw`` is ``count`` vectors of the configured dimension."""
        try:
            arrays = [np.asarray(v, dtype=np.float32) for v in raw]
        except (TypeError, ValueError) as e:
            raise ProviderError(f"Unusable embedding vectors: {e}", self.provider.name, e)
        if len(arrays) != count or any(a.shape != (self._dimension,) for a in arrays):
            raise ProviderError(
                f"Expected {count} vectors of dimension {self._dimension}", self.provider.name
            )
        return arrays


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine of two vectors; 0.0 when either has zero length or sizes differ."""
    if a.shape != b.shape:
        return 0.0
    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


def create_embedder(settings: EmbeddingSettings,
                    transport: Optional[httpx.BaseTransport] = None) -> Embedder:
    """Build the embedder from settings; no key or disabled means zero vectors only."""
    provider: Optional[EmbeddingProvider] = None
    if settings.enabled and settings.api_key:
        provider_cls = {
            "cohere": CohereEmbeddingProvider,
            "openai": OpenAICompatibleEmbeddingProvider,
        }.get(settings.provider)
        if provider_cls is None:
            logger.warning(f"Unknown embedding provider '{settings.provider}', semantic search disabled")
        else:
            provider = provider_cls(
                api_key=settings.api_key,
                model=settings.model,
                base_url=settings.base_url,
                timeout=settings.timeout,
                transport=transport,
            )
    logger.info(
        f"Embedder: provider={settings.provider if provider else None}, "
        f"model={settings.model}, dim={settings.dimension}"
    )
    return Embedder(provider, dimension=settings.dimension, batch_size=settings.batch_size)
