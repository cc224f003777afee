#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Vector Retriever - cosine similarity between a question and chapter passages.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from ....domain.knowledge.schemas import KnowledgeChapter, RetrievalHit
from ..embedder import Embedder, INPUT_DOCUMENT, INPUT_QUERY, cosine_similarity

logger = logging.getLogger(__name__)


@dataclass
class _CacheEntry:
    updated_at: datetime
    vectors: List[np.ndarray]


class EmbeddingCache:
    """
    Passage vectors per chapter, valid while the chapter's ``updated_at``
    is unchanged. Shared by concurrent queries.
    """

    def __init__(self):
        self._entries: Dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, chapter_id: str, updated_at: datetime) -> Optional[List[np.ndarray]]:
        with self._lock:
            entry = self._entries.get(chapter_id)
            if entry is not None and entry.updated_at == updated_at:
                self._hits += 1
                return entry.vectors
            self._misses += 1
            return None

    def put(self, chapter_id: str, updated_at: datetime, vectors: List[np.ndarray]) -> None:
        with self._lock:
            self._entries[chapter_id] = _CacheEntry(updated_at, vectors)

    def invalidate(self, chapter_id: str) -> None:
        with self._lock:
            self._entries.pop(chapter_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "chapters": len(self._entries),
                "vectors": sum(len(e.vectors) for e in self._entries.values()),
                "hits": self._hits,
                "misses": self._misses,
            }


class VectorRetriever:
    """Semantic passage ranking for a single chapter."""

    def __init__(self, embedder: Embedder, cache: Optional[EmbeddingCache] = None,
                 top_k: int = 3, similarity_threshold: float = 0.3):
        """
        Args:
            embedder: embedding front, zero vectors on provider failure
            cache: passage vector cache; a private one is created when omitted
            top_k: maximum number of hits
            similarity_threshold: hits must score strictly above this
        """
        self.embedder = embedder
        self.cache = cache if cache is not None else EmbeddingCache()
        self.top_k = top_k
        self.similarity_threshold = similarity_threshold

    def passage_vectors(self, chapter: KnowledgeChapter) -> List[np.ndarray]:
        cached = self.cache.get(chapter.id, chapter.updated_at)
        if cached is not None:
            return cached

        vectors: List[Optional[np.ndarray]] = [
            np.asarray(p.embedding, dtype=np.float32) if p.embedding is not None else None
            for p in chapter.passages
        ]
        missing = [i for i, v in enumerate(vectors) if v is None]
        if missing:
            embedded = self.embedder.embed_batch(
                [chapter.passages[i].text for i in missing], INPUT_DOCUMENT
            )
            for i, vector in zip(missing, embedded):
                vectors[i] = vector

        result = [v for v in vectors if v is not None]
        # Vectors from a failed provider are zeros; keep them out of the cache
        if all(np.any(v) for v in result):
            self.cache.put(chapter.id, chapter.updated_at, result)
        return result

    def search(self, query: str, chapter: KnowledgeChapter) -> List[RetrievalHit]:
        """
        Rank the chapter's passages by cosine similarity to the query.

        Returns an empty list when the embedder is unavailable or the query
        vector is all zeros.
        """
        if not self.embedder.enabled or not chapter.passages:
            return []

        query_vector = self.embedder.embed_single(query, INPUT_QUERY)
        if not np.any(query_vector):
            logger.info("Query embedding unavailable, skipping semantic search")
            return []

        scored: List[Tuple[float, int]] = []
        for index, vector in enumerate(self.passage_vectors(chapter)):
            score = cosine_similarity(query_vector, vector)
            if score > self.similarity_threshold:
                scored.append((score, index))

        scored.sort(key=lambda item: (-item[0], item[1]))
        hits = [
            RetrievalHit(passage=chapter.passages[index], score=score)
            for score, index in scored[:self.top_k]
        ]
        logger.debug(f"Vector search in {chapter.id}: {len(scored)} above threshold, returning {len(hits)}")
        return hits
