#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Retrieval layer of the chapter tutor.

Leaf components only; import ``pipeline`` and ``topic_guard`` from their
modules (they depend on the storage package, which depends on this one).
"""

from .chunker import DocumentChunker, split_sections, split_sentences
from .embedder import (
    CohereEmbeddingProvider,
    Embedder,
    EmbeddingProvider,
    OpenAICompatibleEmbeddingProvider,
    cosine_similarity,
    create_embedder,
)
from .prompt_builder import PromptBuilder, PromptContext

__all__ = [
    "DocumentChunker",
    "split_sections",
    "split_sentences",
    "CohereEmbeddingProvider",
    "Embedder",
    "EmbeddingProvider",
    "OpenAICompatibleEmbeddingProvider",
    "cosine_similarity",
    "create_embedder",
    "PromptBuilder",
    "PromptContext",
]
