#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
RAG Pipeline - chapter ingestion and question answering.

Query flow: topic guard -> chapter lookup -> semantic retrieval (keyword
fallback) -> generation fallback chain -> response composer.
Ingestion flow: loader -> section splitter -> chunker -> knowledge store.

The pipeline takes explicit collaborators and an explicit ``RAGConfig``;
``from_settings`` wires the defaults from ``AppSettings``.
"""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence

import numpy as np

from ...core.settings import AppSettings
from ...domain.knowledge.catalog import CATALOG, canned_content
from ...domain.knowledge.errors import IngestionError, RelevanceMismatch, StorageError
from ...domain.knowledge.schemas import (
    AnswerResult, ChatTurn, KnowledgeChapter, QueryRequest, RetrievalHit,
    RetrievalMethod, RetrievalResult, utcnow,
)
from ..llm.orchestrator import GenerationOrchestrator
from ..storage.knowledge_store import InMemoryKnowledgeStore, KnowledgeStore, create_knowledge_store
from .chunker import DocumentChunker, split_sections
from .composer import ResponseComposer
from .embedder import Embedder, INPUT_DOCUMENT, create_embedder
from .loader import MIN_EXTRACTED_CHARS, extract_text, find_chapter_file, read_document
from .prompt_builder import PromptBuilder
from .retrievers.retriever_vector import EmbeddingCache, VectorRetriever
from .topic_guard import TopicGuard, TopicRule

logger = logging.getLogger(__name__)


@dataclass
class RAGConfig:
    chunk_size: int = 1000
    min_chunk_length: int = 50
    keyword_max_results: int = 5
    semantic_top_k: int = 3
    similarity_threshold: float = 0.3
    history_turns: int = 6
    max_context_length: int = 6000
    embed_on_ingest: bool = False
    texts_dir: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "RAGConfig":
        rag = settings.rag
        return cls(
            chunk_size=rag.chunk_size,
            min_chunk_length=rag.min_chunk_length,
            keyword_max_results=rag.keyword_max_results,
            semantic_top_k=rag.semantic_top_k,
            similarity_threshold=rag.similarity_threshold,
            history_turns=rag.history_turns,
            embed_on_ingest=rag.embed_on_ingest,
            texts_dir=rag.texts_dir,
        )


@dataclass
class IngestionReport:
    chapter_id: str
    title: str
    sections: int
    passages: int
    used_fallback: bool
    message: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "chapter_id": self.chapter_id,
            "title": self.title,
            "sections": self.sections,
            "passages": self.passages,
            "used_fallback": self.used_fallback,
            "message": self.message,
        }


class RAGPipeline:
    """Chapter tutor pipeline."""

    def __init__(self,
                 config: Optional[RAGConfig] = None,
                 store: Optional[KnowledgeStore] = None,
                 embedder: Optional[Embedder] = None,
                 orchestrator: Optional[GenerationOrchestrator] = None,
                 topic_rules: Optional[Sequence[TopicRule]] = None,
                 embedding_cache: Optional[EmbeddingCache] = None):
        self.config = config or RAGConfig()
        self.store = store if store is not None else InMemoryKnowledgeStore()
        self.embedder = embedder or Embedder()
        self.orchestrator = orchestrator
        self.embedding_cache = embedding_cache if embedding_cache is not None else EmbeddingCache()

        self.chunker = DocumentChunker(self.config.chunk_size, self.config.min_chunk_length)
        self.topic_guard = TopicGuard(self.store, topic_rules)
        self.vector_retriever = VectorRetriever(
            self.embedder,
            cache=self.embedding_cache,
            top_k=self.config.semantic_top_k,
            similarity_threshold=self.config.similarity_threshold,
        )
        self.prompt_builder = PromptBuilder(
            max_context_length=self.config.max_context_length,
            history_turns=self.config.history_turns,
        )
        self.composer = ResponseComposer()

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "RAGPipeline":
        return cls(
            config=RAGConfig.from_settings(settings),
            store=create_knowledge_store(settings.rag),
            embedder=create_embedder(settings.embedding),
            orchestrator=GenerationOrchestrator.from_settings(settings),
        )

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def build_chapter(self, chapter_id: str, title: str, text: str) -> KnowledgeChapter:
        """Section-split and chunk ``text``; raises IngestionError when nothing usable remains."""
        text = text.strip()
        if len(text) < MIN_EXTRACTED_CHARS:
            raise IngestionError(f"Chapter {chapter_id} has insufficient content ({len(text)} chars)")
        sections = split_sections(text)
        passages = self.chunker.chunk_sections(sections)
        if not passages:
            raise IngestionError(f"Chapter {chapter_id} produced no passages")

        if self.config.embed_on_ingest and self.embedder.enabled:
            vectors = self.embedder.embed_batch([p.text for p in passages], INPUT_DOCUMENT)
            passages = [
                replace(p, embedding=tuple(float(x) for x in v)) if np.any(v) else p
                for p, v in zip(passages, vectors)
            ]

        return KnowledgeChapter(
            id=chapter_id,
            title=title,
            full_text=text,
            sections=tuple(sections),
            passages=tuple(passages),
            updated_at=utcnow(),
        )

    def ingest_text(self, chapter_id: str, title: str, text: str) -> IngestionReport:
        """Store a chapter from text; unusable text is replaced by the canned chapter content."""
        used_fallback = False
        try:
            chapter = self.build_chapter(chapter_id, title, text)
            message = f"Loaded {title}"
        except IngestionError as e:
            logger.warning(f"Ingestion of {chapter_id} failed, using canned content: {e}")
            chapter = self.build_chapter(chapter_id, title, canned_content(title))
            used_fallback = True
            message = f"Using fallback content for {title}"

        self.store.save(chapter)
        self.embedding_cache.invalidate(chapter_id)
        return IngestionReport(
            chapter_id=chapter_id,
            title=title,
            sections=len(chapter.sections),
            passages=len(chapter.passages),
            used_fallback=used_fallback,
            message=message,
        )

    def ingest_document(self, chapter_id: str, title: str, data: bytes,
                        filename: str = "") -> IngestionReport:
        try:
            text = extract_text(data, filename)
        except IngestionError as e:
            logger.warning(f"Extraction failed for {filename or chapter_id}: {e}")
            text = ""
        return self.ingest_text(chapter_id, title, text)

    def load_catalog(self, texts_dir: Optional[str] = None) -> List[IngestionReport]:
        """Load every catalog chapter from ``texts_dir``, canned content where a file is missing."""
        texts_dir = texts_dir or self.config.texts_dir
        reports = []
        for entry in CATALOG:
            text = ""
            path = find_chapter_file(texts_dir, entry)
            if path is not None:
                try:
                    text = read_document(path)
                except IngestionError as e:
                    logger.warning(f"Failed to load {path}: {e}")
            reports.append(self.ingest_text(entry.id, entry.title, text))
        loaded = sum(1 for r in reports if not r.used_fallback)
        logger.info(f"Catalog loaded: {loaded} from files, {len(reports) - loaded} fallback")
        return reports

    def delete_chapter(self, chapter_id: str) -> bool:
        self.embedding_cache.invalidate(chapter_id)
        return self.store.delete(chapter_id)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def retrieve(self, question: str, chapter: KnowledgeChapter) -> RetrievalResult:
        """Semantic hits when there are any, otherwise keyword hits."""
        semantic = self.vector_retriever.search(question, chapter)
        if semantic:
            return RetrievalResult(RetrievalMethod.SEMANTIC, tuple(semantic))

        passages = self.store.keyword_retriever.search(
            chapter.passages, question, self.config.keyword_max_results
        )
        return RetrievalResult(
            RetrievalMethod.KEYWORD, tuple(RetrievalHit(passage=p) for p in passages)
        )

    def ask(self, question: str, chapter_id: str, chapter_title: str,
            history: Optional[Sequence[ChatTurn]] = None,
            cancel_event: Optional[threading.Event] = None) -> AnswerResult:
        return self.answer(
            QueryRequest(
                question=question,
                chapter_id=chapter_id,
                chapter_title=chapter_title,
                history=tuple(history or ()),
            ),
            cancel_event,
        )

    def answer(self, request: QueryRequest,
               cancel_event: Optional[threading.Event] = None) -> AnswerResult:
        try:
            self.topic_guard.enforce(request.question, request.chapter_id, request.chapter_title)
        except RelevanceMismatch as e:
            return self.composer.compose_rejected(str(e), e.mismatch)

        try:
            chapter = self.store.require(request.chapter_id)
        except StorageError as e:
            logger.warning(f"Question for unavailable chapter: {e}")
            return self.composer.compose_missing_chapter(request.chapter_title)

        retrieval = self.retrieve(request.question, chapter)
        if retrieval.is_empty:
            return self.composer.compose_empty(request.chapter_title, request.question)

        generation = None
        if self.orchestrator is not None and self.orchestrator.configured:
            prompt = self.prompt_builder.build(
                request.question, request.chapter_title, retrieval.texts, request.history
            )
            generation = self.orchestrator.generate(prompt.messages, cancel_event)
            logger.info(
                f"Generation for {request.chapter_id}: succeeded={generation.succeeded}, "
                f"provider={generation.provider}, attempts={len(generation.attempts)}"
            )
        return self.composer.compose(retrieval, generation)

    def status(self) -> Dict[str, object]:
        return {
            "chapters": self.store.list(),
            "embedding": {
                "enabled": self.embedder.enabled,
                "dimension": self.embedder.dimension,
                "cache": self.embedding_cache.stats(),
            },
            "providers": self.orchestrator.pool.stats() if self.orchestrator is not None else {},
        }
