#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tutor Service - application facing wrapper around the RAG pipeline.
"""

import logging
from functools import lru_cache
from typing import List, Optional, Sequence

from ..core.settings import AppSettings, get_settings
from ..domain.knowledge.catalog import find_chapter
from ..domain.knowledge.errors import StorageError
from ..domain.knowledge.schemas import AnswerResult, ChatTurn, KnowledgeChapter
from ..infrastructure.rag.pipeline import IngestionReport, RAGPipeline

logger = logging.getLogger(__name__)


class TutorService:
    def __init__(self, settings: Optional[AppSettings] = None,
                 pipeline: Optional[RAGPipeline] = None):
        self._settings = settings
        self._pipeline = pipeline

    @property
    def settings(self) -> AppSettings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def pipeline(self) -> RAGPipeline:
        """Built lazily on first use."""
        if self._pipeline is None:
            self._pipeline = RAGPipeline.from_settings(self.settings)
            logger.info("Tutor pipeline initialized")
        return self._pipeline

    def resolve_title(self, chapter_id: str, title: Optional[str] = None) -> str:
        if title:
            return title
        try:
            chapter = self.pipeline.store.get(chapter_id)
        except StorageError as e:
            logger.warning(f"Cannot read title of {chapter_id}: {e}")
            chapter = None
        if chapter is not None:
            return chapter.title
        entry = find_chapter(chapter_id)
        return entry.title if entry is not None else chapter_id

    def ask(self, question: str, chapter_id: str, chapter_title: Optional[str] = None,
            history: Sequence[ChatTurn] = ()) -> AnswerResult:
        title = self.resolve_title(chapter_id, chapter_title)
        return self.pipeline.ask(question, chapter_id, title, history)

    def ingest_text(self, chapter_id: str, title: str, text: str) -> IngestionReport:
        return self.pipeline.ingest_text(chapter_id, title, text)

    def ingest_document(self, chapter_id: str, title: Optional[str], data: bytes,
                        filename: str) -> IngestionReport:
        return self.pipeline.ingest_document(
            chapter_id, self.resolve_title(chapter_id, title), data, filename
        )

    def load_catalog(self, texts_dir: Optional[str] = None) -> List[IngestionReport]:
        return self.pipeline.load_catalog(texts_dir)

    def list_chapters(self) -> List[KnowledgeChapter]:
        chapters = []
        for chapter_id in self.pipeline.store.list():
            try:
                chapter = self.pipeline.store.get(chapter_id)
            except StorageError as e:
                logger.warning(f"Skipping unreadable chapter {chapter_id}: {e}")
                continue
            if chapter is not None:
                chapters.append(chapter)
        return chapters

    def get_chapter(self, chapter_id: str) -> Optional[KnowledgeChapter]:
        return self.pipeline.store.get(chapter_id)

    def delete_chapter(self, chapter_id: str) -> bool:
        return self.pipeline.delete_chapter(chapter_id)

    def status(self):
        return self.pipeline.status()


@lru_cache(maxsize=1)
def get_tutor_service() -> TutorService:
    return TutorService()
