#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Knowledge Store - one record per chapter id.

``InMemoryKnowledgeStore`` keeps records in a dict; ``JsonKnowledgeStore``
writes ``<base_dir>/<chapter_id>.json`` per chapter. Writes for the same id
are serialized by a per-chapter lock; reads never block on other chapters.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ...core.settings import RAGSettings
from ...domain.knowledge.errors import StorageError
from ...domain.knowledge.schemas import KnowledgeChapter, Passage
from ..rag.retrievers.retriever_keyword import KeywordRetriever

logger = logging.getLogger(__name__)

_CHAPTER_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def validate_chapter_id(chapter_id: str) -> str:
    if not chapter_id or not _CHAPTER_ID_RE.match(chapter_id) or ".." in chapter_id:
        raise StorageError(f"Invalid chapter id: {chapter_id!r}", chapter_id)
    return chapter_id


class KnowledgeStore(ABC):
    def __init__(self, keyword_retriever: Optional[KeywordRetriever] = None):
        self.keyword_retriever = keyword_retriever or KeywordRetriever()
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def chapter_lock(self, chapter_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(chapter_id)
            if lock is None:
                lock = self._locks[chapter_id] = threading.Lock()
            return lock

    def save(self, chapter: KnowledgeChapter) -> None:
        """Idempotent upsert; the previous record for the id is replaced wholesale."""
        validate_chapter_id(chapter.id)
        with self.chapter_lock(chapter.id):
            self._write(chapter)
        logger.info(f"Saved chapter {chapter.id}: {len(chapter.passages)} passages")

    def delete(self, chapter_id: str) -> bool:
        validate_chapter_id(chapter_id)
        with self.chapter_lock(chapter_id):
            removed = self._remove(chapter_id)
        if removed:
            logger.info(f"Deleted chapter {chapter_id}")
        return removed

    def require(self, chapter_id: str) -> KnowledgeChapter:
        chapter = self.get(chapter_id)
        if chapter is None:
            raise StorageError(f"Chapter not loaded: {chapter_id}", chapter_id)
        return chapter

    def search(self, chapter_id: str, query: str, max_results: Optional[int] = None) -> List[Passage]:
        """Keyword search in one chapter; a missing chapter yields no passages."""
        chapter = self.get(chapter_id)
        if chapter is None:
            return []
        return self.keyword_retriever.search(chapter.passages, query, max_results)

    def __contains__(self, chapter_id: str) -> bool:
        return self.get(chapter_id) is not None

    @abstractmethod
    def get(self, chapter_id: str) -> Optional[KnowledgeChapter]:
        ...

    @abstractmethod
    def list(self) -> List[str]:
        ...

    @abstractmethod
    def _write(self, chapter: KnowledgeChapter) -> None:
        ...

    @abstractmethod
    def _remove(self, chapter_id: str) -> bool:
        ...


class InMemoryKnowledgeStore(KnowledgeStore):
    def __init__(self, keyword_retriever: Optional[KeywordRetriever] = None):
        super().__init__(keyword_retriever)
        self._records: Dict[str, KnowledgeChapter] = {}

    def get(self, chapter_id: str) -> Optional[KnowledgeChapter]:
        return self._records.get(chapter_id)

    def list(self) -> List[str]:
        return sorted(self._records.keys())

    def _write(self, chapter: KnowledgeChapter) -> None:
        self._records[chapter.id] = chapter

    def _remove(self, chapter_id: str) -> bool:
        return self._records.pop(chapter_id, None) is not None


class JsonKnowledgeStore(KnowledgeStore):
    """
    File-backed store. Records are loaded lazily and memoized; a write goes
    to a temp file in the same directory and is moved into place with
    ``os.replace``, so readers never see a half-written record.
    """

    def __init__(self, base_dir: str, keyword_retriever: Optional[KeywordRetriever] = None):
        super().__init__(keyword_retriever)
        self.base_dir = base_dir
        self._loaded: Dict[str, KnowledgeChapter] = {}
        os.makedirs(base_dir, exist_ok=True)

    def _path(self, chapter_id: str) -> str:
        return os.path.join(self.base_dir, f"{validate_chapter_id(chapter_id)}.json")

    def get(self, chapter_id: str) -> Optional[KnowledgeChapter]:
        cached = self._loaded.get(chapter_id)
        if cached is not None:
            return cached
        try:
            path = self._path(chapter_id)
        except StorageError:
            return None
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                chapter = KnowledgeChapter.from_record(json.load(f))
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise StorageError(f"Unreadable chapter record {path}: {e}", chapter_id, e)
        self._loaded[chapter_id] = chapter
        return chapter

    def list(self) -> List[str]:
        if not os.path.isdir(self.base_dir):
            return []
        return sorted(
            name[:-len(".json")]
            for name in os.listdir(self.base_dir)
            if name.endswith(".json")
        )

    def _write(self, chapter: KnowledgeChapter) -> None:
        path = self._path(chapter.id)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{chapter.id}.", suffix=".tmp", dir=self.base_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(chapter.to_record(), f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StorageError(f"Failed to write chapter {chapter.id}: {e}", chapter.id, e)
        self._loaded[chapter.id] = chapter

    def _remove(self, chapter_id: str) -> bool:
        self._loaded.pop(chapter_id, None)
        path = self._path(chapter_id)
        if not os.path.exists(path):
            return False
        os.remove(path)
        return True


def create_knowledge_store(settings: RAGSettings) -> KnowledgeStore:
    retriever = KeywordRetriever(max_results=settings.keyword_max_results)
    if settings.store_backend == "memory":
        return InMemoryKnowledgeStore(retriever)
    return JsonKnowledgeStore(settings.base_dir, retriever)
