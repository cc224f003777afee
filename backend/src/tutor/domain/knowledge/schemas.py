#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Knowledge domain types shared by ingestion, retrieval and answering.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Section:
    title: str
    content: str


@dataclass(frozen=True)
class Passage:
    """A bounded unit of chapter text, the atomic unit of retrieval."""
    index: int
    text: str
    section_title: str = "Introduction"
    embedding: Optional[Tuple[float, ...]] = None

    @property
    def reference(self) -> str:
        return f"{self.section_title} (passage {self.index + 1})"


@dataclass(frozen=True)
class KnowledgeChapter:
    id: str
    title: str
    full_text: str
    sections: Tuple[Section, ...] = ()
    passages: Tuple[Passage, ...] = ()
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def section_titles(self) -> List[str]:
        return [s.title for s in self.sections]

    def to_record(self) -> Dict[str, Any]:
        """Persisted record layout, keyed by chapter id."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.full_text,
            "sections": [{"title": s.title, "content": s.content} for s in self.sections],
            "passages": [
                {
                    "index": p.index,
                    "text": p.text,
                    "section_title": p.section_title,
                    "embedding": list(p.embedding) if p.embedding is not None else None,
                }
                for p in self.passages
            ],
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "KnowledgeChapter":
        passages = tuple(
            Passage(
                index=p.get("index", i),
                text=p["text"],
                section_title=p.get("section_title") or "Introduction",
                embedding=tuple(p["embedding"]) if p.get("embedding") else None,
            )
            for i, p in enumerate(record.get("passages") or [])
        )
        sections = tuple(
            Section(title=s.get("title", ""), content=s.get("content", ""))
            for s in record.get("sections") or []
        )
        updated_raw = record.get("updatedAt")
        updated_at = datetime.fromisoformat(updated_raw) if updated_raw else utcnow()
        return cls(
            id=record["id"],
            title=record.get("title", record["id"]),
            full_text=record.get("content", ""),
            sections=sections,
            passages=passages,
            updated_at=updated_at,
        )


@dataclass(frozen=True)
class ChatTurn:
    role: str  # user, assistant
    content: str


@dataclass(frozen=True)
class QueryRequest:
    question: str
    chapter_id: str
    chapter_title: str
    history: Tuple[ChatTurn, ...] = ()


class RetrievalMethod(str, Enum):
    KEYWORD = "keyword"
    SEMANTIC = "semantic"


@dataclass(frozen=True)
class RetrievalHit:
    passage: Passage
    score: Optional[float] = None


@dataclass(frozen=True)
class RetrievalResult:
    method: RetrievalMethod
    hits: Tuple[RetrievalHit, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.hits

    @property
    def texts(self) -> List[str]:
        return [h.passage.text for h in self.hits]


class QueryOutcome(str, Enum):
    """Terminal states of a single query."""
    REJECTED = "rejected"
    COMPOSED_EMPTY = "composed_empty"
    COMPOSED = "composed"
    COMPOSED_FALLBACK = "composed_fallback"


@dataclass(frozen=True)
class TopicMismatch:
    target_chapter_id: str
    target_chapter_title: str
    matched_keyword: str
    current_section_titles: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AnswerResult:
    content: str
    sources: Tuple[str, ...]
    confidence: float
    outcome: QueryOutcome
    timestamp: datetime = field(default_factory=utcnow)
    method: Optional[RetrievalMethod] = None
    provider: Optional[str] = None
    error_kind: Optional[str] = None
    mismatch: Optional[TopicMismatch] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "sources": list(self.sources),
            "confidence": self.confidence,
            "timestamp": self.timestamp.isoformat(),
            "outcome": self.outcome.value,
            "method": self.method.value if self.method else None,
            "provider": self.provider,
            "error_kind": self.error_kind,
            "mismatch": {
                "target_chapter_id": self.mismatch.target_chapter_id,
                "target_chapter_title": self.mismatch.target_chapter_title,
                "matched_keyword": self.mismatch.matched_keyword,
                "current_section_titles": list(self.mismatch.current_section_titles),
            } if self.mismatch else None,
        }
