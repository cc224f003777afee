from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ChatTurnIn(BaseModel):
    role: str = Field(..., pattern="^(user|assistant)$", description="Who said it")
    content: str


class AskRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=2000, description="Student question")
    chapter_id: str = Field(..., min_length=1, description="Chapter in context")
    chapter_title: Optional[str] = Field(None, description="Display title; defaults to the stored title")
    history: List[ChatTurnIn] = Field(default_factory=list, description="Prior turns, oldest first")


class TopicMismatchOut(BaseModel):
    target_chapter_id: str
    target_chapter_title: str
    matched_keyword: str
    current_section_titles: List[str] = Field(default_factory=list)


class AnswerOut(BaseModel):
    content: str
    sources: List[str]
    confidence: float
    timestamp: str
    outcome: str
    method: Optional[str] = None
    provider: Optional[str] = None
    error_kind: Optional[str] = None
    mismatch: Optional[TopicMismatchOut] = None


class ChapterTextIn(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = Field("", description="Chapter text; markdown '##' headings start sections")


class IngestionOut(BaseModel):
    chapter_id: str
    title: str
    sections: int
    passages: int
    used_fallback: bool
    message: str


class CatalogLoadIn(BaseModel):
    texts_dir: Optional[str] = Field(None, description="Directory holding <chapter>.txt/.md/.pdf files")


class PassageOut(BaseModel):
    index: int
    text: str
    section_title: str


class ChapterSummary(BaseModel):
    id: str
    title: str
    sections: List[str]
    passages: int
    updated_at: str


class ChapterDetail(ChapterSummary):
    passage_list: List[PassageOut] = Field(default_factory=list)


class StatusOut(BaseModel):
    chapters: List[str]
    embedding: Dict[str, Any]
    providers: Dict[str, Any]
    settings: Dict[str, Any]
