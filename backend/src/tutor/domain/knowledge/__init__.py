#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from .schemas import (
    AnswerResult,
    ChatTurn,
    KnowledgeChapter,
    Passage,
    QueryOutcome,
    QueryRequest,
    RetrievalHit,
    RetrievalMethod,
    RetrievalResult,
    Section,
    TopicMismatch,
)
from .errors import (
    ErrorKind,
    IngestionError,
    ProviderError,
    RelevanceMismatch,
    StorageError,
    TutorError,
)

__all__ = [
    "AnswerResult",
    "ChatTurn",
    "KnowledgeChapter",
    "Passage",
    "QueryOutcome",
    "QueryRequest",
    "RetrievalHit",
    "RetrievalMethod",
    "RetrievalResult",
    "Section",
    "TopicMismatch",
    "ErrorKind",
    "IngestionError",
    "ProviderError",
    "RelevanceMismatch",
    "StorageError",
    "TutorError",
]
