#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Response Composer - builds the final AnswerResult for every terminal state.
"""

import logging
from typing import Optional

from ...domain.knowledge.errors import ErrorKind
from ...domain.knowledge.messages import chapter_not_loaded, no_relevant_content, with_header
from ...domain.knowledge.schemas import (
    AnswerResult, QueryOutcome, RetrievalMethod, RetrievalResult, TopicMismatch,
)
from ..llm.orchestrator import GenerationResult

logger = logging.getLogger(__name__)

CONFIDENCE_SEMANTIC = 0.9
CONFIDENCE_KEYWORD = 0.7
CONFIDENCE_NONE = 0.0


class ResponseComposer:
    """
    Confidence is 0 exactly when no passage was retrieved. Answers built
    from passages carry the textbook header whether or not a provider
    produced the text.
    """

    def compose(self, retrieval: RetrievalResult,
                generation: Optional[GenerationResult] = None) -> AnswerResult:
        if retrieval.is_empty:
            raise ValueError("compose() needs at least one retrieved passage")

        sources = tuple(hit.passage.reference for hit in retrieval.hits)
        if generation is not None and generation.succeeded:
            confidence = (
                CONFIDENCE_SEMANTIC if retrieval.method == RetrievalMethod.SEMANTIC
                else CONFIDENCE_KEYWORD
            )
            return AnswerResult(
                content=with_header(generation.content),
                sources=sources,
                confidence=confidence,
                outcome=QueryOutcome.COMPOSED,
                method=retrieval.method,
                provider=generation.provider,
            )

        # Generation skipped or every provider failed: answer with the passages themselves
        error_kind = ErrorKind.PROVIDER.value if generation is not None else None
        logger.info(f"Composing fallback answer from {len(retrieval.hits)} passages")
        return AnswerResult(
            content=with_header("\n\n".join(retrieval.texts)),
            sources=sources,
            confidence=CONFIDENCE_KEYWORD,
            outcome=QueryOutcome.COMPOSED_FALLBACK,
            method=retrieval.method,
            error_kind=error_kind,
        )

    def compose_empty(self, chapter_title: str, question: str) -> AnswerResult:
        return AnswerResult(
            content=no_relevant_content(chapter_title, question),
            sources=(),
            confidence=CONFIDENCE_NONE,
            outcome=QueryOutcome.COMPOSED_EMPTY,
        )

    def compose_missing_chapter(self, chapter_title: str) -> AnswerResult:
        return AnswerResult(
            content=chapter_not_loaded(chapter_title),
            sources=(),
            confidence=CONFIDENCE_NONE,
            outcome=QueryOutcome.COMPOSED_EMPTY,
            error_kind=ErrorKind.STORAGE.value,
        )

    def compose_rejected(self, message: str, mismatch: TopicMismatch) -> AnswerResult:
        return AnswerResult(
            content=message,
            sources=(),
            confidence=CONFIDENCE_NONE,
            outcome=QueryOutcome.REJECTED,
            error_kind=ErrorKind.RELEVANCE_MISMATCH.value,
            mismatch=mismatch,
        )
