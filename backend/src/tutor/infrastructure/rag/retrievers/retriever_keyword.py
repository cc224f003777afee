#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Keyword Retriever - lexical matching over a chapter's passages.

Two tiers, no frequency scoring: passages containing the whole query phrase
come first, then passages containing any query term longer than two
characters. Each tier keeps document order; duplicate texts are dropped.
"""

import logging
import re
from typing import List, Optional, Sequence

from ....domain.knowledge.schemas import Passage

logger = logging.getLogger(__name__)

_TERM_RE = re.compile(r"\s+")
_TERM_PUNCTUATION = "?.!,;:\"'()"


def query_terms(query: str) -> List[str]:
    """Lower-cased whitespace terms with surrounding punctuation removed; two characters or less are dropped."""
    terms = (term.strip(_TERM_PUNCTUATION) for term in _TERM_RE.split(query.lower().strip()))
    return [term for term in terms if len(term) > 2]


class KeywordRetriever:
    """Lexical passage matcher."""

    def __init__(self, max_results: Optional[int] = 5):
        self.max_results = max_results

    def search(self, passages: Sequence[Passage], query: str,
               max_results: Optional[int] = None) -> List[Passage]:
        limit = max_results if max_results is not None else self.max_results
        phrase = " ".join(query.lower().split())
        if not phrase:
            return []
        terms = query_terms(phrase)

        phrase_hits: List[Passage] = []
        term_hits: List[Passage] = []
        for passage in passages:
            text = passage.text.lower()
            title = passage.section_title.lower()
            if phrase in text or phrase in title:
                phrase_hits.append(passage)
            elif any(term in text or term in title for term in terms):
                term_hits.append(passage)

        results: List[Passage] = []
        seen = set()
        for passage in phrase_hits + term_hits:
            if passage.text in seen:
                continue
            seen.add(passage.text)
            results.append(passage)
            if limit is not None and len(results) >= limit:
                break

        logger.debug(f"Keyword search '{query[:50]}': {len(phrase_hits)} phrase, {len(term_hits)} term hits")
        return results
