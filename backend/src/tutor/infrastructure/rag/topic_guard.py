#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Topic Guard - rejects questions that clearly belong to another loaded chapter.

Rules are checked in declaration order before any retrieval happens. A rule
matches when its keyword occurs as a whole word (plural ``s``/``es``
allowed) or when the question follows one of the usual question templates
around the keyword.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Sequence, Tuple

from ...domain.knowledge.errors import RelevanceMismatch, StorageError
from ...domain.knowledge.messages import off_topic
from ...domain.knowledge.schemas import KnowledgeChapter, TopicMismatch
from ..storage.knowledge_store import KnowledgeStore

logger = logging.getLogger(__name__)

_TEMPLATES = (
    r"what (?:is|are) {kw}",
    r"explain {kw}",
    r"define {kw}",
    r"tell me about {kw}",
    r"how does {kw} work",
    r"how do {kw} work",
    r"meaning of {kw}",
)
_ARTICLE = r"(?:(?:a|an|the)\s+)?"
_PLURAL = r"(?:s|es)?"


@dataclass(frozen=True)
class TopicRule:
    keyword: str
    target_chapter: str
    _patterns: Tuple[Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        kw = re.escape(self.keyword.lower()).replace(r"\ ", r"\s+")
        word = rf"\b{kw}{_PLURAL}\b"
        templates = [
            r"\b" + t.format(kw=_ARTICLE + kw + _PLURAL) + r"\b" for t in _TEMPLATES
        ]
        object.__setattr__(
            self, "_patterns", tuple(re.compile(p) for p in [word] + templates)
        )

    def matches(self, question: str) -> bool:
        return any(p.search(question) for p in self._patterns)


DEFAULT_TOPIC_RULES: List[TopicRule] = [
    TopicRule("friction", "friction"),
    TopicRule("lubrication", "friction"),
    TopicRule("ball bearing", "friction"),
    TopicRule("pressure", "force-and-pressure"),
    TopicRule("pascal", "force-and-pressure"),
    TopicRule("voltage", "electric-current"),
    TopicRule("electric current", "electric-current"),
    TopicRule("ohm's law", "electric-current"),
    TopicRule("electrolysis", "electric-current"),
    TopicRule("heating effect", "electric-current"),
    TopicRule("velocity", "motion"),
    TopicRule("displacement", "motion"),
    TopicRule("equations of motion", "motion"),
    TopicRule("newton's law", "force-and-laws"),
    TopicRule("inertia", "force-and-laws"),
    TopicRule("momentum", "force-and-laws"),
    TopicRule("gravitation", "gravitation"),
    TopicRule("gravity", "gravitation"),
    TopicRule("free fall", "gravitation"),
    TopicRule("reflection", "light-reflection"),
    TopicRule("refraction", "light-reflection"),
    TopicRule("snell's law", "light-reflection"),
    TopicRule("mirror", "light-reflection"),
    TopicRule("lens", "light-reflection"),
    TopicRule("electric charge", "electricity"),
    TopicRule("coulomb's law", "electricity"),
    TopicRule("electric field", "electricity"),
    TopicRule("electric potential", "electricity"),
    TopicRule("capacitor", "electricity"),
    TopicRule("magnetic field", "magnetic-effects"),
    TopicRule("solenoid", "magnetic-effects"),
    TopicRule("electromagnetic induction", "magnetic-effects"),
    TopicRule("electromagnet", "magnetic-effects"),
    TopicRule("kinetic energy", "work-and-energy"),
    TopicRule("potential energy", "work-and-energy"),
    TopicRule("work-energy theorem", "work-and-energy"),
    TopicRule("conservation of energy", "work-and-energy"),
]


class TopicGuard:
    def __init__(self, store: KnowledgeStore, rules: Optional[Sequence[TopicRule]] = None):
        self.store = store
        self.rules = list(rules) if rules is not None else list(DEFAULT_TOPIC_RULES)

    def check(self, question: str, current_chapter_id: str) -> Optional[TopicMismatch]:
        """
        Return the first mismatch, or None when the question may proceed.

        Rules that point at the current chapter or at a chapter that is not
        loaded are skipped; scanning continues with the next rule.
        """
        normalized = " ".join(question.lower().split())
        for rule in self.rules:
            if rule.target_chapter == current_chapter_id or not rule.matches(normalized):
                continue
            target = self._loaded(rule.target_chapter)
            if target is None:
                continue
            current = self._loaded(current_chapter_id)
            section_titles = tuple(current.section_titles) if current is not None else ()
            logger.info(
                f"Topic guard: '{rule.keyword}' points to {rule.target_chapter}, "
                f"not {current_chapter_id}"
            )
            return TopicMismatch(
                target_chapter_id=target.id,
                target_chapter_title=target.title,
                matched_keyword=rule.keyword,
                current_section_titles=section_titles,
            )
        return None

    def _loaded(self, chapter_id: str) -> Optional[KnowledgeChapter]:
        """Stored chapter, or None when it is missing or its record is unreadable."""
        try:
            return self.store.get(chapter_id)
        except StorageError as e:
            logger.warning(f"Topic guard treats {chapter_id} as not loaded: {e}")
            return None

    def enforce(self, question: str, current_chapter_id: str, current_chapter_title: str) -> None:
        """Raise ``RelevanceMismatch`` carrying the user-facing rejection text."""
        mismatch = self.check(question, current_chapter_id)
        if mismatch is not None:
            raise RelevanceMismatch(
                off_topic(mismatch.target_chapter_title, current_chapter_title,
                          mismatch.current_section_titles),
                mismatch,
            )
