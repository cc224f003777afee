#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Document Chunker - sentence-bounded chunks and heading-based sections.

Chapters are first split into sections on ``##`` headings, then each
section is cut into passages that never break a sentence.
"""

import logging
import re
from typing import List

from ...domain.knowledge.schemas import Passage, Section

logger = logging.getLogger(__name__)

DEFAULT_SECTION_TITLE = "Introduction"

_SENTENCE_RE = re.compile(r"[^.!?]+(?:[.!?]+|$)")
_WHITESPACE_RE = re.compile(r"\s+")


def split_sentences(text: str) -> List[str]:
    """Split on ``.``, ``!`` and ``?`` runs; the terminator stays with its sentence."""
    normalized = _WHITESPACE_RE.sub(" ", text).strip()
    sentences = []
    for match in _SENTENCE_RE.finditer(normalized):
        sentence = match.group(0).strip()
        if sentence:
            sentences.append(sentence)
    return sentences


def split_sections(text: str) -> List[Section]:
    """
    Split markdown-ish chapter text into sections.

    A line starting with ``##`` opens a new section; single ``#`` title lines
    are dropped. Text before the first heading belongs to "Introduction".
    Sections without content are skipped.
    """
    sections: List[Section] = []
    title = DEFAULT_SECTION_TITLE
    lines: List[str] = []

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line.startswith("##"):
            if "\n".join(lines).strip():
                sections.append(Section(title=title, content="\n".join(lines).strip()))
            title = line.lstrip("#").strip() or DEFAULT_SECTION_TITLE
            lines = []
        elif line.startswith("#"):
            continue
        else:
            lines.append(raw_line)

    if "\n".join(lines).strip():
        sections.append(Section(title=title, content="\n".join(lines).strip()))
    return sections


class DocumentChunker:
    """Greedy sentence packer."""

    def __init__(self, chunk_size: int = 1000, min_chunk_length: int = 50):
        """
        Args:
            chunk_size: target upper bound for a chunk, in characters
            min_chunk_length: chunks shorter than this are discarded
        """
        self.chunk_size = chunk_size
        self.min_chunk_length = min_chunk_length

    def chunk_text(self, text: str) -> List[str]:
        """
        Pack consecutive sentences into chunks of at most ``chunk_size``.

        A sentence longer than the target becomes a chunk on its own; it is
        never split.
        """
        chunks: List[str] = []
        current = ""
        for sentence in split_sentences(text):
            if not current:
                current = sentence
            elif len(current) + 1 + len(sentence) <= self.chunk_size:
                current = f"{current} {sentence}"
            else:
                chunks.append(current)
                current = sentence
        if current:
            chunks.append(current)

        return [chunk for chunk in chunks if len(chunk) >= self.min_chunk_length]

    def chunk_sections(self, sections: List[Section]) -> List[Passage]:
        """Chunk every section and number the passages in document order."""
        passages: List[Passage] = []
        for section in sections:
            for chunk in self.chunk_text(section.content):
                passages.append(Passage(index=len(passages), text=chunk, section_title=section.title))
        return passages

    def chunk_document(self, text: str) -> List[Passage]:
        sections = split_sections(text)
        passages = self.chunk_sections(sections)
        logger.info(f"Chunked document: {len(sections)} sections, {len(passages)} passages")
        return passages
