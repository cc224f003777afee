#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Prompt Builder - turns retrieved passages and chat history into provider messages.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

from ...domain.knowledge.schemas import ChatTurn

logger = logging.getLogger(__name__)

SYSTEM_PROMPT_TEMPLATE = """You are a physics tutor specializing in {chapter_title}.

Your role:
- Answer questions ONLY using the provided textbook content
- Be accurate, educational, and helpful
- Use clear explanations with examples when appropriate
- If the question is not related to the chapter topic, politely redirect

IMPORTANT: Only use information from the provided context. Do not add external knowledge."""

USER_PROMPT_TEMPLATE = """Context from textbook:
{context}

Student Question: {question}

Please provide a helpful answer based only on the textbook content above."""


@dataclass
class PromptContext:
    system_prompt: str
    user_prompt: str
    messages: List[Dict[str, str]]
    passage_count: int
    context_length: int


class PromptBuilder:
    """Single-prompt builder: system instruction, prior turns, then context and question."""

    def __init__(self, max_context_length: int = 6000, history_turns: int = 6):
        """
        Args:
            max_context_length: passages beyond this many characters are dropped
            history_turns: how many of the latest chat turns are replayed
        """
        self.max_context_length = max_context_length
        self.history_turns = history_turns

    def build(self, question: str, chapter_title: str, passages: Sequence[str],
              history: Sequence[ChatTurn] = ()) -> PromptContext:
        context = self._build_context(passages)
        system_prompt = SYSTEM_PROMPT_TEMPLATE.format(chapter_title=chapter_title)
        user_prompt = USER_PROMPT_TEMPLATE.format(context=context, question=question.strip())

        messages = [{"role": "system", "content": system_prompt}]
        if self.history_turns > 0:
            for turn in list(history)[-self.history_turns:]:
                role = "assistant" if turn.role == "assistant" else "user"
                messages.append({"role": role, "content": turn.content})
        messages.append({"role": "user", "content": user_prompt})

        logger.debug(f"Prompt built: passages={len(passages)}, context={len(context)} chars, history={len(messages) - 2}")
        return PromptContext(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            messages=messages,
            passage_count=len(passages),
            context_length=len(context),
        )

    def _build_context(self, passages: Sequence[str]) -> str:
        parts: List[str] = []
        total = 0
        for text in passages:
            if parts and total + len(text) > self.max_context_length:
                logger.info(f"Context truncated to {len(parts)} of {len(passages)} passages")
                break
            parts.append(text)
            total += len(text) + 2
        return "\n\n".join(parts)
