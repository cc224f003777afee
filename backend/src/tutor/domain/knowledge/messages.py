#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Fixed, human readable strings returned to students."""

from typing import Sequence

TEXTBOOK_HEADER = "📖 From the textbook:"

APOLOGY = (
    "I apologize, but I'm having trouble generating a response right now. "
    "Please try again or rephrase your question."
)


def no_relevant_content(chapter_title: str, question: str) -> str:
    return (
        f"🚫 **I can only answer questions related to {chapter_title} in this chat.**\n\n"
        f"I couldn't find information about \"{question}\" in the **{chapter_title}** chapter.\n\n"
        "**To ask about other topics:** Switch to the appropriate chapter in the sidebar first."
    )


def chapter_not_loaded(chapter_title: str) -> str:
    return (
        f"No content is loaded for **{chapter_title}** yet. "
        "Please load the chapter material and ask again."
    )


def off_topic(target_title: str, current_title: str, section_titles: Sequence[str]) -> str:
    lines = [
        f"🚫 This question looks like it belongs to **{target_title}**, not **{current_title}**.",
        "",
        f"Switch to the **{target_title}** chapter to ask about it.",
    ]
    if section_titles:
        lines += ["", f"In **{current_title}** you can ask about:"]
        lines += [f"- {title}" for title in section_titles]
    return "\n".join(lines)


def with_header(body: str) -> str:
    return f"{TEXTBOOK_HEADER}\n\n{body}"
