#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from .knowledge_store import (
    InMemoryKnowledgeStore,
    JsonKnowledgeStore,
    KnowledgeStore,
    create_knowledge_store,
)

__all__ = [
    "InMemoryKnowledgeStore",
    "JsonKnowledgeStore",
    "KnowledgeStore",
    "create_knowledge_store",
]
