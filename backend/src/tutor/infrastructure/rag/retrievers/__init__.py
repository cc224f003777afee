#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from .retriever_keyword import KeywordRetriever
from .retriever_vector import EmbeddingCache, VectorRetriever

__all__ = ["KeywordRetriever", "EmbeddingCache", "VectorRetriever"]
