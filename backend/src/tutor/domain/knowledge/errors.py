#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Error kinds of the tutor pipeline.

Callers branch on ``kind`` instead of parsing messages; the human readable
strings rendered at the boundary live in ``messages``.
"""

from enum import Enum
from typing import Optional

from .schemas import TopicMismatch


class ErrorKind(str, Enum):
    INGESTION = "IngestionError"
    PROVIDER = "ProviderError"
    RELEVANCE_MISMATCH = "RelevanceMismatch"
    STORAGE = "StorageError"


class TutorError(Exception):
    kind: ErrorKind

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class IngestionError(TutorError):
    """Unreadable document or not enough extracted text."""
    kind = ErrorKind.INGESTION


class ProviderError(TutorError):
    """Embedding or generation provider failed (network, timeout, status, body)."""
    kind = ErrorKind.PROVIDER

    def __init__(self, message: str, provider: str = "", original_error: Optional[Exception] = None):
        super().__init__(message, original_error)
        self.provider = provider


class StorageError(TutorError):
    """Missing or unreadable chapter record."""
    kind = ErrorKind.STORAGE

    def __init__(self, message: str, chapter_id: str = "", original_error: Optional[Exception] = None):
        super().__init__(message, original_error)
        self.chapter_id = chapter_id


class RelevanceMismatch(TutorError):
    """Question belongs to a different loaded chapter. Not a failure."""
    kind = ErrorKind.RELEVANCE_MISMATCH

    def __init__(self, message: str, mismatch: TopicMismatch):
        super().__init__(message)
        self.mismatch = mismatch
