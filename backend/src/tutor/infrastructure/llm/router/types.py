#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LLM Router Types - Type definitions for the router system.
"""

from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
from enum import Enum

from ....domain.knowledge.errors import ProviderError


class ProviderKind(Enum):
    """Wire formats understood by the adapters."""
    OPENAI = "openai"
    GEMINI = "gemini"


@dataclass
class LLMRequest:
    """Request object for one generation attempt."""
    provider: str
    model: str
    messages: List[Dict[str, str]]
    temperature: float = 0.7
    max_tokens: int = 500
    top_p: float = 0.9
    timeout: float = 30.0
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class LLMResponse:
    """Response object from LLM calls."""
    content: str
    model: str
    provider: str
    usage: Dict[str, int]
    latency_ms: int
    metadata: Optional[Dict[str, Any]] = None


class LLMException(ProviderError):
    """Base exception for LLM operations."""

    def __init__(self, message: str, error_type: str = "unknown",
                 provider: str = "", retryable: bool = False,
                 original_error: Optional[Exception] = None):
        super().__init__(message, provider, original_error)
        self.error_type = error_type
        self.retryable = retryable


class LLMNetworkError(LLMException):
    """Network-related errors (timeouts, connection failures)."""

    def __init__(self, message: str, provider: str = "", original_error: Optional[Exception] = None):
        super().__init__(message, "network", provider, True, original_error)


class LLMRateLimitError(LLMException):
    """Rate limiting errors (429 responses)."""

    def __init__(self, message: str, provider: str = "", retry_after: Optional[int] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(message, "rate_limit", provider, True, original_error)
        self.retry_after = retry_after


class LLMServerError(LLMException):
    """Server-side errors (5xx responses)."""

    def __init__(self, message: str, provider: str = "", status_code: Optional[int] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(message, "server", provider, True, original_error)
        self.status_code = status_code


class LLMInvalidRequestError(LLMException):
    """Client-side errors (4xx responses, invalid parameters, rejected keys)."""

    def __init__(self, message: str, provider: str = "", status_code: Optional[int] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(message, "invalid_request", provider, False, original_error)
        self.status_code = status_code
