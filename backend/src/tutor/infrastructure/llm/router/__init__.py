#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LLM Router - Provider adapters behind one generate() call.
"""

from .core import LLMRouter
from .adapters import OpenAIAdapter, GroqAdapter, GeminiAdapter
from .types import (
    LLMRequest, LLMResponse, LLMException, ProviderKind,
    LLMNetworkError, LLMRateLimitError, LLMServerError, LLMInvalidRequestError,
)

__all__ = [
    'LLMRouter',
    'OpenAIAdapter',
    'GroqAdapter',
    'GeminiAdapter',
    'LLMRequest',
    'LLMResponse',
    'LLMException',
    'ProviderKind',
    'LLMNetworkError',
    'LLMRateLimitError',
    'LLMServerError',
    'LLMInvalidRequestError',
]
