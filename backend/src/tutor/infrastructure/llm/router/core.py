#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LLM Router Core - Dispatches one generation attempt to the right adapter.
"""

import time
import logging
from typing import Dict, List, Optional

import httpx

from .types import LLMRequest, LLMResponse, LLMException, ProviderKind
from .adapters.base import BaseLLMAdapter
from .adapters.openai import OpenAIAdapter
from .adapters.groq import GroqAdapter
from .adapters.gemini import GeminiAdapter

logger = logging.getLogger(__name__)


class LLMRouter:
    """
    Adapters are registered under a provider name ("gemini", "groq", ...);
    a name that is not registered falls back to the adapter of its wire
    format, so any OpenAI-compatible endpoint works with only a base URL.

    The router makes exactly one call per ``generate``. Fallback across
    credentials belongs to ``GenerationOrchestrator``.
    """

    def __init__(self, adapters: Optional[Dict[str, BaseLLMAdapter]] = None,
                 transport: Optional[httpx.BaseTransport] = None):
        self._adapters: Dict[str, BaseLLMAdapter] = {
            ProviderKind.OPENAI.value: OpenAIAdapter(transport=transport),
            ProviderKind.GEMINI.value: GeminiAdapter(transport=transport),
            "groq": GroqAdapter(transport=transport),
        }
        for provider, adapter in (adapters or {}).items():
            self.register_adapter(provider, adapter)

    def register_adapter(self, provider: str, adapter: BaseLLMAdapter):
        self._adapters[provider] = adapter
        logger.debug(f"Registered {adapter.__class__.__name__} for {provider}")

    @property
    def providers(self) -> List[str]:
        return sorted(self._adapters)

    def get_adapter(self, provider: str, kind: Optional[str] = None) -> BaseLLMAdapter:
        """
        Adapter registered for ``provider``, else the one for ``kind``.

        Raises:
            ValueError: If neither the provider nor its kind is registered
        """
        adapter = self._adapters.get(provider) or (self._adapters.get(kind) if kind else None)
        if adapter is None:
            raise ValueError(f"No adapter for provider '{provider}' (kind={kind}); known: {self.providers}")
        return adapter

    def generate(self, request: LLMRequest, kind: Optional[str] = None) -> LLMResponse:
        """
        Raises:
            ValueError: bad request parameters or unknown provider
            LLMException: every provider-side failure
        """
        self._validate_request(request)
        adapter = self.get_adapter(request.provider, kind)
        logger.debug(
            f"LLM call: {request.provider}:{request.model} "
            f"messages={len(request.messages)} timeout={request.timeout}s"
        )

        start_time = time.time()
        try:
            response = adapter.generate(request)
        except LLMException:
            raise
        except Exception as e:
            logger.error(f"Unexpected error from {request.provider} adapter: {e}", exc_info=True)
            raise LLMException(f"Unexpected error: {e}", "internal", request.provider, False, e)

        response.latency_ms = int((time.time() - start_time) * 1000)
        logger.debug(
            f"LLM reply: {response.provider}:{response.model} latency={response.latency_ms}ms "
            f"tokens={response.usage.get('total_tokens', 'unknown')}"
        )
        return response

    def _validate_request(self, request: LLMRequest):
        if not request.model:
            raise ValueError(f"No model configured for provider '{request.provider}'")
        if not request.messages:
            raise ValueError("Messages list cannot be empty")
        if not 0 <= request.temperature <= 2:
            raise ValueError("Temperature must be between 0 and 2")
        if request.max_tokens < 1:
            raise ValueError("max_tokens must be positive")
        if request.timeout <= 0:
            raise ValueError("timeout must be positive")
