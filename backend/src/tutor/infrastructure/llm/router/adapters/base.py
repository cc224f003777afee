#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Base LLM Adapter - shared HTTP plumbing for the provider adapters.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import json
import logging

import httpx

from ..types import (
    LLMRequest, LLMResponse, LLMException, LLMNetworkError,
    LLMRateLimitError, LLMServerError, LLMInvalidRequestError,
)

logger = logging.getLogger(__name__)


class BaseLLMAdapter(ABC):
    """
    One provider wire format.

    The credential is chosen by the caller and travels on the request;
    adapters never pick keys themselves. Every failure (transport, status,
    unparsable or empty body) surfaces as an ``LLMException``.
    """

    default_base_url = ""

    def __init__(self, base_url: Optional[str] = None,
                 transport: Optional[httpx.BaseTransport] = None):
        """
        Args:
            base_url: overrides ``default_base_url`` when the request has none
            transport: httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url
        self.transport = transport

    @abstractmethod
    def generate(self, request: LLMRequest) -> LLMResponse:
        """
        Raises:
            LLMException: For provider-specific errors
        """

    def complete(self, system_prompt: str, user_prompt: str, *, provider: str,
                 model: str, api_key: str, **options: Any) -> str:
        """Text in, text out: one system and one user message."""
        request = LLMRequest(
            provider=provider,
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            api_key=api_key,
            **options,
        )
        return self.generate(request).content

    def _get_api_key(self, request: LLMRequest) -> str:
        if not request.api_key:
            raise LLMInvalidRequestError(
                f"No API key supplied for provider {request.provider}",
                request.provider,
            )
        return request.api_key

    def _get_base_url(self, request: LLMRequest) -> str:
        return (request.base_url or self.base_url or self.default_base_url).rstrip("/")

    def _post_json(self, request: LLMRequest, url: str, payload: Dict[str, Any],
                   headers: Dict[str, str], params: Optional[Dict[str, str]] = None):
        """POST ``payload`` and return ``(decoded body, response headers)``."""
        timeout = httpx.Timeout(request.timeout, connect=min(request.timeout, 10.0))
        try:
            with httpx.Client(timeout=timeout, transport=self.transport) as client:
                response = client.post(url, json=payload, headers=headers, params=params)
        except httpx.TimeoutException as e:
            raise LLMNetworkError(f"Request timeout after {request.timeout}s", request.provider, e)
        except httpx.TransportError as e:
            raise LLMNetworkError(f"Network error: {e}", request.provider, e)

        if response.status_code != 200:
            raise self._handle_http_error(response.status_code, response.text, request.provider)
        try:
            return response.json(), response.headers
        except json.JSONDecodeError as e:
            raise LLMException(f"Invalid JSON response: {e}", "format", request.provider, False, e)

    def _handle_http_error(self, status_code: int, response_text: str,
                           provider: str) -> LLMException:
        snippet = response_text[:200]
        if status_code == 429:
            return LLMRateLimitError(f"Rate limit exceeded: {snippet}", provider)
        elif 400 <= status_code < 500:
            return LLMInvalidRequestError(
                f"Client error ({status_code}): {snippet}", provider, status_code
            )
        elif 500 <= status_code < 600:
            return LLMServerError(
                f"Server error ({status_code}): {snippet}", provider, status_code
            )
        return LLMException(f"HTTP error ({status_code}): {snippet}", "http", provider)

    @staticmethod
    def _require_text(text: Optional[str], provider: str) -> str:
        content = (text or "").strip()
        if not content:
            raise LLMException("Response content is empty", "format", provider)
        return content
