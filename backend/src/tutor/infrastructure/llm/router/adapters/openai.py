#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
OpenAI Adapter - OpenAI-compatible chat completions.
"""

import logging
from typing import Dict, Any

from .base import BaseLLMAdapter
from ..types import LLMRequest, LLMResponse, LLMException

logger = logging.getLogger(__name__)


class OpenAIAdapter(BaseLLMAdapter):
    """
    ``POST {base_url}/chat/completions`` with a bearer key.

    Any OpenAI-compatible endpoint works by passing its base URL on the
    request.
    """

    default_base_url = "https://api.openai.com/v1"

    def generate(self, request: LLMRequest) -> LLMResponse:
        api_key = self._get_api_key(request)
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "User-Agent": "chapter-tutor/0.1",
        }
        data, response_headers = self._post_json(
            request, f"{self._get_base_url(request)}/chat/completions",
            self._build_payload(request), headers,
        )

        choices = data.get("choices") or []
        if not choices:
            raise LLMException("Response has no choices", "format", request.provider)
        message = choices[0].get("message") or {}
        usage = data.get("usage") or {}
        return LLMResponse(
            content=self._require_text(message.get("content"), request.provider),
            model=data.get("model", request.model),
            provider=request.provider,
            usage={
                "prompt_tokens": usage.get("prompt_tokens", 0),
                "completion_tokens": usage.get("completion_tokens", 0),
                "total_tokens": usage.get("total_tokens", 0),
            },
            latency_ms=0,  # set by router
            metadata={
                "finish_reason": choices[0].get("finish_reason"),
                "request_id": response_headers.get("x-request-id"),
            },
        )

    def _build_payload(self, request: LLMRequest) -> Dict[str, Any]:
        return {
            "model": request.model,
            "messages": [{"role": m["role"], "content": m["content"]} for m in request.messages],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "top_p": request.top_p,
        }
