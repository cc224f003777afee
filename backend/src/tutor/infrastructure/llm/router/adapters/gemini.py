#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Gemini Adapter - Google Generative Language API (generateContent).
"""

import logging
from typing import Dict, Any, List

from .base import BaseLLMAdapter
from ..types import LLMRequest, LLMResponse, LLMException

logger = logging.getLogger(__name__)


class GeminiAdapter(BaseLLMAdapter):
    """
    The key travels as a ``key`` query parameter; system messages are sent as
    ``systemInstruction`` and the rest as ``contents`` with user/model roles.
    """

    default_base_url = "https://generativelanguage.googleapis.com/v1beta"

    def generate(self, request: LLMRequest) -> LLMResponse:
        api_key = self._get_api_key(request)
        data, _ = self._post_json(
            request,
            f"{self._get_base_url(request)}/models/{request.model}:generateContent",
            self._build_payload(request),
            {"Content-Type": "application/json"},
            params={"key": api_key},
        )

        candidates = data.get("candidates") or []
        if not candidates:
            raise LLMException("Response has no candidates", "format", request.provider)
        parts = (candidates[0].get("content") or {}).get("parts") or []
        usage = data.get("usageMetadata") or {}
        return LLMResponse(
            content=self._require_text("".join(p.get("text", "") for p in parts), request.provider),
            model=data.get("modelVersion", request.model),
            provider=request.provider,
            usage={
                "prompt_tokens": usage.get("promptTokenCount", 0),
                "completion_tokens": usage.get("candidatesTokenCount", 0),
                "total_tokens": usage.get("totalTokenCount", 0),
            },
            latency_ms=0,
            metadata={"finish_reason": candidates[0].get("finishReason")},
        )

    def _build_payload(self, request: LLMRequest) -> Dict[str, Any]:
        system_parts: List[Dict[str, str]] = []
        contents: List[Dict[str, Any]] = []
        for msg in request.messages:
            if msg["role"] == "system":
                system_parts.append({"text": msg["content"]})
                continue
            role = "model" if msg["role"] == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": msg["content"]}]})

        payload: Dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "temperature": request.temperature,
                "maxOutputTokens": request.max_tokens,
                "topP": request.top_p,
            },
        }
        if system_parts:
            payload["systemInstruction"] = {"parts": system_parts}
        return payload
