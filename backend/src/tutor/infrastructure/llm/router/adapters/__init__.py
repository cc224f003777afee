#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LLM Router Adapters - Provider-specific implementations.
"""

from .base import BaseLLMAdapter
from .openai import OpenAIAdapter
from .groq import GroqAdapter
from .gemini import GeminiAdapter

__all__ = [
    'BaseLLMAdapter',
    'OpenAIAdapter',
    'GroqAdapter',
    'GeminiAdapter'
]
