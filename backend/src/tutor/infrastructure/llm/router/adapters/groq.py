#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Groq Adapter - OpenAI wire format on Groq's endpoint.
"""

from .openai import OpenAIAdapter


class GroqAdapter(OpenAIAdapter):
    default_base_url = "https://api.groq.com/openai/v1"
