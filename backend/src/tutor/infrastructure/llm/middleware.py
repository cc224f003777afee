#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import functools
import logging
import time
from typing import Callable, List, Optional

from ...core.settings import mask_key
from .router.types import LLMRequest, LLMResponse, LLMException

logger = logging.getLogger(__name__)

Attempt = Callable[[LLMRequest], LLMResponse]


class TimeoutMiddleware:
	"""Bounds every attempt; a request without its own timeout gets the default."""

	def __init__(self, default_timeout: float = 30.0):
		self.default_timeout = default_timeout

	def __call__(self, func: Attempt) -> Attempt:
		@functools.wraps(func)
		def wrapper(request: LLMRequest) -> LLMResponse:
			if not request.timeout or request.timeout <= 0:
				request.timeout = self.default_timeout
			return func(request)
		return wrapper


class LoggingMiddleware:
	def __init__(self, log_level: int = logging.INFO, log_request: bool = True, log_response: bool = True, log_errors: bool = True, mask_sensitive: bool = True):
		self.log_level = log_level
		self.log_request = log_request
		self.log_response = log_response
		self.log_errors = log_errors
		self.mask_sensitive = mask_sensitive

	def _key_label(self, request: LLMRequest) -> str:
		if not request.api_key:
			return "-"
		return mask_key(request.api_key) if self.mask_sensitive else request.api_key

	def __call__(self, func: Attempt) -> Attempt:
		@functools.wraps(func)
		def wrapper(request: LLMRequest) -> LLMResponse:
			start = time.time()
			if self.log_request and logger.isEnabledFor(self.log_level):
				logger.log(self.log_level, f"LLM request started: provider={request.provider}, model={request.model}, key={self._key_label(request)}")
			try:
				result = func(request)
				if self.log_response and logger.isEnabledFor(self.log_level):
					duration = int((time.time() - start) * 1000)
					logger.log(self.log_level, f"LLM request completed in {duration}ms: provider={request.provider}, chars={len(result.content)}")
				return result
			except LLMException as e:
				if self.log_errors:
					duration = int((time.time() - start) * 1000)
					logger.warning(f"LLM request failed in {duration}ms: provider={request.provider}, key={self._key_label(request)}, type={e.error_type}: {e}")
				raise
		return wrapper


class MiddlewareChain:
	def __init__(self, middlewares: Optional[List] = None):
		self.middlewares = middlewares or []

	def add(self, middleware) -> 'MiddlewareChain':
		self.middlewares.append(middleware)
		return self

	def apply(self, func: Attempt) -> Attempt:
		result = func
		for middleware in reversed(self.middlewares):
			result = middleware(result)
		return result


def create_default_middleware_chain(default_timeout: float = 30.0, mask_sensitive: bool = True) -> MiddlewareChain:
	# No retry layer: a failed attempt moves on to the next credential instead
	return MiddlewareChain([
		LoggingMiddleware(mask_sensitive=mask_sensitive),
		TimeoutMiddleware(default_timeout),
	])
