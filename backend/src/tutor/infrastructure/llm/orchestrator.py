#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Generation orchestrator - walks the credential chain until one call succeeds.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ...core.settings import AppSettings, ProviderSettings
from ...domain.knowledge.messages import APOLOGY
from .balancer import CredentialPool, ProviderCredential
from .middleware import MiddlewareChain, create_default_middleware_chain
from .router.core import LLMRouter
from .router.types import LLMRequest, LLMResponse, LLMException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptRecord:
	provider: str
	position: int
	latency_ms: int
	error_kind: Optional[str] = None

	@property
	def succeeded(self) -> bool:
		return self.error_kind is None


@dataclass
class GenerationResult:
	content: str
	succeeded: bool
	provider: Optional[str] = None
	model: Optional[str] = None
	attempts: List[AttemptRecord] = field(default_factory=list)
	cancelled: bool = False


class GenerationOrchestrator:
	"""
	Sequential fallback over (provider, credential) pairs.

	One call per pair, in pool order, never concurrent and never retried.
	The first non-empty answer wins; when every pair fails (or the cancel
	event is set) the result carries the fixed apology text.
	"""

	def __init__(self,
			 providers: Dict[str, ProviderSettings],
			 pool: CredentialPool,
			 router: Optional[LLMRouter] = None,
			 middleware_chain: Optional[MiddlewareChain] = None,
			 default_timeout: float = 30.0):
		self.providers = providers
		self.pool = pool
		self.router = router or LLMRouter()
		self.middleware_chain = middleware_chain or create_default_middleware_chain(default_timeout)
		self.default_timeout = default_timeout

	@classmethod
	def from_settings(cls, settings: AppSettings, router: Optional[LLMRouter] = None) -> "GenerationOrchestrator":
		order = settings.ordered_providers()
		pool = CredentialPool(
			{name: list(settings.providers[name].api_keys or []) for name in order},
			order,
		)
		chain = create_default_middleware_chain(mask_sensitive=settings.logging.mask_sensitive)
		return cls(dict(settings.providers), pool, router=router, middleware_chain=chain)

	@property
	def configured(self) -> bool:
		return len(self.pool) > 0

	def complete(self, system_prompt: str, user_prompt: str,
				 cancel_event: Optional[threading.Event] = None) -> str:
		messages = [
			{"role": "system", "content": system_prompt},
			{"role": "user", "content": user_prompt},
		]
		return self.generate(messages, cancel_event).content

	def generate(self, messages: List[Dict[str, str]],
				 cancel_event: Optional[threading.Event] = None) -> GenerationResult:
		attempts: List[AttemptRecord] = []
		for credential in self.pool:
			if cancel_event is not None and cancel_event.is_set():
				logger.info(f"Generation cancelled after {len(attempts)} attempts")
				return GenerationResult(APOLOGY, False, attempts=attempts, cancelled=True)

			start = time.time()
			try:
				response = self._attempt(credential, messages)
			except LLMException as e:
				self.pool.report_failure(credential, e)
				attempts.append(AttemptRecord(
					credential.provider, credential.position,
					int((time.time() - start) * 1000), e.error_type,
				))
				continue
			except ValueError as e:
				# Misconfigured provider (unknown adapter, empty model); skip the pair
				logger.error(f"Provider {credential.provider} misconfigured: {e}")
				attempts.append(AttemptRecord(
					credential.provider, credential.position,
					int((time.time() - start) * 1000), "config",
				))
				continue

			self.pool.report_success(credential)
			attempts.append(AttemptRecord(
				credential.provider, credential.position, response.latency_ms,
			))
			return GenerationResult(
				response.content, True,
				provider=credential.provider, model=response.model, attempts=attempts,
			)

		if attempts:
			logger.error(f"All {len(attempts)} provider attempts failed")
		return GenerationResult(APOLOGY, False, attempts=attempts)

	def _attempt(self, credential: ProviderCredential, messages: List[Dict[str, str]]) -> LLMResponse:
		config = self.providers.get(credential.provider) or ProviderSettings()
		request = LLMRequest(
			provider=credential.provider,
			model=config.model,
			messages=messages,
			temperature=config.temperature,
			max_tokens=config.max_tokens,
			timeout=config.timeout or self.default_timeout,
			api_key=credential.key,
			base_url=config.base_url,
			tags={"position": str(credential.position)},
		)

		def execute(req: LLMRequest) -> LLMResponse:
			return self.router.generate(req, kind=config.kind)

		response = self.middleware_chain.apply(execute)(request)
		if not response.content or not response.content.strip():
			raise LLMException("Provider returned empty text", "format", credential.provider)
		return response
